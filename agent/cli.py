"""Command-line entry point for running the media tools locally."""

from __future__ import annotations

import asyncio
import json
import sys

import click
import structlog


def run_async(coro):
    """Run an async function in a new event loop."""
    return asyncio.run(coro)


def _stderr_logger(*args):
    # Resolve sys.stderr per logger so stdout stays reserved for results
    return structlog.PrintLogger(file=sys.stderr)


def _registry():
    from core.orchestrator.tool_registry import build_local_registry
    from shared.config import get_settings

    return build_local_registry(get_settings())


@click.group()
def cli():
    """Media agent tools CLI."""
    structlog.configure(logger_factory=_stderr_logger)


@cli.command("tools")
def list_tools():
    """List the registered tools."""
    for definition in _registry().definitions():
        summary = definition["description"].splitlines()[0] if definition["description"] else ""
        click.echo(f"{definition['name']}: {summary}")


@cli.command()
@click.argument("name")
def describe(name):
    """Print a tool's parameter schema as JSON."""
    tool = _registry().get(name)
    if tool is None:
        raise click.ClickException(f"Unknown tool: {name}")
    click.echo(json.dumps(tool.parameter_schema(), indent=2))


@cli.command()
@click.argument("name")
@click.option("--args", "raw_args", default="{}", help="Tool arguments as a JSON object.")
def run(name, raw_args):
    """Execute a tool and print its result as JSON."""
    from shared.schemas.tools import ToolCall
    from shared.tool_protocol import InvocationError

    try:
        arguments = json.loads(raw_args)
    except ValueError as e:
        raise click.UsageError(f"--args is not valid JSON: {e}")
    if not isinstance(arguments, dict):
        raise click.UsageError("--args must be a JSON object")

    registry = _registry()
    if registry.get(name) is None:
        raise click.ClickException(f"Unknown tool: {name}")

    try:
        result = run_async(registry.execute_tool(ToolCall(tool_name=name, arguments=arguments)))
    except InvocationError as e:
        raise click.UsageError(str(e))

    click.echo(result.model_dump_json(indent=2))
    if not result.success:
        raise SystemExit(1)


SERVICE_APPS = {
    "youtube_download": "modules.youtube_download.main:app",
    "audio_transcribe": "modules.audio_transcribe.main:app",
}


@cli.command()
@click.argument("module", type=click.Choice(sorted(SERVICE_APPS)))
@click.option("--host", default="0.0.0.0", show_default=True)
@click.option("--port", default=8000, show_default=True, type=int)
def serve(module, host, port):
    """Serve a tool module over HTTP (/manifest, /execute, /health)."""
    run_async(_serve(SERVICE_APPS[module], host, port))


async def _serve(app_path: str, host: str, port: int):
    import uvicorn

    config = uvicorn.Config(app_path, host=host, port=port, log_level="info")
    server = uvicorn.Server(config)
    await server.serve()


if __name__ == "__main__":
    cli()
