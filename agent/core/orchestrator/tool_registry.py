"""Tool registry - dispatches tool calls by name to in-process or remote tools."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from shared.auth import service_auth_headers
from shared.config import Settings
from shared.schemas.tools import ModuleManifest, ToolCall, ToolDefinition, ToolResult
from shared.tool_protocol import InvocationError, Tool

logger = structlog.get_logger()


class RemoteTool:
    """Proxy for a tool served by a module's ``/execute`` endpoint."""

    def __init__(self, definition: ToolDefinition, base_url: str, settings: Settings):
        self.definition = definition
        self.name = definition.name.split(".")[-1]
        self.description = definition.description
        self.base_url = base_url.rstrip("/")
        self.settings = settings

    def parameter_schema(self) -> dict[str, Any]:
        return self.definition.to_json_schema()

    async def execute(self, arguments: dict[str, Any]) -> ToolResult:
        async with httpx.AsyncClient(timeout=self.settings.http_timeout) as client:
            try:
                resp = await client.post(
                    f"{self.base_url}/execute",
                    json={"tool_name": self.definition.name, "arguments": arguments},
                    headers=service_auth_headers(self.settings.service_auth_token),
                )
            except httpx.TimeoutException:
                return ToolResult.fail(f"Tool execution timed out ({self.settings.http_timeout:g}s).")
            except httpx.HTTPError as e:
                return ToolResult.fail(f"Tool execution error: {e}")

        if resp.status_code == 422:
            raise InvocationError(_detail(resp))
        if resp.status_code != 200:
            return ToolResult.fail(f"Module returned status {resp.status_code}: {resp.text}")
        return ToolResult(**resp.json())


def _detail(resp: httpx.Response) -> str:
    try:
        detail = resp.json().get("detail")
    except (ValueError, AttributeError):
        return resp.text
    return detail if isinstance(detail, str) else str(detail)


class ToolRegistry:
    """Holds tools keyed by name and routes tool calls to them."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self._tools: dict[str, Tool] = {}

    def register(self, tool: Tool) -> None:
        if tool.name in self._tools:
            raise ValueError(f"Tool already registered: {tool.name}")
        self._tools[tool.name] = tool

    def get(self, name: str) -> Tool | None:
        # Accept module-qualified names, e.g. "media.audio_transcribe"
        return self._tools.get(name) or self._tools.get(name.split(".")[-1])

    def names(self) -> list[str]:
        return sorted(self._tools)

    def definitions(self) -> list[dict[str, Any]]:
        return [
            {
                "name": tool.name,
                "description": tool.description,
                "parameters": tool.parameter_schema(),
            }
            for _, tool in sorted(self._tools.items())
        ]

    def tools_to_openai_format(self) -> list[dict]:
        """Convert registered tools to OpenAI function calling format."""
        return [
            {
                "type": "function",
                "function": {
                    "name": d["name"],
                    "description": d["description"],
                    "parameters": d["parameters"],
                },
            }
            for d in self.definitions()
        ]

    async def discover_all(self) -> None:
        """Query every configured module service and register its tools."""
        async with httpx.AsyncClient(timeout=10.0) as client:
            for module_name, url in self.settings.module_services.items():
                try:
                    resp = await client.get(
                        f"{url.rstrip('/')}/manifest",
                        headers=service_auth_headers(self.settings.service_auth_token),
                    )
                except httpx.HTTPError as e:
                    logger.warning("module_unreachable", module=module_name, error=str(e))
                    continue

                if resp.status_code != 200:
                    logger.warning("module_manifest_error", module=module_name, status=resp.status_code)
                    continue

                try:
                    manifest = ModuleManifest(**resp.json())
                except ValueError as e:
                    logger.warning("module_manifest_invalid", module=module_name, error=str(e))
                    continue
                for definition in manifest.tools:
                    remote = RemoteTool(definition, url, self.settings)
                    if remote.name in self._tools:
                        logger.info("module_tool_shadowed", module=module_name, tool=remote.name)
                        continue
                    self._tools[remote.name] = remote
                logger.info("module_discovered", module=module_name, tools=len(manifest.tools))

    async def execute_tool(self, tool_call: ToolCall) -> ToolResult:
        """Route a tool call to the named tool.

        Unknown tools yield a negative result; an InvocationError raised by
        the tool propagates to the caller.
        """
        tool = self.get(tool_call.tool_name)
        if tool is None:
            return ToolResult.fail(f"Unknown tool: {tool_call.tool_name}")

        logger.info("tool_call", tool=tool.name)
        result = await tool.execute(tool_call.arguments)
        if not result.success:
            logger.info("tool_call_failed", tool=tool.name, error=result.error)
        return result


def build_local_registry(settings: Settings) -> ToolRegistry:
    """Registry with the in-process media tools."""
    from modules.audio_transcribe.tools import AudioTranscribeTool
    from modules.youtube_download.tools import YoutubeDownloadTool

    registry = ToolRegistry(settings)
    registry.register(YoutubeDownloadTool(settings))
    registry.register(AudioTranscribeTool(settings))
    return registry
