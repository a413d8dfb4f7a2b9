"""Tests for the media-agent CLI."""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from cli import cli
from core.orchestrator.tool_registry import ToolRegistry
from shared.schemas.tools import ToolResult
from shared.tool_protocol import InvocationError


class StubTool:
    name = "stub"
    description = "Stub tool\nSecond line is not listed."

    def parameter_schema(self):
        return {"type": "object", "properties": {"x": {"type": "string"}}, "required": ["x"]}

    async def execute(self, arguments):
        if "x" not in arguments:
            raise InvocationError("stub: Missing 'x'")
        if arguments["x"] == "bad":
            return ToolResult.fail("it broke", {"transient": False})
        return ToolResult.ok({"x": arguments["x"]})


@pytest.fixture
def registry(settings):
    reg = ToolRegistry(settings)
    reg.register(StubTool())
    return reg


@pytest.fixture
def runner():
    return CliRunner()


def test_tools_lists_first_description_line(runner, registry):
    with patch("cli._registry", return_value=registry):
        result = runner.invoke(cli, ["tools"])
    assert result.exit_code == 0
    assert result.stdout.strip() == "stub: Stub tool"


def test_describe_prints_schema(runner, registry):
    with patch("cli._registry", return_value=registry):
        result = runner.invoke(cli, ["describe", "stub"])
    assert result.exit_code == 0
    assert json.loads(result.stdout)["required"] == ["x"]


def test_describe_unknown_tool(runner, registry):
    with patch("cli._registry", return_value=registry):
        result = runner.invoke(cli, ["describe", "missing"])
    assert result.exit_code == 1
    assert "Unknown tool: missing" in result.output


def test_run_prints_result(runner, registry):
    with patch("cli._registry", return_value=registry):
        result = runner.invoke(cli, ["run", "stub", "--args", '{"x": "hello"}'])
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["success"] is True
    assert json.loads(payload["output"]) == {"x": "hello"}


def test_run_negative_result_exits_one(runner, registry):
    with patch("cli._registry", return_value=registry):
        result = runner.invoke(cli, ["run", "stub", "--args", '{"x": "bad"}'])
    assert result.exit_code == 1
    assert json.loads(result.stdout)["error"] == "it broke"


def test_run_invalid_json_is_usage_error(runner, registry):
    with patch("cli._registry", return_value=registry):
        result = runner.invoke(cli, ["run", "stub", "--args", "{not json"])
    assert result.exit_code == 2
    assert "not valid JSON" in result.output


def test_run_invocation_error_is_usage_error(runner, registry):
    with patch("cli._registry", return_value=registry):
        result = runner.invoke(cli, ["run", "stub"])
    assert result.exit_code == 2
    assert "Missing 'x'" in result.output


def test_run_keeps_logs_off_stdout(runner, registry):
    with patch("cli._registry", return_value=registry):
        result = runner.invoke(cli, ["run", "stub", "--args", '{"x": "bad"}'])
    assert result.exit_code == 1
    assert json.loads(result.stdout)["success"] is False
    assert "tool_call" in result.stderr
    assert "tool_call" not in result.stdout


@pytest.mark.parametrize("raw", ["[1]", '"text"', "3", "null"])
def test_run_non_object_args_is_usage_error(runner, registry, raw):
    with patch("cli._registry", return_value=registry):
        result = runner.invoke(cli, ["run", "stub", "--args", raw])
    assert result.exit_code == 2
    assert "--args must be a JSON object" in result.output
