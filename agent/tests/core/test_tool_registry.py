"""Tests for the tool registry (module HTTP calls are mocked)."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from core.orchestrator.tool_registry import RemoteTool, ToolRegistry, build_local_registry
from modules.audio_transcribe.manifest import MANIFEST as TRANSCRIBE_MANIFEST
from modules.youtube_download.manifest import YOUTUBE_DOWNLOAD
from shared.schemas.tools import ToolCall, ToolResult
from shared.tool_protocol import InvocationError


class EchoTool:
    name = "echo"
    description = "Echo the arguments back"

    def parameter_schema(self):
        return {"type": "object", "properties": {}, "required": []}

    async def execute(self, arguments):
        if "text" not in arguments:
            raise InvocationError("echo: Missing 'text'")
        return ToolResult.ok({"text": arguments["text"]})


def _mock_client(mock_client_cls, **methods):
    mock_client = AsyncMock()
    for name, value in methods.items():
        setattr(mock_client, name, value)
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    mock_client_cls.return_value = mock_client
    return mock_client


def _response(status_code, json_body=None, text=""):
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = json_body
    resp.text = text
    return resp


# ---------------------------------------------------------------------------
# Local registry
# ---------------------------------------------------------------------------


def test_local_registry_has_both_tools(settings):
    registry = build_local_registry(settings)
    assert registry.names() == ["audio_transcribe", "youtube_download"]
    for definition in registry.definitions():
        assert definition["parameters"]["type"] == "object"


def test_duplicate_registration_rejected(settings):
    registry = ToolRegistry(settings)
    registry.register(EchoTool())
    with pytest.raises(ValueError, match="already registered"):
        registry.register(EchoTool())


def test_get_accepts_module_qualified_name(settings):
    registry = ToolRegistry(settings)
    registry.register(EchoTool())
    assert registry.get("utils.echo") is registry.get("echo")


def test_openai_format(settings):
    registry = ToolRegistry(settings)
    registry.register(EchoTool())
    [entry] = registry.tools_to_openai_format()
    assert entry["type"] == "function"
    assert entry["function"]["name"] == "echo"
    assert entry["function"]["parameters"]["type"] == "object"


@pytest.mark.asyncio
async def test_execute_tool_routes_by_name(settings):
    registry = ToolRegistry(settings)
    registry.register(EchoTool())
    result = await registry.execute_tool(ToolCall(tool_name="echo", arguments={"text": "hi"}))
    assert result.success
    assert result.data() == {"text": "hi"}


@pytest.mark.asyncio
async def test_execute_unknown_tool_is_negative_result(settings):
    registry = ToolRegistry(settings)
    result = await registry.execute_tool(ToolCall(tool_name="nope", arguments={}))
    assert not result.success
    assert result.error == "Unknown tool: nope"


@pytest.mark.asyncio
async def test_execute_tool_propagates_invocation_error(settings):
    registry = ToolRegistry(settings)
    registry.register(EchoTool())
    with pytest.raises(InvocationError, match="Missing 'text'"):
        await registry.execute_tool(ToolCall(tool_name="echo", arguments={}))


# ---------------------------------------------------------------------------
# Remote modules
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_discover_all_registers_remote_tools(settings):
    settings.module_services = {"audio_transcribe": "http://transcribe:8000"}
    registry = ToolRegistry(settings)

    with patch("core.orchestrator.tool_registry.httpx.AsyncClient") as mock_client_cls:
        _mock_client(
            mock_client_cls,
            get=AsyncMock(return_value=_response(200, TRANSCRIBE_MANIFEST.model_dump())),
        )
        await registry.discover_all()

    tool = registry.get("audio_transcribe")
    assert isinstance(tool, RemoteTool)
    assert tool.base_url == "http://transcribe:8000"
    assert tool.parameter_schema()["required"] == ["input"]


@pytest.mark.asyncio
async def test_discover_all_skips_unreachable_module(settings):
    settings.module_services = {"youtube_download": "http://yt:8000"}
    registry = ToolRegistry(settings)

    with patch("core.orchestrator.tool_registry.httpx.AsyncClient") as mock_client_cls:
        _mock_client(mock_client_cls, get=AsyncMock(side_effect=httpx.ConnectError("refused")))
        await registry.discover_all()

    assert registry.names() == []


@pytest.mark.asyncio
async def test_discover_all_keeps_local_tool_on_name_clash(settings):
    settings.module_services = {"audio_transcribe": "http://transcribe:8000"}
    registry = build_local_registry(settings)
    local = registry.get("audio_transcribe")

    with patch("core.orchestrator.tool_registry.httpx.AsyncClient") as mock_client_cls:
        _mock_client(
            mock_client_cls,
            get=AsyncMock(return_value=_response(200, TRANSCRIBE_MANIFEST.model_dump())),
        )
        await registry.discover_all()

    assert registry.get("audio_transcribe") is local


@pytest.mark.asyncio
async def test_remote_tool_returns_module_result(settings):
    tool = RemoteTool(YOUTUBE_DOWNLOAD, "http://yt:8000/", settings)

    with patch("core.orchestrator.tool_registry.httpx.AsyncClient") as mock_client_cls:
        client = _mock_client(
            mock_client_cls,
            post=AsyncMock(
                return_value=_response(200, {"success": True, "output": '{"file_paths": []}', "error": None})
            ),
        )
        result = await tool.execute({"url": "https://youtu.be/abc"})

    assert result.success
    assert client.post.await_args.args[0] == "http://yt:8000/execute"
    assert client.post.await_args.kwargs["json"] == {
        "tool_name": "youtube_download",
        "arguments": {"url": "https://youtu.be/abc"},
    }


@pytest.mark.asyncio
async def test_remote_tool_maps_422_to_invocation_error(settings):
    tool = RemoteTool(YOUTUBE_DOWNLOAD, "http://yt:8000", settings)

    with patch("core.orchestrator.tool_registry.httpx.AsyncClient") as mock_client_cls:
        _mock_client(
            mock_client_cls,
            post=AsyncMock(return_value=_response(422, {"detail": "youtube_download: Missing 'url'"})),
        )
        with pytest.raises(InvocationError, match="Missing 'url'"):
            await tool.execute({})


@pytest.mark.asyncio
async def test_remote_tool_timeout_is_negative_result(settings):
    tool = RemoteTool(YOUTUBE_DOWNLOAD, "http://yt:8000", settings)

    with patch("core.orchestrator.tool_registry.httpx.AsyncClient") as mock_client_cls:
        _mock_client(mock_client_cls, post=AsyncMock(side_effect=httpx.ReadTimeout("slow")))
        result = await tool.execute({"url": "https://youtu.be/abc"})

    assert not result.success
    assert "timed out" in result.error


@pytest.mark.asyncio
async def test_remote_tool_server_error_is_negative_result(settings):
    tool = RemoteTool(YOUTUBE_DOWNLOAD, "http://yt:8000", settings)

    with patch("core.orchestrator.tool_registry.httpx.AsyncClient") as mock_client_cls:
        _mock_client(mock_client_cls, post=AsyncMock(return_value=_response(500, text="boom")))
        result = await tool.execute({"url": "https://youtu.be/abc"})

    assert not result.success
    assert result.error == "Module returned status 500: boom"
