"""Audio transcription module — FastAPI service."""

from __future__ import annotations

import structlog
from fastapi import Depends, FastAPI, HTTPException

from modules.audio_transcribe.manifest import MANIFEST
from modules.audio_transcribe.tools import AudioTranscribeTool
from shared.auth import require_service_auth
from shared.config import get_settings
from shared.schemas.tools import HealthResponse, ModuleManifest, ToolCall, ToolResult
from shared.tool_protocol import InvocationError

structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer(),
    ],
)

logger = structlog.get_logger()
app = FastAPI(title="Audio Transcribe Module", version="1.0.0")

tools: AudioTranscribeTool | None = None


@app.on_event("startup")
async def startup():
    global tools
    tools = AudioTranscribeTool(get_settings())
    backend = await tools.select_backend()
    logger.info("audio_transcribe_ready", backend=backend.name if backend else None)


@app.get("/manifest", response_model=ModuleManifest)
async def manifest(_=Depends(require_service_auth)):
    """Return the module manifest."""
    return MANIFEST


@app.post("/execute", response_model=ToolResult)
async def execute(call: ToolCall, _=Depends(require_service_auth)):
    """Execute a tool call."""
    if tools is None:
        return ToolResult.fail("Module not ready")

    tool_name = call.tool_name.split(".")[-1]
    if tool_name != tools.name:
        return ToolResult.fail(f"Unknown tool: {call.tool_name}")

    try:
        return await tools.execute(call.arguments)
    except InvocationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.error("tool_execution_error", tool=call.tool_name, error=str(e), exc_info=True)
        return ToolResult.fail(f"Internal error: {e}")


@app.get("/health", response_model=HealthResponse)
async def health():
    return HealthResponse(status="ok")
