"""Tool and module manifest schemas."""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict


class ToolParameter(BaseModel):
    """Parameter definition for a tool."""

    name: str
    type: str | list[str]  # string, integer, boolean, number, array, object
    description: str
    required: bool = True
    enum: list[str] | None = None
    default: Any = None


class ToolDefinition(BaseModel):
    """Definition of a single tool exposed by a module."""

    name: str  # e.g. "youtube_download"
    description: str
    parameters: list[ToolParameter]
    required_permission: str = "guest"  # minimum permission level

    def to_json_schema(self) -> dict[str, Any]:
        """Render the parameters as a JSON-schema object."""
        properties: dict[str, Any] = {}
        required: list[str] = []
        for param in self.parameters:
            prop: dict[str, Any] = {
                "type": param.type,
                "description": param.description,
            }
            if param.enum:
                prop["enum"] = param.enum
            if param.default is not None:
                prop["default"] = param.default
            properties[param.name] = prop
            if param.required:
                required.append(param.name)
        return {
            "type": "object",
            "properties": properties,
            "required": required,
        }


class ModuleManifest(BaseModel):
    """Manifest describing a module and its tools."""

    module_name: str
    description: str
    tools: list[ToolDefinition]


class HealthResponse(BaseModel):
    """Body of a module service's /health endpoint."""

    status: str = "ok"


class ToolCall(BaseModel):
    """A tool call request."""

    tool_name: str
    arguments: dict


class ToolResult(BaseModel):
    """Outcome of a tool invocation.

    ``output`` is conventionally a JSON document serialized to text;
    ``error`` is set whenever ``success`` is false.
    """

    model_config = ConfigDict(frozen=True)

    success: bool
    output: str = ""
    error: str | None = None

    @classmethod
    def ok(cls, output: str | dict | list) -> ToolResult:
        if not isinstance(output, str):
            output = json.dumps(output)
        return cls(success=True, output=output)

    @classmethod
    def fail(cls, error: str, output: str | dict | list = "") -> ToolResult:
        if not isinstance(output, str):
            output = json.dumps(output)
        return cls(success=False, output=output, error=error or "Tool execution failed")

    def data(self) -> Any:
        """Parse ``output`` as JSON.

        Raises:
            ValueError: If the output is not a JSON document.
        """
        return json.loads(self.output)
