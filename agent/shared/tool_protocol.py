"""The contract every tool implements, and argument parsing for it.

A tool is anything with a ``name``, a ``description``, a
``parameter_schema()`` and an async ``execute(arguments)``.  There is no base
class: the registry only relies on this protocol.

``execute`` has two failure channels.  A malformed call (missing required
field, wrong type) raises :class:`InvocationError` before any external work
starts.  Everything that goes wrong once the call is attempted (missing
binary, non-zero exit, HTTP error) comes back as a negative
:class:`~shared.schemas.tools.ToolResult`.
"""

from __future__ import annotations

from typing import Any, Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel, ConfigDict, ValidationError

from shared.schemas.tools import ToolResult


class InvocationError(ValueError):
    """The tool call could not be attempted."""


@runtime_checkable
class Tool(Protocol):
    name: str
    description: str

    def parameter_schema(self) -> dict[str, Any]: ...

    async def execute(self, arguments: dict[str, Any]) -> ToolResult: ...


class ToolArguments(BaseModel):
    """Base for typed tool arguments. Unknown keys are ignored."""

    model_config = ConfigDict(extra="ignore")


ArgsT = TypeVar("ArgsT", bound=ToolArguments)


def parse_arguments(model: type[ArgsT], arguments: Any, tool_name: str) -> ArgsT:
    """Validate an untyped argument document against ``model``.

    Raises:
        InvocationError: If the document is not an object, a required field
            is missing, or a field has the wrong type or value.
    """
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, dict):
        raise InvocationError(f"{tool_name}: arguments must be an object, got {type(arguments).__name__}")

    try:
        return model.model_validate(arguments)
    except ValidationError as e:
        missing: list[str] = []
        invalid: list[str] = []
        for err in e.errors():
            field = ".".join(str(p) for p in err["loc"]) or "<root>"
            if err["type"] == "missing":
                missing.append(f"'{field}'")
            else:
                invalid.append(f"'{field}' ({err['msg']})")
        parts = []
        if missing:
            parts.append(f"Missing {', '.join(missing)}")
        if invalid:
            parts.append(f"Invalid {', '.join(invalid)}")
        raise InvocationError(f"{tool_name}: {'; '.join(parts)}") from e
