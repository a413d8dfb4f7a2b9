"""Output directory helpers shared by the tool modules."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from pathlib import Path

import structlog

from shared.tool_protocol import InvocationError

logger = structlog.get_logger()


def prepare_output_dir(raw: str) -> Path:
    """Resolve ``raw`` against the working directory and create it.

    Raises:
        InvocationError: If the directory cannot be created.
    """
    path = Path(raw).expanduser().resolve()
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise InvocationError(f"Cannot create output directory {path}: {e}") from e
    return path


def make_run_dir(parent: Path) -> Path:
    """Create a fresh subdirectory of ``parent`` owned by a single invocation.

    Concurrent invocations sharing ``parent`` never see each other's files.
    """
    stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S")
    run_dir = parent / f"{stamp}_{uuid.uuid4().hex[:8]}"
    try:
        run_dir.mkdir(parents=True)
    except OSError as e:
        raise InvocationError(f"Cannot create run directory {run_dir}: {e}") from e
    return run_dir


def discard_if_empty(path: Path) -> None:
    """Remove ``path`` if nothing was written into it."""
    try:
        if path.is_dir() and not any(path.iterdir()):
            path.rmdir()
    except OSError as e:
        logger.debug("run_dir_cleanup_failed", path=str(path), error=str(e))
