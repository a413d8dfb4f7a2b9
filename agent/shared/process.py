"""Async subprocess helpers for the external backends (yt-dlp, faster-whisper)."""

from __future__ import annotations

import asyncio
import contextlib
from dataclasses import dataclass

import structlog

logger = structlog.get_logger()

MAX_DIAGNOSTIC = 2000  # chars of stderr kept in error messages


@dataclass
class CommandResult:
    argv: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out

    def diagnostic(self, fallback: str = "Command failed") -> str:
        """Best human-readable reason for a failure, taken from the process output."""
        text = self.stderr.strip() or self.stdout.strip()
        if not text:
            return f"{fallback} (exit code {self.returncode})"
        if len(text) > MAX_DIAGNOSTIC:
            text = "... " + text[-MAX_DIAGNOSTIC:]
        return text


async def run_command(
    argv: list[str], *, timeout: float, cwd: str | None = None
) -> CommandResult:
    """Run ``argv`` to completion and capture its output.

    Never raises for ordinary failures: a binary that cannot be started and a
    run that exceeds ``timeout`` are both reported through the result.
    """
    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=cwd,
        )
    except OSError as e:
        logger.debug("command_spawn_failed", program=argv[0], error=str(e))
        return CommandResult(argv=argv, returncode=-1, stderr=f"Failed to start {argv[0]}: {e}")

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        # Already exited between the timeout and the kill
        with contextlib.suppress(ProcessLookupError):
            proc.kill()
        await proc.communicate()
        logger.warning("command_timed_out", program=argv[0], timeout=timeout)
        return CommandResult(
            argv=argv,
            returncode=-1,
            stderr=f"{argv[0]} timed out after {timeout}s",
            timed_out=True,
        )

    return CommandResult(
        argv=argv,
        returncode=proc.returncode if proc.returncode is not None else -1,
        stdout=stdout_bytes.decode("utf-8", errors="replace"),
        stderr=stderr_bytes.decode("utf-8", errors="replace"),
    )


async def probe(argv: list[str], *, timeout: float) -> bool:
    """Availability probe: True only if ``argv`` starts and exits with status 0."""
    result = await run_command(argv, timeout=timeout)
    if not result.ok:
        logger.debug("probe_unavailable", program=argv[0], returncode=result.returncode)
    return result.ok
