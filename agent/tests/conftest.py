"""Shared test fixtures for the agent test suite.

Provides isolated settings and a fake subprocess runner so tool tests can
run without yt-dlp, faster-whisper or network access.
"""

from __future__ import annotations

import pytest

from shared.config import Settings
from shared.process import CommandResult


@pytest.fixture
def settings(tmp_path):
    """Settings pointing every output location into ``tmp_path``."""
    return Settings(
        _env_file=None,
        openai_api_key="",
        downloads_dir=str(tmp_path / "downloads"),
        transcripts_dir=str(tmp_path / "transcripts"),
        service_auth_token="",
    )


@pytest.fixture
def make_result():
    """Factory for CommandResult objects."""

    def _make(returncode: int = 0, stdout: str = "", stderr: str = "", argv=None, timed_out=False):
        return CommandResult(
            argv=argv or ["fake"],
            returncode=returncode,
            stdout=stdout,
            stderr=stderr,
            timed_out=timed_out,
        )

    return _make
