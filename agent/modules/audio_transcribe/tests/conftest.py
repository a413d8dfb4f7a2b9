"""Fixtures for the audio_transcribe module tests."""

from __future__ import annotations

import pytest

from shared.config import Settings
from shared.process import CommandResult


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        openai_api_key="",
        downloads_dir=str(tmp_path / "downloads"),
        transcripts_dir=str(tmp_path / "transcripts"),
        service_auth_token="",
    )


@pytest.fixture
def make_result():
    def _make(returncode: int = 0, stdout: str = "", stderr: str = ""):
        return CommandResult(argv=["fake"], returncode=returncode, stdout=stdout, stderr=stderr)

    return _make
