"""Materialize remote media into a local audio file for transcription."""

from __future__ import annotations

import shlex
import shutil
import tempfile
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

import structlog

from shared.config import Settings
from shared.process import run_command

logger = structlog.get_logger()


class FetchError(RuntimeError):
    """The remote input could not be turned into a local audio file."""


@asynccontextmanager
async def materialize_audio(url: str, settings: Settings) -> AsyncIterator[Path]:
    """Download the audio track of ``url`` into a private temporary directory.

    Yields the path of the extracted mp3.  The directory and everything in it
    is removed when the block exits, whatever the outcome.

    Raises:
        FetchError: If yt-dlp fails or produces no file.
    """
    workdir = Path(tempfile.mkdtemp(prefix="yt_audio_"))
    try:
        argv = [
            *shlex.split(settings.ytdlp_command),
            "--extract-audio",
            "--audio-format", "mp3",
            "-o", str(workdir / "audio.%(ext)s"),
            "--no-playlist",
            "--no-warnings",
            url,
        ]
        result = await run_command(argv, timeout=settings.download_timeout)
        if not result.ok:
            logger.warning("audio_fetch_failed", url=url, returncode=result.returncode)
            raise FetchError(result.diagnostic("yt-dlp could not download the audio"))

        produced = sorted(p for p in workdir.iterdir() if p.is_file())
        if not produced:
            raise FetchError("yt-dlp exited successfully but produced no audio file")

        audio = next((p for p in produced if p.suffix == ".mp3"), produced[0])
        logger.info("audio_fetched", url=url, path=str(audio))
        yield audio
    finally:
        shutil.rmtree(workdir, ignore_errors=True)
