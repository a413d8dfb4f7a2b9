"""Audio transcription tool implementation."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol

import structlog

from modules.audio_transcribe.backends import LocalWhisperBackend, OpenAIWhisperBackend
from modules.audio_transcribe.fetch import FetchError, materialize_audio
from modules.audio_transcribe.manifest import AUDIO_TRANSCRIBE
from modules.audio_transcribe.models import AudioTranscribeArgs
from shared.config import Settings
from shared.file_utils import discard_if_empty, make_run_dir, prepare_output_dir
from shared.schemas.tools import ToolResult
from shared.tool_protocol import parse_arguments

logger = structlog.get_logger()

NO_BACKEND = (
    "Neither faster-whisper nor OPENAI_API_KEY is available. "
    "Install faster-whisper or set OPENAI_API_KEY env var."
)


class TranscriptionBackend(Protocol):
    name: str

    async def is_available(self) -> bool: ...

    async def transcribe(
        self, audio_path: Path, args: AudioTranscribeArgs, run_dir: Path
    ) -> ToolResult: ...


class AudioTranscribeTool:
    """Transcribes local audio or online media, preferring the offline backend."""

    name = AUDIO_TRANSCRIBE.name
    description = AUDIO_TRANSCRIBE.description

    def __init__(self, settings: Settings, backends: list[TranscriptionBackend] | None = None):
        self.settings = settings
        # Order is preference: first available backend wins
        self.backends: list[TranscriptionBackend] = backends or [
            LocalWhisperBackend(settings),
            OpenAIWhisperBackend(settings),
        ]

    def parameter_schema(self) -> dict[str, Any]:
        return AUDIO_TRANSCRIBE.to_json_schema()

    async def select_backend(self) -> TranscriptionBackend | None:
        for backend in self.backends:
            if await backend.is_available():
                return backend
        return None

    async def execute(self, arguments: dict[str, Any]) -> ToolResult:
        args = parse_arguments(AudioTranscribeArgs, arguments, self.name)

        backend = await self.select_backend()
        if backend is None:
            logger.warning("transcribe_no_backend")
            return ToolResult.fail(NO_BACKEND)
        logger.info("transcribe_backend_selected", backend=backend.name, remote_input=args.is_remote)

        output_dir = prepare_output_dir(args.output_dir or self.settings.transcripts_dir)
        run_dir = make_run_dir(output_dir)
        try:
            if args.is_remote:
                return await self._transcribe_url(backend, args, run_dir)

            audio_path = Path(args.input).expanduser()
            if not audio_path.is_file():
                return ToolResult.fail(f"Audio file not found: {audio_path}")
            return await backend.transcribe(audio_path, args, run_dir)
        finally:
            discard_if_empty(run_dir)

    async def _transcribe_url(
        self, backend: TranscriptionBackend, args: AudioTranscribeArgs, run_dir: Path
    ) -> ToolResult:
        try:
            async with materialize_audio(args.input, self.settings) as audio_path:
                return await backend.transcribe(audio_path, args, run_dir)
        except FetchError as e:
            error = f"Failed to download audio from URL: {e}"
            return ToolResult.fail(error, {"transient": self.settings.is_transient(error)})
