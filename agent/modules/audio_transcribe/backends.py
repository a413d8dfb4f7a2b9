"""Transcription backends: local faster-whisper process and the OpenAI API.

Both expose the same surface: ``is_available()`` is a side-effect-free
availability probe, ``transcribe()`` runs the backend and normalizes its
output into a ToolResult whose ``output`` is a JSON document with at least
``transcript``, ``language``, ``model``, ``backend``, ``format`` and
``files``.
"""

from __future__ import annotations

import json
import shlex
from pathlib import Path
from typing import Any

import httpx
import structlog

from modules.audio_transcribe.models import AudioTranscribeArgs
from shared.config import Settings
from shared.process import probe, run_command
from shared.schemas.tools import ToolResult

logger = structlog.get_logger()

# Our format -> OpenAI response_format
_OPENAI_RESPONSE_FORMATS = {
    "text": "json",
    "json": "verbose_json",
    "srt": "srt",
    "vtt": "vtt",
}


def _list_files(directory: Path) -> list[str]:
    return sorted(str(p) for p in directory.iterdir() if p.is_file())


def _load_segments(directory: Path) -> list | None:
    """Segments from the first JSON transcript the backend wrote, if any."""
    for path in sorted(directory.glob("*.json")):
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            continue
        if isinstance(data, dict) and isinstance(data.get("segments"), list):
            return data["segments"]
        if isinstance(data, list):
            return data
    return None


def _cue_time(seconds: Any, sep: str) -> str:
    ms = max(0, round(float(seconds or 0) * 1000))
    hours, ms = divmod(ms, 3_600_000)
    minutes, ms = divmod(ms, 60_000)
    secs, ms = divmod(ms, 1000)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}{sep}{ms:03d}"


def render_subtitles(segments: list, fmt: str) -> str:
    """Build an SRT or WebVTT document from timed transcript segments."""
    sep = "," if fmt == "srt" else "."
    cues = []
    for index, seg in enumerate(s for s in segments if isinstance(s, dict)):
        start = _cue_time(seg.get("start"), sep)
        end = _cue_time(seg.get("end"), sep)
        text = str(seg.get("text", "")).strip()
        cue = f"{start} --> {end}\n{text}"
        cues.append(f"{index + 1}\n{cue}" if fmt == "srt" else cue)
    body = "\n\n".join(cues) + "\n"
    return f"WEBVTT\n\n{body}" if fmt == "vtt" else body


def _words_from_segments(segments: list) -> list:
    words: list = []
    for seg in segments:
        if isinstance(seg, dict) and isinstance(seg.get("words"), list):
            words.extend(seg["words"])
    return words


class LocalWhisperBackend:
    """faster-whisper invoked as a subprocess."""

    name = "local"

    def __init__(self, settings: Settings):
        self.settings = settings
        self.command = shlex.split(settings.whisper_command)

    async def is_available(self) -> bool:
        return await probe([*self.command, "--version"], timeout=self.settings.probe_timeout)

    def resolve_model(self, model: str) -> str:
        return self.settings.whisper_default_model if model == "auto" else model

    def build_command(self, audio_path: Path, args: AudioTranscribeArgs, run_dir: Path) -> list[str]:
        argv = [
            *self.command,
            str(audio_path),
            "--model", self.resolve_model(args.model),
            "--format", args.format,
            "--output_dir", str(run_dir),
        ]
        if args.language != "auto":
            argv += ["--language", args.language]
        if args.word_timestamps:
            argv.append("--word-timestamps")
        if args.initial_prompt:
            argv += ["--initial-prompt", args.initial_prompt]
        return argv

    async def transcribe(self, audio_path: Path, args: AudioTranscribeArgs, run_dir: Path) -> ToolResult:
        argv = self.build_command(audio_path, args, run_dir)
        result = await run_command(argv, timeout=self.settings.transcribe_timeout)

        transcript = result.stdout.strip() if result.ok else ""
        # run_dir is private to this invocation, so everything in it is ours
        files = _list_files(run_dir)

        payload: dict[str, Any] = {
            "transcript": transcript,
            "language": args.language,
            "model": self.resolve_model(args.model),
            "backend": self.name,
            "format": args.format,
            "files": files,
        }
        if args.format == "json":
            segments = _load_segments(run_dir)
            if segments is not None:
                payload["segments"] = segments
                if not transcript:
                    payload["transcript"] = " ".join(
                        str(s.get("text", "")).strip() for s in segments if isinstance(s, dict)
                    ).strip()
                if args.word_timestamps:
                    payload["words"] = _words_from_segments(segments)

        if result.ok and (payload["transcript"] or files):
            return ToolResult.ok(payload)

        if not result.ok:
            error = result.diagnostic("faster-whisper execution failed")
        else:
            error = "faster-whisper exited successfully but produced no transcript"
        return ToolResult.fail(error, payload)


class OpenAIWhisperBackend:
    """OpenAI-compatible /audio/transcriptions endpoint."""

    name = "openai"

    def __init__(self, settings: Settings):
        self.settings = settings

    async def is_available(self) -> bool:
        return bool(self.settings.openai_api_key)

    def resolve_model(self, model: str) -> str:
        return self.settings.openai_transcription_model if model == "auto" else model

    @staticmethod
    def response_format(args: AudioTranscribeArgs) -> str:
        if args.word_timestamps:
            return "verbose_json"
        return _OPENAI_RESPONSE_FORMATS[args.format]

    def build_form(self, args: AudioTranscribeArgs) -> dict[str, Any]:
        data: dict[str, Any] = {
            "model": self.resolve_model(args.model),
            "response_format": self.response_format(args),
        }
        if args.language != "auto":
            data["language"] = args.language
        if args.initial_prompt:
            data["prompt"] = args.initial_prompt
        if args.word_timestamps:
            data["timestamp_granularities[]"] = ["word", "segment"]
        return data

    async def transcribe(self, audio_path: Path, args: AudioTranscribeArgs, run_dir: Path) -> ToolResult:
        url = f"{self.settings.openai_base_url.rstrip('/')}/audio/transcriptions"
        data = self.build_form(args)

        try:
            audio_bytes = audio_path.read_bytes()
        except OSError as e:
            return ToolResult.fail(f"Cannot read audio file {audio_path}: {e}")

        try:
            async with httpx.AsyncClient(timeout=self.settings.transcribe_timeout) as client:
                resp = await client.post(
                    url,
                    headers={"Authorization": f"Bearer {self.settings.openai_api_key}"},
                    data=data,
                    files={"file": (audio_path.name, audio_bytes, "application/octet-stream")},
                )
        except httpx.TimeoutException:
            return ToolResult.fail(
                f"OpenAI transcription timed out after {self.settings.transcribe_timeout}s"
            )
        except httpx.HTTPError as e:
            logger.warning("openai_transcription_request_failed", error=str(e))
            return ToolResult.fail(f"OpenAI transcription request failed: {e}")

        if resp.status_code != 200:
            return ToolResult.fail(f"OpenAI API returned {resp.status_code}: {_api_error(resp)}")

        return self._normalize(resp, args, run_dir)

    def _normalize(self, resp: httpx.Response, args: AudioTranscribeArgs, run_dir: Path) -> ToolResult:
        payload: dict[str, Any] = {
            "transcript": "",
            "language": args.language,
            "model": self.resolve_model(args.model),
            "backend": self.name,
            "format": args.format,
            "files": [],
        }

        if self.response_format(args) in ("json", "verbose_json"):
            try:
                body = resp.json()
            except ValueError:
                body = None
            if not isinstance(body, dict):
                return ToolResult.fail("OpenAI API returned an unparseable response", payload)
            payload["transcript"] = str(body.get("text", "")).strip()
            if body.get("language"):
                payload["language"] = body["language"]
            if body.get("duration") is not None:
                payload["duration"] = body["duration"]
            if isinstance(body.get("segments"), list):
                payload["segments"] = body["segments"]
            if isinstance(body.get("words"), list):
                payload["words"] = body["words"]
            if args.format in ("srt", "vtt"):
                # Word timestamps force verbose_json; subtitles are rendered here
                if not payload.get("segments"):
                    return ToolResult.fail(
                        f"OpenAI API returned no segments to build {args.format} subtitles from", payload
                    )
                target = run_dir / f"transcript.{args.format}"
                target.write_text(render_subtitles(payload["segments"], args.format), encoding="utf-8")
                payload["files"] = [str(target)]
        else:
            subtitles = resp.text
            payload["transcript"] = subtitles.strip()
            target = run_dir / f"transcript.{args.format}"
            target.write_text(subtitles, encoding="utf-8")
            payload["files"] = [str(target)]

        if not payload["transcript"]:
            return ToolResult.fail("OpenAI API returned an empty transcript", payload)
        return ToolResult.ok(payload)


def _api_error(resp: httpx.Response) -> str:
    """Pull the error message out of an OpenAI-style error body."""
    try:
        body = resp.json()
    except ValueError:
        return resp.text[:500] or resp.reason_phrase
    err = body.get("error") if isinstance(body, dict) else None
    if isinstance(err, dict) and err.get("message"):
        return str(err["message"])
    if isinstance(err, str):
        return err
    return resp.text[:500] or resp.reason_phrase
