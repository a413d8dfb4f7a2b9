"""Pydantic models for audio_transcribe argument validation."""

from __future__ import annotations

from typing import Literal

from pydantic import field_validator

from shared.tool_protocol import ToolArguments


class AudioTranscribeArgs(ToolArguments):
    input: str
    model: str = "auto"
    language: str = "auto"
    format: Literal["text", "json", "srt", "vtt"] = "text"
    word_timestamps: bool = False
    initial_prompt: str | None = None
    output_dir: str | None = None

    @field_validator("input")
    @classmethod
    def _input_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("input must not be empty")
        return v

    @field_validator("model", "language", mode="before")
    @classmethod
    def _blank_is_auto(cls, v: object) -> object:
        if v is None or (isinstance(v, str) and not v.strip()):
            return "auto"
        return v.strip() if isinstance(v, str) else v

    @field_validator("format", mode="before")
    @classmethod
    def _lowercase(cls, v: object) -> object:
        return v.strip().lower() if isinstance(v, str) else v

    @property
    def is_remote(self) -> bool:
        return self.input.startswith(("http://", "https://"))
