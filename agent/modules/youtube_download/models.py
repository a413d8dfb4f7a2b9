"""Pydantic models for youtube_download argument validation."""

from __future__ import annotations

from typing import Literal

from pydantic import field_validator

from shared.tool_protocol import ToolArguments


class YoutubeDownloadArgs(ToolArguments):
    url: str
    mode: Literal["audio", "video"] = "audio"
    quality: str | None = None
    subtitles: bool = False
    subtitle_langs: str | list[str] | None = None
    output_filename: str | None = None
    output_dir: str | None = None
    playlist: bool = False
    playlist_items: str | None = None
    thumbnails: bool = False
    cookies_browser: Literal["none", "chrome", "firefox", "safari", "edge", "brave", "opera"] = "none"
    list_formats: bool = False
    debug: bool = False

    @field_validator("url")
    @classmethod
    def _url_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("url must not be empty")
        return v

    @field_validator("mode", "cookies_browser", mode="before")
    @classmethod
    def _lowercase(cls, v: object) -> object:
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("quality", mode="before")
    @classmethod
    def _quality_as_text(cls, v: object) -> object:
        # Agents often send 720 rather than "720"
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v.strip() if isinstance(v, str) else v
