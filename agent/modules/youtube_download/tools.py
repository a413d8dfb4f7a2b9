"""YouTube download tool implementation (yt-dlp backend)."""

from __future__ import annotations

import shlex
from pathlib import Path
from typing import Any

import structlog

from modules.youtube_download.manifest import YOUTUBE_DOWNLOAD
from modules.youtube_download.models import YoutubeDownloadArgs
from modules.youtube_download.ytdlp import (
    build_download_command,
    build_info_command,
    build_list_formats_command,
    output_template,
    parse_metadata,
    parse_printed_paths,
)
from shared.config import Settings
from shared.file_utils import prepare_output_dir
from shared.process import probe, run_command
from shared.schemas.tools import ToolResult
from shared.tool_protocol import parse_arguments

logger = structlog.get_logger()

YTDLP_MISSING = (
    "yt-dlp not found in PATH. Install with: pip install yt-dlp (or brew install yt-dlp ffmpeg on macOS); "
    "ffmpeg is required for audio extraction and merging."
)
METADATA_TIMEOUT = 120  # seconds for -J / -F lookups


class YoutubeDownloadTool:
    """Downloads media with yt-dlp and reports the files it produced."""

    name = YOUTUBE_DOWNLOAD.name
    description = YOUTUBE_DOWNLOAD.description

    def __init__(self, settings: Settings):
        self.settings = settings
        self.binary = shlex.split(settings.ytdlp_command)

    def parameter_schema(self) -> dict[str, Any]:
        return YOUTUBE_DOWNLOAD.to_json_schema()

    async def is_available(self) -> bool:
        return await probe([*self.binary, "--version"], timeout=self.settings.probe_timeout)

    async def execute(self, arguments: dict[str, Any]) -> ToolResult:
        args = parse_arguments(YoutubeDownloadArgs, arguments, self.name)

        if not await self.is_available():
            logger.warning("ytdlp_unavailable", command=self.settings.ytdlp_command)
            return ToolResult.fail(YTDLP_MISSING)

        output_dir = prepare_output_dir(args.output_dir or self.settings.downloads_dir)

        if args.list_formats:
            return await self._list_formats(args)

        metadata = await self._fetch_metadata(args)

        argv = build_download_command(self.binary, args, str(output_dir / output_template(args)))
        if args.debug:
            logger.info("ytdlp_command", command=shlex.join(argv))

        result = await run_command(argv, timeout=self.settings.download_timeout)
        printed = parse_printed_paths(result.stdout)

        # Exit status alone is not trusted: every reported file must exist
        file_paths = [p for p in printed.file_paths if Path(p).exists()]
        missing_paths = [p for p in printed.file_paths if not Path(p).exists()]
        success = result.ok and bool(file_paths) and not missing_paths

        payload: dict[str, Any] = {
            "file_paths": file_paths,
            "thumbnail_paths": printed.thumbnail_paths,
            "metadata": metadata,
            "output_dir": str(output_dir),
            "message": (
                f"Successfully downloaded {len(file_paths)} file(s)" if file_paths else "No files downloaded"
            ),
        }
        if missing_paths:
            payload["missing_paths"] = missing_paths
        if args.debug:
            payload["command"] = argv

        if success:
            logger.info("download_finished", url=args.url, files=len(file_paths), mode=args.mode)
            return ToolResult.ok(payload)

        if not result.ok:
            error = result.diagnostic("yt-dlp execution failed")
        elif missing_paths:
            error = f"yt-dlp reported files that do not exist: {', '.join(missing_paths)}"
        else:
            error = "yt-dlp exited successfully but produced no files"
        payload["transient"] = self.settings.is_transient(error)
        logger.warning(
            "download_failed",
            url=args.url,
            returncode=result.returncode,
            transient=payload["transient"],
        )
        return ToolResult.fail(error, payload)

    async def _list_formats(self, args: YoutubeDownloadArgs) -> ToolResult:
        result = await run_command(
            build_list_formats_command(self.binary, args.url), timeout=METADATA_TIMEOUT
        )
        if result.ok:
            return ToolResult.ok(result.stdout)
        return ToolResult.fail(result.diagnostic("yt-dlp -F failed"), result.stderr)

    async def _fetch_metadata(self, args: YoutubeDownloadArgs) -> dict:
        result = await run_command(build_info_command(self.binary, args), timeout=METADATA_TIMEOUT)
        if not result.ok:
            logger.info("metadata_unavailable", url=args.url, returncode=result.returncode)
            return {"title": "Unknown"}
        return parse_metadata(result.stdout)
