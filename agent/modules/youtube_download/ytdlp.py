"""yt-dlp command construction and output parsing."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field

from modules.youtube_download.models import YoutubeDownloadArgs

# Marker prefixes emitted through --print, one line per produced file
FILEPATH_MARKER = "filepath:"
THUMBNAIL_MARKER = "thumbnail:"

SINGLE_TEMPLATE = "%(title)s.%(ext)s"
PLAYLIST_TEMPLATE = "%(playlist)s/%(playlist_index)02d - %(title)s.%(ext)s"

_UNSAFE_FILENAME_CHARS = re.compile(r"[^\w \-]", re.UNICODE)


def sanitize_filename(name: str) -> str:
    """Replace anything but alphanumerics, space, '-' and '_' with '_'."""
    return _UNSAFE_FILENAME_CHARS.sub("_", name.strip()).strip()


def output_template(args: YoutubeDownloadArgs) -> str:
    """yt-dlp output template, relative to the output directory."""
    if args.output_filename and args.output_filename.strip():
        return f"{sanitize_filename(args.output_filename)}.%(ext)s"
    if args.playlist:
        return PLAYLIST_TEMPLATE
    return SINGLE_TEMPLATE


def resolve_subtitle_langs(value: str | list[str] | None) -> str:
    """Normalize subtitle languages to yt-dlp's comma-separated form.

    Defaults to English; ``all`` (any case) is passed through as ``all``.
    """
    if value is None:
        return "en"
    if isinstance(value, list):
        return ",".join(v.strip() for v in value if isinstance(v, str) and v.strip())
    value = value.strip()
    if value.lower() == "all":
        return "all"
    return value


def format_selector(quality: str | None) -> str:
    """Video format selector capped at ``quality`` lines of height."""
    if not quality or quality.lower() == "best":
        return "bestvideo+bestaudio/best"
    return f"bestvideo[height<={quality.rstrip('pP')}]+bestaudio/best"


def build_list_formats_command(binary: list[str], url: str) -> list[str]:
    return [*binary, "-F", "--no-warnings", url]


def build_info_command(binary: list[str], args: YoutubeDownloadArgs) -> list[str]:
    """Metadata-only invocation: prints a JSON document, downloads nothing."""
    argv = [*binary, "-J", "--no-download", "--no-warnings"]
    if args.playlist:
        if args.playlist_items:
            argv += ["-I", args.playlist_items]
    else:
        argv.append("--no-playlist")
    argv.append(args.url)
    return argv


def build_download_command(
    binary: list[str], args: YoutubeDownloadArgs, template_path: str
) -> list[str]:
    argv = [
        *binary,
        "-o", template_path,
        "--restrict-filenames",
        "--no-warnings",
        "--no-simulate",
        # Final path after ffmpeg post-processing has moved the file
        "--print", f"after_move:{FILEPATH_MARKER}%(filepath)s",
    ]

    if args.subtitles:
        argv.append("--write-subs")
        langs = resolve_subtitle_langs(args.subtitle_langs)
        if langs:
            argv += ["--sub-langs", langs]
            if langs == "all":
                # Every language is one request each; throttle to dodge HTTP 429
                argv += ["--sleep-requests", "1.5"]
            else:
                argv.append("--write-auto-subs")
        argv += ["--convert-subs", "srt"]

    if args.thumbnails:
        # Local path of the written thumbnail
        argv += ["--write-thumbnail", "--print", f"after_move:{THUMBNAIL_MARKER}%(thumbnails.-1.filepath)s"]
    if args.cookies_browser != "none":
        argv += ["--cookies-from-browser", args.cookies_browser]

    if args.playlist:
        argv.append("--yes-playlist")
        if args.playlist_items:
            argv += ["-I", args.playlist_items]
    else:
        argv.append("--no-playlist")

    if args.mode == "audio":
        argv += ["--extract-audio", "--audio-format", "mp3", "--audio-quality", "0"]
    else:
        argv += ["--merge-output-format", "mp4", "-f", format_selector(args.quality)]

    argv.append(args.url)
    return argv


@dataclass
class PrintedPaths:
    file_paths: list[str] = field(default_factory=list)
    thumbnail_paths: list[str] = field(default_factory=list)


def parse_printed_paths(stdout: str) -> PrintedPaths:
    """Collect paths from the marker lines yt-dlp printed on stdout."""
    parsed = PrintedPaths()
    for line in stdout.splitlines():
        line = line.strip()
        if line.startswith(FILEPATH_MARKER):
            path = line[len(FILEPATH_MARKER):].strip()
            if path and path != "NA":
                parsed.file_paths.append(path)
        elif line.startswith(THUMBNAIL_MARKER):
            path = line[len(THUMBNAIL_MARKER):].strip()
            if path and path != "NA":
                parsed.thumbnail_paths.append(path)
    return parsed


METADATA_FIELDS = (
    "id",
    "title",
    "uploader",
    "channel",
    "duration",
    "upload_date",
    "webpage_url",
    "view_count",
    "extractor",
    "_type",
)


def parse_metadata(stdout: str) -> dict:
    """Parse ``yt-dlp -J`` output, degrading to a placeholder title.

    The full info document carries every available format and can run to
    megabytes, so only descriptive fields are kept. Playlists also keep a
    short listing of their entries.
    """
    try:
        data = json.loads(stdout)
    except (TypeError, ValueError):
        return {"title": "Unknown"}
    if not isinstance(data, dict):
        return {"title": "Unknown"}

    summary = {k: data[k] for k in METADATA_FIELDS if data.get(k) is not None}
    summary.setdefault("title", "Unknown")
    entries = data.get("entries")
    if isinstance(entries, list):
        summary["entries"] = [
            {k: e[k] for k in ("id", "title", "duration") if e.get(k) is not None}
            for e in entries
            if isinstance(e, dict)
        ]
    return summary
