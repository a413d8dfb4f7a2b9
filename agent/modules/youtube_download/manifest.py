"""YouTube download module manifest — tool definitions."""

from shared.schemas.tools import ModuleManifest, ToolDefinition, ToolParameter

COOKIE_BROWSERS = ["none", "chrome", "firefox", "safari", "edge", "brave", "opera"]

YOUTUBE_DOWNLOAD = ToolDefinition(
    name="youtube_download",
    description=(
        "Downloads audio (default) or video from YouTube (and 1000+ other sites) using yt-dlp. "
        "Supports playlists, quality selection, subtitles, thumbnails, browser cookies, format listing, "
        "and custom filenames. Returns rich metadata + actual final file paths as JSON in .output. "
        "Requires yt-dlp + ffmpeg installed. Ideal for transcription, archiving, or LLM workflows."
    ),
    parameters=[
        ToolParameter(
            name="url",
            type="string",
            description="The YouTube video or playlist URL (required)",
        ),
        ToolParameter(
            name="mode",
            type="string",
            description="Download audio only (mp3) or full video (mp4)",
            required=False,
            enum=["audio", "video"],
            default="audio",
        ),
        ToolParameter(
            name="quality",
            type="string",
            description="For video: resolution like '720', '1080', 'best'; for audio: ignored",
            required=False,
        ),
        ToolParameter(
            name="subtitles",
            type="boolean",
            description="Download subtitles (manual + auto) as .srt",
            required=False,
            default=False,
        ),
        ToolParameter(
            name="subtitle_langs",
            type=["string", "array"],
            description=(
                "Specific language codes, e.g. 'en,es,fr' or ['en','es']. If omitted but subtitles=true: 'en'. "
                "Use 'all' for everything (not recommended - rate limit risk)."
            ),
            required=False,
        ),
        ToolParameter(
            name="output_filename",
            type="string",
            description="Optional custom filename (without extension). Defaults to sanitized title (or playlist template)",
            required=False,
        ),
        ToolParameter(
            name="output_dir",
            type="string",
            description="Optional directory to download into. Defaults to ./downloads",
            required=False,
        ),
        ToolParameter(
            name="playlist",
            type="boolean",
            description="Treat URL as playlist (even if single video)",
            required=False,
            default=False,
        ),
        ToolParameter(
            name="playlist_items",
            type="string",
            description="Optional range e.g. '1-5,10' (requires playlist=true)",
            required=False,
        ),
        ToolParameter(
            name="thumbnails",
            type="boolean",
            description="Download thumbnail images",
            required=False,
            default=False,
        ),
        ToolParameter(
            name="cookies_browser",
            type="string",
            description="Use cookies from browser to bypass age-restrictions / login walls",
            required=False,
            enum=COOKIE_BROWSERS,
            default="none",
        ),
        ToolParameter(
            name="list_formats",
            type="boolean",
            description="Only list available formats, do NOT download",
            required=False,
            default=False,
        ),
        ToolParameter(
            name="debug",
            type="boolean",
            description="Include the underlying yt-dlp command in the output to help debug issues",
            required=False,
            default=False,
        ),
    ],
    required_permission="user",
)

MANIFEST = ModuleManifest(
    module_name="youtube_download",
    description="Download audio, video, subtitles and thumbnails from YouTube and other sites via yt-dlp.",
    tools=[YOUTUBE_DOWNLOAD],
)
