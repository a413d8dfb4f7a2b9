"""Audio transcription module manifest — tool definitions."""

from shared.schemas.tools import ModuleManifest, ToolDefinition, ToolParameter

TRANSCRIPT_FORMATS = ["text", "json", "srt", "vtt"]

AUDIO_TRANSCRIBE = ToolDefinition(
    name="audio_transcribe",
    description=(
        "Transcribes audio from local file or YouTube URL using local faster-whisper "
        "(preferred, offline, fast) or OpenAI Whisper API fallback. Supports timestamps, "
        "SRT/VTT, initial prompt. Ideal for voice notes, meetings, podcasts. "
        "Returns JSON with the transcript, the backend used and any generated files."
    ),
    parameters=[
        ToolParameter(
            name="input",
            type="string",
            description="Local audio path or YouTube URL (required)",
        ),
        ToolParameter(
            name="model",
            type="string",
            description="faster-whisper model or OpenAI model. 'auto' picks the backend default",
            required=False,
            default="auto",
        ),
        ToolParameter(
            name="language",
            type="string",
            description="Spoken language code (e.g. 'en'), or 'auto' to detect",
            required=False,
            default="auto",
        ),
        ToolParameter(
            name="format",
            type="string",
            description="Transcript format",
            required=False,
            enum=TRANSCRIPT_FORMATS,
            default="text",
        ),
        ToolParameter(
            name="word_timestamps",
            type="boolean",
            description=(
                "Include word-level timestamps. With srt/vtt on the OpenAI backend the "
                "subtitle file is built from the timed segments"
            ),
            required=False,
            default=False,
        ),
        ToolParameter(
            name="initial_prompt",
            type="string",
            description="Optional priming text (names, jargon) to guide recognition",
            required=False,
        ),
        ToolParameter(
            name="output_dir",
            type="string",
            description="Optional output dir. Defaults to ./downloads/transcripts",
            required=False,
        ),
    ],
    required_permission="user",
)

MANIFEST = ModuleManifest(
    module_name="audio_transcribe",
    description="Speech-to-text for local audio files and online media via faster-whisper or the OpenAI API.",
    tools=[AUDIO_TRANSCRIBE],
)
