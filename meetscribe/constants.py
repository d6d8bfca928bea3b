"""Constants used throughout MeetScribe."""

# Segmenting. Chosen to stay under the per-request audio/token budget.
DEFAULT_SEGMENT_SECONDS = 59

# Re-encoded segment container (16-bit PCM WAV)
WAV_MIME_TYPE = "audio/wav"
PCM_SAMPLE_WIDTH = 2
PCM_NEGATIVE_SCALE = 0x8000
PCM_POSITIVE_SCALE = 0x7FFF

# Model finish reasons
FINISH_REASON_STOP = "STOP"
FINISH_REASON_SAFETY = "SAFETY"
FINISH_REASON_MAX_TOKENS = "MAX_TOKENS"

# Output filenames
TRANSCRIPT_FILENAME = "transcript.json"
MEETING_FILENAME = "meeting.json"
API_LOG_FILENAME = "api_calls.log"

# Supported input extensions for the CLI (containers ffmpeg decodes)
SUPPORTED_AUDIO_EXTENSIONS = {
    '.mp3', '.wav', '.ogg', '.oga', '.opus', '.m4a', '.webm', '.flac', '.aac', '.mp4',
    '.aiff', '.aif', '.wma', '.amr', '.caf', '.mka', '.mkv', '.mov', '.3gp'
}
