"""All magic numbers and configuration constants."""

import os

API_BASE_URL = os.environ.get("SEGMENT_STUDIO_API_URL", "http://localhost:5000/api")
SESSION_FILE = os.environ.get(
    "SEGMENT_STUDIO_SESSION",
    os.path.join(os.path.expanduser("~"), ".segment_studio", "session.json"),
)
HTTP_TIMEOUT = 60.0                 # seconds per request
SEGMENT_FIELD = "segments"          # repeated multipart field for appended segments
RECORDING_TICK_SECONDS = 1.0        # elapsed counter resolution while recording
CAPTURE_CHUNK_MS = 1000             # audio buffered per tick
CAPTURE_SAMPLE_RATE = 44100
CAPTURE_FORMAT = "webm"             # default encoding for recorded clips
TEST_TONE_HZ = 440.0                # ToneCaptureDevice default pitch
STATUS_CLEAR_SECONDS = 5.0          # transient banner lifetime
FIRST_ORDER = 1                     # first position in every parent scope
DEFAULT_CONTENT_TYPE = "audio/mpeg"
RECORDING_NAME_PREFIX = "recording"

# export format → (content type, file extension, ffmpeg codec)
CAPTURE_FORMATS = {
    "webm": ("audio/webm", ".webm", "libopus"),
    "ogg": ("audio/ogg", ".ogg", "libopus"),
    "wav": ("audio/wav", ".wav", None),
    "mp3": ("audio/mpeg", ".mp3", None),
}

# file extension → content type for picked files
MIME_TYPES = {
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".ogg": "audio/ogg",
    ".flac": "audio/flac",
    ".webm": "audio/webm",
    ".m4a": "audio/mp4",
}
VERSION = "0.1.0"
