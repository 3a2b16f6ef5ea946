"""Configuration constants, recognised option values, and .env loading.

WHY: The client and CLI need the instance URL and an optional API key
without hardcoding either. The recognised request option values are
plain data so the CLI can offer them as choices and humans can update
them when the API grows new options.

HOW: python-dotenv loads the .env file on import. Constants are
module-level tuples and strings. load_base_url() gives a clear error
when the instance URL is missing; load_api_key() returns None when no
key is configured (public instances need none).

RULES:
- COBALT_API holds the instance base URL (e.g. https://api.cobalt.tools)
- COBALT_API_KEY is optional, never hardcoded
- Option tuples are advisory only: the client never validates against them
"""

from __future__ import annotations

import os
from typing import Optional

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()

AUTH_SCHEME = "Api-Key"
"""Fixed scheme used in the Authorization header: ``Api-Key <key>``."""

# ---------------------------------------------------------------------------
# Recognised request option values
# ---------------------------------------------------------------------------

AUDIO_BITRATES = ("320", "256", "128", "96", "64", "8")
AUDIO_FORMATS = ("best", "mp3", "ogg", "wav", "opus")
DOWNLOAD_MODES = ("auto", "audio", "mute")
FILENAME_STYLES = ("classic", "pretty", "basic", "nerdy")
VIDEO_QUALITIES = (
    "max", "4320", "2160", "1440", "1080", "720", "480", "360", "240", "144",
)
LOCAL_PROCESSING_MODES = ("disabled", "preferred", "forced")
YOUTUBE_VIDEO_CODECS = ("h264", "av1", "vp9")
YOUTUBE_VIDEO_CONTAINERS = ("auto", "mp4", "webm", "mkv")


def load_base_url() -> str:
    """Load the cobalt instance URL from the environment.

    RULES:
    - Raises ValueError if COBALT_API is missing or empty
    """
    url = os.getenv("COBALT_API", "").strip()
    if not url:
        raise ValueError(
            "Cobalt instance URL not configured. "
            "Set COBALT_API in the environment or the .env file."
        )
    return url


def load_api_key() -> Optional[str]:
    """Load the optional cobalt API key; None when unset or blank."""
    key = os.getenv("COBALT_API_KEY", "").strip()
    return key or None
