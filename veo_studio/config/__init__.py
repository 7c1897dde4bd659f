"""
Application configuration and settings
"""

import os
from pathlib import Path

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()

from .constants import (
    AUDIO_SAMPLE_RATE,
    AUDIO_CHANNELS,
    PCM_SAMPLE_WIDTH,
    PCM_NORMALIZER,
    PORTRAIT_MARKERS,
    LANDSCAPE_MARKERS,
    NOT_FOUND_MARKERS,
    INVALID_KEY_MARKERS,
    PERMISSION_DENIED_MARKER,
    EXTENDED_VIDEO_FILENAME,
    VIDEO_MIME_TYPE,
)

# Base directories
PACKAGE_DIR = Path(__file__).parent.parent
PROJECT_DIR = PACKAGE_DIR.parent
OUTPUT_DIR = Path(os.getenv("OUTPUT_DIR", str(PROJECT_DIR / "outputs")))

# API settings
API_TITLE = "Veo Studio API"
API_DESCRIPTION = "Generate, narrate and extend videos with Veo and Gemini TTS"
API_VERSION = "1.0.0"

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173,http://localhost:3000").split(",")
    if origin.strip()
]

# Generation service
DEFAULT_VEO_MODEL = "veo-3.1-fast-generate-preview"
VEO_MODEL = os.getenv("VEO_MODEL", DEFAULT_VEO_MODEL)
TTS_MODEL = os.getenv("TTS_MODEL", "gemini-2.5-flash-preview-tts")
TTS_VOICE = os.getenv("TTS_VOICE", "Kore")
VIDEO_POLL_INTERVAL_SECONDS = float(os.getenv("VIDEO_POLL_INTERVAL_SECONDS", "10"))


def get_api_key() -> str | None:
    """Current Gemini API key, read on every call so a reselection takes effect."""
    return os.getenv("GEMINI_API_KEY", "").strip() or None


def parse_bool_env(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


__all__ = [
    "AUDIO_SAMPLE_RATE",
    "AUDIO_CHANNELS",
    "PCM_SAMPLE_WIDTH",
    "PCM_NORMALIZER",
    "PORTRAIT_MARKERS",
    "LANDSCAPE_MARKERS",
    "NOT_FOUND_MARKERS",
    "INVALID_KEY_MARKERS",
    "PERMISSION_DENIED_MARKER",
    "EXTENDED_VIDEO_FILENAME",
    "VIDEO_MIME_TYPE",
    "PACKAGE_DIR",
    "PROJECT_DIR",
    "OUTPUT_DIR",
    "API_TITLE",
    "API_DESCRIPTION",
    "API_VERSION",
    "CORS_ORIGINS",
    "DEFAULT_VEO_MODEL",
    "VEO_MODEL",
    "TTS_MODEL",
    "TTS_VOICE",
    "VIDEO_POLL_INTERVAL_SECONDS",
    "get_api_key",
    "parse_bool_env",
]
