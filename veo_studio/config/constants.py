"""
Generation constants shared by the orchestrator, decoder and service client.
"""

from typing import Tuple

# Speech payloads are raw signed 16-bit little-endian PCM
AUDIO_SAMPLE_RATE = 24000
AUDIO_CHANNELS = 1
PCM_SAMPLE_WIDTH = 2
PCM_NORMALIZER = 32768.0

# Aspect-ratio hints looked for in a story's image prompt. Order matters:
# portrait is checked before landscape.
PORTRAIT_MARKERS: Tuple[str, ...] = ("9:16", "vertical")
LANDSCAPE_MARKERS: Tuple[str, ...] = ("16:9", "landscape")

# Failure markers reported by the generation service
NOT_FOUND_MARKERS: Tuple[str, ...] = ("Requested entity was not found.",)
INVALID_KEY_MARKERS: Tuple[str, ...] = ("API_KEY_INVALID", "API key not valid")
PERMISSION_DENIED_MARKER = "permission denied"

EXTENDED_VIDEO_FILENAME = "last_video.mp4"
VIDEO_MIME_TYPE = "video/mp4"
