"""
Data models for the studio.
"""

from .audio import AudioBuffer
from .generation import (
    VeoModel,
    AspectRatio,
    Resolution,
    EXTEND_RESOLUTION,
    GenerationMode,
    ImageFile,
    VideoFile,
    VideoHandle,
    GenerationRequest,
    StoryScript,
    VideoArtifact,
    GenerationResult,
)
from .status import SessionStatus, SessionState

__all__ = [
    "AudioBuffer",
    "VeoModel",
    "AspectRatio",
    "Resolution",
    "EXTEND_RESOLUTION",
    "GenerationMode",
    "ImageFile",
    "VideoFile",
    "VideoHandle",
    "GenerationRequest",
    "StoryScript",
    "VideoArtifact",
    "GenerationResult",
    "SessionStatus",
    "SessionState",
]
