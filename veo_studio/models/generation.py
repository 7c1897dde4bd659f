"""
Generation schemas

Request, story and result models shared by the orchestrator, the session
controller and the HTTP layer.
"""

import base64
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional

from pydantic import BaseModel, Field, model_validator

from veo_studio.config import VEO_MODEL

from .audio import AudioBuffer


class VeoModel(str, Enum):
    """Veo model variants."""
    VEO_FAST = "veo-3.1-fast-generate-preview"
    VEO = "veo-3.1-generate-preview"


class AspectRatio(str, Enum):
    """Video aspect ratios."""
    LANDSCAPE = "16:9"
    PORTRAIT = "9:16"


class Resolution(str, Enum):
    """Video resolutions."""
    P720 = "720p"
    P1080 = "1080p"


# Only 720p videos can be extended by the service
EXTEND_RESOLUTION = Resolution.P720


class GenerationMode(str, Enum):
    """Video generation modes."""
    TEXT_TO_VIDEO = "text_to_video"
    FRAMES_TO_VIDEO = "frames_to_video"
    REFERENCES_TO_VIDEO = "references_to_video"
    STORY_TO_VIDEO = "story_to_video"
    EXTEND_VIDEO = "extend_video"

    @property
    def with_speech(self) -> bool:
        return self is GenerationMode.STORY_TO_VIDEO


class ImageFile(BaseModel):
    """Image attachment for frame-based or reference-based generation."""
    mime_type: str = Field(..., description="Image MIME type (e.g., image/png, image/jpeg)")
    data: str = Field(..., description="Base64-encoded image data")

    def to_bytes(self) -> bytes:
        return base64.b64decode(self.data)


class VideoFile(BaseModel):
    """A previously generated video wrapped as an input attachment."""
    file_name: str
    mime_type: str = "video/mp4"
    content: bytes = Field(default=b"", exclude=True, repr=False)


class VideoHandle(BaseModel):
    """Opaque reference to a video held by the generation service."""
    uri: Optional[str] = None
    # SDK object passed back verbatim when extending
    raw: Any = Field(default=None, exclude=True, repr=False)


class GenerationRequest(BaseModel):
    """A single user request for one generation attempt."""
    mode: GenerationMode = GenerationMode.TEXT_TO_VIDEO
    prompt: str = ""
    model: VeoModel = Field(default_factory=lambda: VeoModel(VEO_MODEL))
    aspect_ratio: AspectRatio = AspectRatio.LANDSCAPE
    resolution: Resolution = Resolution.P720

    # Frames to video mode
    start_frame: Optional[ImageFile] = None
    end_frame: Optional[ImageFile] = None
    is_looping: bool = False

    # References to video mode
    reference_images: List[ImageFile] = Field(default_factory=list)
    style_image: Optional[ImageFile] = None

    # Extend video mode
    input_video: Optional[VideoFile] = None
    input_video_handle: Optional[VideoHandle] = None

    @model_validator(mode="after")
    def _check_extend(self) -> "GenerationRequest":
        if self.mode is GenerationMode.EXTEND_VIDEO:
            if self.input_video_handle is None:
                raise ValueError("extend_video requires the handle of a previously generated video")
            self.resolution = EXTEND_RESOLUTION
        return self


class StoryScript(BaseModel):
    """Structured payload carried in the prompt of a story_to_video request."""
    dialogue: str
    voice_tone: str
    image_prompt: str


@dataclass
class VideoArtifact:
    """What the service returns for one video call."""
    handle: VideoHandle
    url: Optional[str]
    video_bytes: bytes
    mime_type: str = "video/mp4"
    # Local copy written by the service, if any
    video_path: Optional[Path] = None


@dataclass
class GenerationResult:
    """Outcome of a successful generation attempt."""
    mode: GenerationMode
    video_handle: VideoHandle
    video_url: Optional[str]
    video_bytes: bytes
    mime_type: str = "video/mp4"
    video_path: Optional[Path] = None
    audio: Optional[AudioBuffer] = None
