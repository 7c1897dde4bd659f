"""Derive an extend request from a finished generation."""

from veo_studio.config import EXTENDED_VIDEO_FILENAME
from veo_studio.models import (
    EXTEND_RESOLUTION,
    GenerationMode,
    GenerationRequest,
    GenerationResult,
    VideoFile,
)


def build_extend_request(last_request: GenerationRequest, last_result: GenerationResult) -> GenerationRequest:
    """
    Build the pre-fill request that continues ``last_result``.

    Model and aspect ratio carry over; the prompt and every other attachment
    start empty. Callers gate on ``last_request.resolution`` being the
    extend tier; that is not re-checked here.
    """
    video = VideoFile(
        file_name=EXTENDED_VIDEO_FILENAME,
        mime_type=last_result.mime_type,
        content=last_result.video_bytes,
    )
    return GenerationRequest(
        mode=GenerationMode.EXTEND_VIDEO,
        prompt="",
        model=last_request.model,
        aspect_ratio=last_request.aspect_ratio,
        resolution=EXTEND_RESOLUTION,
        input_video=video,
        input_video_handle=last_result.video_handle,
        start_frame=None,
        end_frame=None,
        reference_images=[],
        style_image=None,
        is_looping=False,
    )
