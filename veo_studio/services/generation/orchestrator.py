"""
Generation orchestrator.

Drives one generation attempt from a GenerationRequest to either a
GenerationResult or a classified failure:

    1. story_to_video prompts are parsed as a StoryScript and the image
       prompt may override the aspect ratio
    2. the video call (and, for stories, the speech call) are issued
       concurrently in a task group; the first failure cancels the other
    3. a speech payload is decoded to a 24 kHz mono AudioBuffer
    4. everything that goes wrong is classified at this boundary

The orchestrator holds no per-attempt state; the session controller owns
whatever it returns.
"""

import asyncio
import uuid
from dataclasses import dataclass
from typing import Optional

from veo_studio.core import DecodeError, LogTimer, get_logger, remove_file, set_attempt_id
from veo_studio.models import GenerationMode, GenerationRequest, GenerationResult, VideoArtifact
from veo_studio.services.audio import AudioDecoder

from .errors import ClassifiedError, classify_error
from .ports import GenerationService
from .story import infer_aspect_ratio, parse_story_script

logger = get_logger(__name__, component="orchestrator")


@dataclass
class GenerationOutcome:
    """Either a result or a classified error, never both."""
    result: Optional[GenerationResult] = None
    error: Optional[ClassifiedError] = None

    @property
    def ok(self) -> bool:
        return self.result is not None


class GenerationOrchestrator:
    """Runs generation attempts against a GenerationService."""

    def __init__(self, service: GenerationService, decoder: Optional[AudioDecoder] = None):
        self.service = service
        self.decoder = decoder or AudioDecoder()

    async def execute(self, request: GenerationRequest) -> GenerationOutcome:
        attempt_id = uuid.uuid4().hex
        set_attempt_id(attempt_id)
        logger.info(
            "Starting generation attempt",
            extra={"mode": request.mode.value, "aspect_ratio": request.aspect_ratio.value},
        )

        try:
            with LogTimer(logger, f"generation attempt ({request.mode.value})"):
                result = await self._run(request)
        except Exception as exc:
            classified = classify_error(exc)
            logger.error(
                "Video generation failed",
                extra={
                    "category": classified.category.value,
                    "needs_credential_reselection": classified.needs_credential_reselection,
                    "error": classified.raw_message,
                    "status_code": getattr(exc, "status_code", None),
                },
                exc_info=True,
            )
            return GenerationOutcome(error=classified)

        return GenerationOutcome(result=result)

    async def _run(self, request: GenerationRequest) -> GenerationResult:
        if request.mode.with_speech:
            return await self._run_story(request)
        return await self._run_video(request)

    async def _run_video(self, request: GenerationRequest) -> GenerationResult:
        artifact = await self.service.generate_video(request)
        return self._assemble(request.mode, artifact)

    async def _run_story(self, request: GenerationRequest) -> GenerationResult:
        script = parse_story_script(request.prompt)
        aspect_ratio = infer_aspect_ratio(script.image_prompt, request.aspect_ratio)
        if aspect_ratio is not request.aspect_ratio:
            logger.info(
                f"Image prompt overrides aspect ratio {request.aspect_ratio.value} -> {aspect_ratio.value}"
            )

        video_request = request.model_copy(update={"prompt": script.image_prompt, "aspect_ratio": aspect_ratio})

        # First failure wins; the sibling call is cancelled and its outcome discarded
        try:
            async with asyncio.TaskGroup() as group:
                video_task = group.create_task(self.service.generate_video(video_request))
                speech_task = group.create_task(
                    self.service.generate_speech(script.dialogue, script.voice_tone)
                )
        except ExceptionGroup as failures:
            if video_task.done() and not video_task.cancelled() and video_task.exception() is None:
                remove_file(video_task.result().video_path)
            raise failures.exceptions[0] from None

        artifact, speech_payload = video_task.result(), speech_task.result()

        try:
            audio = self.decoder.decode(speech_payload)
        except DecodeError:
            remove_file(artifact.video_path)
            raise
        return self._assemble(request.mode, artifact, audio)

    @staticmethod
    def _assemble(mode: GenerationMode, artifact: VideoArtifact, audio=None) -> GenerationResult:
        return GenerationResult(
            mode=mode,
            video_handle=artifact.handle,
            video_url=artifact.url,
            video_bytes=artifact.video_bytes,
            mime_type=artifact.mime_type,
            video_path=artifact.video_path,
            audio=audio,
        )
