"""
Gemini generation service - Veo video and Gemini TTS speech.

Implements the GenerationService contract on top of the google-genai SDK:
    - generate_video: starts a Veo long-running operation, polls it until
      done, downloads the video and stores it under OUTPUT_DIR
    - generate_speech: single-voice TTS, returned as base64 PCM16

A client is built per call from the current GEMINI_API_KEY so a key picked
through the credential flow is used by the next attempt.
"""

import asyncio
import base64
import uuid
from pathlib import Path
from typing import Any, Dict, Optional

from veo_studio.config import (
    OUTPUT_DIR,
    TTS_MODEL,
    TTS_VOICE,
    VIDEO_MIME_TYPE,
    VIDEO_POLL_INTERVAL_SECONDS,
    get_api_key,
)
from veo_studio.core import (
    CredentialError,
    UpstreamCallError,
    VeoStudioError,
    ensure_directory,
    get_logger,
)
from veo_studio.models import (
    GenerationMode,
    GenerationRequest,
    ImageFile,
    VideoArtifact,
    VideoHandle,
)
from veo_studio.services.generation.ports import GenerationService

from .audio_payload import extract_inline_audio_payload, parse_mime

logger = get_logger(__name__, component="gemini")


class GeminiGenerationService(GenerationService):
    """Veo + Gemini TTS implementation of GenerationService."""

    def __init__(
        self,
        output_dir: Optional[Path] = None,
        tts_model: str = TTS_MODEL,
        voice: str = TTS_VOICE,
        poll_interval: float = VIDEO_POLL_INTERVAL_SECONDS,
    ):
        self.output_dir = Path(output_dir) if output_dir else OUTPUT_DIR
        self.tts_model = tts_model
        self.voice = voice
        self.poll_interval = poll_interval

    def _client(self) -> Any:
        from google import genai

        api_key = get_api_key()
        if not api_key:
            raise CredentialError("GEMINI_API_KEY is not set. Select an API key first.")
        return genai.Client(api_key=api_key)

    # ------------------------------------------------------------------
    # Video
    # ------------------------------------------------------------------

    async def generate_video(self, request: GenerationRequest) -> VideoArtifact:
        try:
            return await self._generate_video(request)
        except VeoStudioError:
            raise
        except Exception as exc:
            raise UpstreamCallError(str(exc), status_code=getattr(exc, "code", None)) from exc

    async def _generate_video(self, request: GenerationRequest) -> VideoArtifact:
        client = self._client()
        kwargs = self._video_kwargs(request)

        logger.info(
            "Requesting video",
            extra={
                "model": request.model.value,
                "mode": request.mode.value,
                "resolution": request.resolution.value,
                "aspect_ratio": request.aspect_ratio.value,
            },
        )
        operation = await asyncio.to_thread(client.models.generate_videos, **kwargs)

        while not operation.done:
            logger.debug(f"Video operation pending, polling again in {self.poll_interval}s")
            await asyncio.sleep(self.poll_interval)
            operation = await asyncio.to_thread(client.operations.get, operation)

        if operation.error:
            message = operation.error.get("message") if isinstance(operation.error, dict) else None
            raise UpstreamCallError(message or str(operation.error))

        response = operation.response
        videos = getattr(response, "generated_videos", None) if response else None
        if not videos or not videos[0].video:
            raise UpstreamCallError("No videos were generated.")

        video = videos[0].video
        video_bytes = await asyncio.to_thread(client.files.download, file=video)
        if not video_bytes:
            raise UpstreamCallError("Generated video could not be downloaded.")

        path = self._store(video_bytes)
        logger.info(f"Video ready ({len(video_bytes)} bytes)", extra={"path": str(path), "uri": video.uri})

        return VideoArtifact(
            handle=VideoHandle(uri=video.uri, raw=video),
            url=path.as_uri(),
            video_bytes=video_bytes,
            mime_type=getattr(video, "mime_type", None) or VIDEO_MIME_TYPE,
            video_path=path,
        )

    def _video_kwargs(self, request: GenerationRequest) -> Dict[str, Any]:
        from google.genai import types

        config = types.GenerateVideosConfig(
            number_of_videos=1,
            resolution=request.resolution.value,
        )
        # Extensions keep the source video's framing
        if request.mode is not GenerationMode.EXTEND_VIDEO:
            config.aspect_ratio = request.aspect_ratio.value

        kwargs: Dict[str, Any] = {"model": request.model.value, "config": config}
        if request.prompt:
            kwargs["prompt"] = request.prompt

        if request.mode is GenerationMode.FRAMES_TO_VIDEO:
            if request.start_frame:
                kwargs["image"] = _to_image(request.start_frame)
            last_frame = request.start_frame if request.is_looping else request.end_frame
            if last_frame:
                config.last_frame = _to_image(last_frame)

        elif request.mode is GenerationMode.REFERENCES_TO_VIDEO:
            references = [
                types.VideoGenerationReferenceImage(
                    image=_to_image(image),
                    reference_type=types.VideoGenerationReferenceType.ASSET,
                )
                for image in request.reference_images
            ]
            if request.style_image:
                references.append(
                    types.VideoGenerationReferenceImage(
                        image=_to_image(request.style_image),
                        reference_type=types.VideoGenerationReferenceType.STYLE,
                    )
                )
            if references:
                config.reference_images = references

        elif request.mode is GenerationMode.EXTEND_VIDEO:
            handle = request.input_video_handle
            kwargs["video"] = handle.raw if handle.raw is not None else types.Video(uri=handle.uri)

        return kwargs

    def _store(self, video_bytes: bytes) -> Path:
        path = ensure_directory(self.output_dir) / f"{uuid.uuid4().hex}.mp4"
        path.write_bytes(video_bytes)
        return path

    # ------------------------------------------------------------------
    # Speech
    # ------------------------------------------------------------------

    async def generate_speech(self, dialogue: str, voice_tone: str) -> str:
        try:
            return await self._generate_speech(dialogue, voice_tone)
        except VeoStudioError:
            raise
        except Exception as exc:
            raise UpstreamCallError(str(exc), status_code=getattr(exc, "code", None)) from exc

    async def _generate_speech(self, dialogue: str, voice_tone: str) -> str:
        from google.genai import types

        client = self._client()
        config = types.GenerateContentConfig(
            response_modalities=["AUDIO"],
            speech_config=types.SpeechConfig(
                voice_config=types.VoiceConfig(
                    prebuilt_voice_config=types.PrebuiltVoiceConfig(voice_name=self.voice)
                )
            ),
        )

        logger.info("Requesting speech", extra={"model": self.tts_model, "voice": self.voice, "chars": len(dialogue)})
        response = await asyncio.to_thread(
            client.models.generate_content,
            model=self.tts_model,
            contents=f"Say {voice_tone}: {dialogue}",
            config=config,
        )

        audio_bytes, mime_type = extract_inline_audio_payload(response)
        mime_base, params = parse_mime(mime_type)
        if mime_base and mime_base != "audio/l16":
            logger.warning(f"Unexpected speech mime type {mime_type!r}, decoding as PCM16 anyway")
        elif params.get("rate") and params["rate"] != "24000":
            logger.warning(f"Speech sample rate is {params['rate']} Hz, expected 24000")

        return base64.b64encode(audio_bytes).decode("ascii")


def _to_image(image: ImageFile) -> Any:
    from google.genai import types

    return types.Image(image_bytes=image.to_bytes(), mime_type=image.mime_type)
