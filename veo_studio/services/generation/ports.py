"""
Contracts for the collaborators the generation layer depends on.

The orchestrator and the session controller only see these interfaces, so
they can be driven from HTTP, a CLI or tests without a live service.
"""

from abc import ABC, abstractmethod

from veo_studio.models import GenerationRequest, VideoArtifact


class GenerationService(ABC):
    """Video and speech generation calls."""

    @abstractmethod
    async def generate_video(self, request: GenerationRequest) -> VideoArtifact:
        """
        Generate one video for the request.

        Raises:
            UpstreamCallError (or any exception) on upstream failure
        """

    @abstractmethod
    async def generate_speech(self, dialogue: str, voice_tone: str) -> str:
        """Synthesize dialogue and return base64-encoded raw PCM16."""


class CredentialProvider(ABC):
    """Gate in front of every generation attempt."""

    @abstractmethod
    async def has_selected_api_key(self) -> bool:
        ...

    @abstractmethod
    async def open_select_key(self) -> None:
        ...
