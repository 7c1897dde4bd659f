import asyncio
import base64
from pathlib import Path
from typing import List, Optional

import numpy as np
import pytest

from veo_studio.models import GenerationRequest, VideoArtifact, VideoHandle
from veo_studio.services.generation import CredentialProvider, GenerationService
from veo_studio.services.playback import AudioOutput, PlaybackSource


@pytest.fixture(autouse=True)
def mock_cloud_env(monkeypatch):
    """Automatically mock credentials for all tests"""
    monkeypatch.setenv("GEMINI_API_KEY", "mock-key")


def pcm_payload(samples) -> str:
    """Base64 PCM16 payload from interleaved integer samples."""
    return base64.b64encode(np.asarray(samples, dtype="<i2").tobytes()).decode("ascii")


def make_artifact(
    uri: str = "files/video-1",
    url: Optional[str] = "file:///tmp/video-1.mp4",
    video_path: Optional[Path] = None,
) -> VideoArtifact:
    return VideoArtifact(
        handle=VideoHandle(uri=uri, raw=object()),
        url=url,
        video_bytes=b"\x00\x00\x00\x18ftypmp42",
        video_path=video_path,
    )


class FakeGenerationService(GenerationService):
    """Records calls; results, failures and delays are configurable per call type."""

    def __init__(self):
        self.video_calls: List[GenerationRequest] = []
        self.speech_calls: List[tuple] = []
        self.artifact = make_artifact()
        self.speech = pcm_payload([0, 16384, -16384, 32767, -32768] * 10)
        self.video_error: Optional[Exception] = None
        self.speech_error: Optional[Exception] = None
        self.video_delay = 0.0
        self.speech_delay = 0.0
        self.cancelled: List[str] = []

    async def _wait(self, call: str, delay: float) -> None:
        try:
            await asyncio.sleep(delay)
        except asyncio.CancelledError:
            self.cancelled.append(call)
            raise

    async def generate_video(self, request: GenerationRequest) -> VideoArtifact:
        self.video_calls.append(request)
        if self.video_delay:
            await self._wait("video", self.video_delay)
        if self.video_error:
            raise self.video_error
        return self.artifact

    async def generate_speech(self, dialogue: str, voice_tone: str) -> str:
        self.speech_calls.append((dialogue, voice_tone))
        if self.speech_delay:
            await self._wait("speech", self.speech_delay)
        if self.speech_error:
            raise self.speech_error
        return self.speech


class FakeCredentials(CredentialProvider):
    def __init__(self, has_key: bool = True):
        self.has_key = has_key
        self.check_error: Optional[Exception] = None
        self.open_calls = 0

    async def has_selected_api_key(self) -> bool:
        if self.check_error:
            raise self.check_error
        return self.has_key

    async def open_select_key(self) -> None:
        self.open_calls += 1
        self.has_key = True


class FakeSource(PlaybackSource):
    def __init__(self):
        self.stopped = False

    def stop(self) -> None:
        self.stopped = True


class FakeAudioOutput(AudioOutput):
    """Output device double; every instance is tracked on the class."""

    instances: List["FakeAudioOutput"] = []

    def __init__(self, sample_rate: int):
        self.sample_rate = sample_rate
        self.sources: List[FakeSource] = []
        self.closed = False
        FakeAudioOutput.instances.append(self)

    def start(self, buffer) -> FakeSource:
        assert not self.closed
        source = FakeSource()
        self.sources.append(source)
        return source

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_service():
    return FakeGenerationService()


@pytest.fixture
def fake_credentials():
    return FakeCredentials()


@pytest.fixture
def fake_output():
    FakeAudioOutput.instances = []
    yield FakeAudioOutput
    FakeAudioOutput.instances = []
