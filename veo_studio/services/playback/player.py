"""
Narration playback for the displayed result.

AudioPlayback owns one output context and at most one playing source. The
context is opened on the first play() and closed by release(); starting a
new playback always stops the previous source first.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from veo_studio.core import get_logger
from veo_studio.models import AudioBuffer

logger = get_logger(__name__, component="playback")


class PlaybackSource(ABC):
    @abstractmethod
    def stop(self) -> None:
        ...


class AudioOutput(ABC):
    """An opened output device bound to a sample rate."""

    @abstractmethod
    def start(self, buffer: AudioBuffer) -> PlaybackSource:
        ...

    @abstractmethod
    def close(self) -> None:
        ...


def require_pydub() -> tuple[Any, Any]:
    try:
        from pydub import AudioSegment
        from pydub.playback import _play_with_simpleaudio
    except ImportError as exc:
        raise RuntimeError(
            "Missing dependency: pydub. Install with: pip install 'veo-studio[playback]'"
        ) from exc
    return AudioSegment, _play_with_simpleaudio


class _SimpleAudioSource(PlaybackSource):
    def __init__(self, play_object: Any):
        self._play_object = play_object

    def stop(self) -> None:
        self._play_object.stop()


class PydubAudioOutput(AudioOutput):
    """Local speaker output through pydub (simpleaudio backend)."""

    def __init__(self, sample_rate: int):
        self.sample_rate = sample_rate
        self._audio_segment_cls, self._play = require_pydub()

    def start(self, buffer: AudioBuffer) -> PlaybackSource:
        segment = self._audio_segment_cls(
            data=buffer.to_pcm16(),
            sample_width=2,
            frame_rate=buffer.sample_rate,
            channels=buffer.number_of_channels,
        )
        return _SimpleAudioSource(self._play(segment))

    def close(self) -> None:
        pass


OutputFactory = Callable[[int], AudioOutput]


class AudioPlayback:
    """Scoped playback of one AudioBuffer."""

    def __init__(self, buffer: Optional[AudioBuffer], output_factory: OutputFactory = PydubAudioOutput):
        self.buffer = buffer
        self._output_factory = output_factory
        self._output: Optional[AudioOutput] = None
        self._source: Optional[PlaybackSource] = None

    @property
    def is_open(self) -> bool:
        return self._output is not None

    @property
    def is_playing(self) -> bool:
        return self._source is not None

    def play(self) -> None:
        """Start the narration from the top, replacing any running source."""
        if self.buffer is None:
            return

        if self._output is None:
            self._output = self._output_factory(self.buffer.sample_rate)
            logger.debug(f"Opened audio output at {self.buffer.sample_rate} Hz")

        self.stop()
        self._source = self._output.start(self.buffer)

    def stop(self) -> None:
        source, self._source = self._source, None
        if source is not None:
            source.stop()

    def release(self) -> None:
        """Stop playback and close the output context. Safe to call repeatedly."""
        output, self._output = self._output, None
        try:
            self.stop()
        finally:
            if output is not None:
                output.close()
                logger.debug("Closed audio output")

    def __enter__(self) -> "AudioPlayback":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()
