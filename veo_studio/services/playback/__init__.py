"""Narration playback."""

from .player import AudioOutput, AudioPlayback, PlaybackSource, PydubAudioOutput

__all__ = ["AudioOutput", "AudioPlayback", "PlaybackSource", "PydubAudioOutput"]
