"""Decoded audio container."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np


@dataclass
class AudioBuffer:
    """Planar float samples in [-1.0, 1.0], one array per channel."""

    sample_rate: int
    channel_data: list[np.ndarray] = field(default_factory=list)

    @property
    def number_of_channels(self) -> int:
        return len(self.channel_data)

    @property
    def length(self) -> int:
        """Frames per channel."""
        return len(self.channel_data[0]) if self.channel_data else 0

    @property
    def duration(self) -> float:
        return self.length / self.sample_rate if self.sample_rate else 0.0

    def get_channel_data(self, channel: int) -> np.ndarray:
        return self.channel_data[channel]

    def to_pcm16(self) -> bytes:
        """Re-interleave as signed 16-bit little-endian PCM for an output device."""
        if not self.channel_data:
            return b""
        interleaved = np.stack(self.channel_data, axis=1).reshape(-1)
        scaled = np.clip(np.round(interleaved * 32768.0), -32768, 32767)
        return scaled.astype("<i2").tobytes()
