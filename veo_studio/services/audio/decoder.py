"""Raw speech payload decoding.

The speech model answers with base64-encoded signed 16-bit little-endian PCM
and no container. These helpers turn that into an AudioBuffer of planar
float samples.
"""

from __future__ import annotations

import base64
import binascii
import io
import wave

import numpy as np

from veo_studio.config import AUDIO_CHANNELS, AUDIO_SAMPLE_RATE, PCM_NORMALIZER, PCM_SAMPLE_WIDTH
from veo_studio.core import DecodeError, get_logger
from veo_studio.models import AudioBuffer

logger = get_logger(__name__, component="audio_decoder")


def decode_base64_audio(payload: str | bytes) -> bytes:
    if isinstance(payload, str):
        payload = payload.strip()
    if not payload:
        raise DecodeError("Speech payload is empty")
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError("Unable to decode base64 audio payload") from exc


def decode_pcm16(data: bytes, sample_rate: int, channels: int) -> AudioBuffer:
    """
    Decode interleaved PCM16 into one normalized float array per channel.

    Sample ``frame * channels + channel`` lands in ``channel`` at ``frame``.
    A trailing partial frame (or odd byte) is dropped, so a payload shorter
    than one frame yields an empty buffer with the requested channel count.

    Raises:
        DecodeError: if the channel count or sample rate is not positive
    """
    if channels < 1:
        raise DecodeError(f"Channel count must be positive, got {channels}")
    if sample_rate <= 0:
        raise DecodeError(f"Sample rate must be positive, got {sample_rate}")

    frame_size = PCM_SAMPLE_WIDTH * channels
    frame_count = len(data) // frame_size

    samples = np.frombuffer(data[: frame_count * frame_size], dtype="<i2")
    frames = samples.reshape(frame_count, channels).astype(np.float32) / PCM_NORMALIZER

    dropped = len(data) - frame_count * frame_size
    if dropped:
        logger.debug(f"Dropped {dropped} trailing byte(s) of partial frame")

    return AudioBuffer(
        sample_rate=sample_rate,
        channel_data=[np.ascontiguousarray(frames[:, channel]) for channel in range(channels)],
    )


class AudioDecoder:
    """Decodes speech payloads at a fixed format (24 kHz mono by default)."""

    def __init__(self, sample_rate: int = AUDIO_SAMPLE_RATE, channels: int = AUDIO_CHANNELS):
        self.sample_rate = sample_rate
        self.channels = channels

    def decode(self, payload: str | bytes) -> AudioBuffer:
        pcm = decode_base64_audio(payload)
        buffer = decode_pcm16(pcm, self.sample_rate, self.channels)
        logger.info(
            f"Decoded {buffer.duration:.2f}s of speech",
            extra={"frames": buffer.length, "sample_rate": self.sample_rate, "channels": self.channels},
        )
        return buffer


def encode_wav(buffer: AudioBuffer) -> bytes:
    """Wrap a decoded buffer in a WAV container for clients that play files."""
    out = io.BytesIO()
    with wave.open(out, "wb") as wf:
        wf.setnchannels(buffer.number_of_channels)
        wf.setsampwidth(PCM_SAMPLE_WIDTH)
        wf.setframerate(buffer.sample_rate)
        wf.writeframes(buffer.to_pcm16())
    return out.getvalue()
