"""Speech payload decoding."""

from .decoder import AudioDecoder, decode_base64_audio, decode_pcm16, encode_wav

__all__ = ["AudioDecoder", "decode_base64_audio", "decode_pcm16", "encode_wav"]
