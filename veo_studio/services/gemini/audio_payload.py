"""Inline audio extraction from Gemini responses."""

from __future__ import annotations

import base64
import binascii
from typing import Any

from veo_studio.core import UpstreamCallError


def extract_inline_audio_payload(response: Any) -> tuple[bytes, str | None]:
    """Return the first inline audio part of a generate_content response."""
    candidates = getattr(response, "candidates", None)
    if not candidates:
        raise UpstreamCallError("Speech response has no candidates")

    for candidate in candidates:
        content = getattr(candidate, "content", None)
        parts = getattr(content, "parts", None) if content else None
        if not parts:
            continue
        for part in parts:
            inline_data = getattr(part, "inline_data", None)
            if not inline_data:
                continue
            mime_type = getattr(inline_data, "mime_type", None)
            data = getattr(inline_data, "data", None)
            if isinstance(data, bytes):
                return data, mime_type
            if isinstance(data, str):
                try:
                    return base64.b64decode(data), mime_type
                except (binascii.Error, ValueError) as exc:
                    raise UpstreamCallError("Unable to decode base64 audio payload") from exc

    raise UpstreamCallError("No inline audio bytes found in speech response")


def parse_mime(mime_type: str | None) -> tuple[str | None, dict[str, str]]:
    """Split e.g. ``audio/L16;codec=pcm;rate=24000`` into base and params."""
    if not mime_type:
        return None, {}
    parts = [part.strip() for part in mime_type.split(";") if part.strip()]
    mime_base = parts[0].lower() if parts else None
    params: dict[str, str] = {}
    for part in parts[1:]:
        if "=" not in part:
            continue
        key, value = part.split("=", 1)
        params[key.strip().lower()] = value.strip()
    return mime_base, params
