"""
Session status and state.

The session controller is the only writer of SessionState.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from .generation import GenerationRequest, GenerationResult


class SessionStatus(Enum):
    """Lifecycle of the single active generation session."""

    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class SessionState:
    status: SessionStatus = SessionStatus.IDLE
    last_request: Optional[GenerationRequest] = None
    last_result: Optional[GenerationResult] = None
    error_message: Optional[str] = None
    # Values the request form should open with on the next Idle
    prefill: Optional[GenerationRequest] = None
    # The credential selection flow has been requested
    credential_prompt: bool = False

    def to_dict(self) -> Dict[str, Any]:
        result = self.last_result
        return {
            "status": self.status.value,
            "error_message": self.error_message,
            "credential_prompt": self.credential_prompt,
            "last_request": self.last_request.model_dump(mode="json") if self.last_request else None,
            "prefill": self.prefill.model_dump(mode="json") if self.prefill else None,
            "result": {
                "mode": result.mode.value,
                "video_uri": result.video_handle.uri,
                "video_url": result.video_url,
                "video_size": len(result.video_bytes),
                "has_audio": result.audio is not None,
                "audio_duration": result.audio.duration if result.audio is not None else None,
            } if result else None,
        }
