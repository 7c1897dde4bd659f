"""Generation session lifecycle."""

from .controller import SessionController, MISSING_URL_MESSAGE, EXTEND_FAILED_PREFIX

__all__ = ["SessionController", "MISSING_URL_MESSAGE", "EXTEND_FAILED_PREFIX"]
