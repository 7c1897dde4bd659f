"""
Core Exceptions
Standardized base exceptions for the studio.
"""

from typing import Optional


class VeoStudioError(Exception):
    """Base exception for all application errors."""
    pass


class InputParseError(VeoStudioError):
    """The story script embedded in the prompt could not be parsed."""
    pass


class UpstreamCallError(VeoStudioError):
    """A video or speech generation call failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class DecodeError(VeoStudioError):
    """The speech payload could not be decoded into audio samples."""
    pass


class CredentialError(VeoStudioError):
    """No usable API credential is available."""
    pass
