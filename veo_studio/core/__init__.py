"""
Core Module - Cross-cutting concerns and shared infrastructure

Organization:
    - logging.py: Structured logging configuration and utilities
    - exceptions.py: Exception hierarchy shared by every layer
    - files.py: Stored video housekeeping

Usage:
    from veo_studio.core import get_logger, DecodeError
"""

from .logging import (
    setup_logging,
    get_logger,
    set_session_id,
    set_attempt_id,
    clear_context,
    LogTimer,
)

from .exceptions import (
    VeoStudioError,
    InputParseError,
    UpstreamCallError,
    DecodeError,
    CredentialError,
)

from .files import ensure_directory, remove_file

__all__ = [
    "setup_logging",
    "get_logger",
    "set_session_id",
    "set_attempt_id",
    "clear_context",
    "LogTimer",
    "VeoStudioError",
    "InputParseError",
    "UpstreamCallError",
    "DecodeError",
    "CredentialError",
    "ensure_directory",
    "remove_file",
]
