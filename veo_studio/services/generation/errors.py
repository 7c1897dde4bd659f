"""
Failure classification.

Turns any failure from a generation attempt into a user-facing message and
tells the caller whether the credential selection flow has to run before a
retry can succeed.
"""

from dataclasses import dataclass
from enum import Enum

from veo_studio.config import INVALID_KEY_MARKERS, NOT_FOUND_MARKERS, PERMISSION_DENIED_MARKER
from veo_studio.core import CredentialError, DecodeError, InputParseError

NOT_FOUND_MESSAGE = (
    "Model not found. This can be caused by an invalid API key or permission issues. "
    "Please check your API key."
)
AUTH_MESSAGE = (
    "Your API key is invalid or lacks permissions. "
    "Please select a valid, billing-enabled API key."
)
GENERIC_PREFIX = "Video generation failed: "
UNKNOWN_ERROR = "An unknown error occurred."


class ErrorCategory(str, Enum):
    NOT_FOUND = "not_found"
    AUTH = "auth"
    GENERIC = "generic"
    INPUT = "input"
    DECODE = "decode"


@dataclass(frozen=True)
class ClassifiedError:
    category: ErrorCategory
    user_message: str
    needs_credential_reselection: bool
    raw_message: str


def classify_message(message: str) -> ClassifiedError:
    """Classify raw failure text. First matching rule wins."""
    if any(marker in message for marker in NOT_FOUND_MARKERS):
        return ClassifiedError(ErrorCategory.NOT_FOUND, NOT_FOUND_MESSAGE, True, message)

    if any(marker in message for marker in INVALID_KEY_MARKERS) or PERMISSION_DENIED_MARKER in message.lower():
        return ClassifiedError(ErrorCategory.AUTH, AUTH_MESSAGE, True, message)

    return ClassifiedError(ErrorCategory.GENERIC, f"{GENERIC_PREFIX}{message}", False, message)


def classify_error(error: BaseException) -> ClassifiedError:
    message = str(error) or UNKNOWN_ERROR

    # Local failures never point at the credential
    if isinstance(error, InputParseError):
        return ClassifiedError(ErrorCategory.INPUT, f"{GENERIC_PREFIX}{message}", False, message)
    if isinstance(error, DecodeError):
        return ClassifiedError(ErrorCategory.DECODE, f"{GENERIC_PREFIX}{message}", False, message)
    if isinstance(error, CredentialError):
        return ClassifiedError(ErrorCategory.AUTH, AUTH_MESSAGE, True, message)

    return classify_message(message)
