"""
Generation layer: orchestration of service calls, failure classification,
story parsing and extend-request derivation.
"""

from .errors import ClassifiedError, ErrorCategory, classify_error, classify_message
from .extend import build_extend_request
from .orchestrator import GenerationOrchestrator, GenerationOutcome
from .ports import CredentialProvider, GenerationService
from .story import infer_aspect_ratio, parse_story_script

__all__ = [
    "ClassifiedError",
    "ErrorCategory",
    "classify_error",
    "classify_message",
    "build_extend_request",
    "GenerationOrchestrator",
    "GenerationOutcome",
    "CredentialProvider",
    "GenerationService",
    "infer_aspect_ratio",
    "parse_story_script",
]
