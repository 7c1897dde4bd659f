"""Tests for failure classification."""

import pytest

from veo_studio.core import CredentialError, DecodeError, InputParseError, UpstreamCallError
from veo_studio.services.generation import ErrorCategory, classify_error, classify_message
from veo_studio.services.generation.errors import AUTH_MESSAGE, NOT_FOUND_MESSAGE


class TestClassifyMessage:

    def test_not_found(self):
        classified = classify_message("404 NOT_FOUND. Requested entity was not found.")

        assert classified.category is ErrorCategory.NOT_FOUND
        assert classified.user_message == NOT_FOUND_MESSAGE
        assert classified.needs_credential_reselection is True

    @pytest.mark.parametrize("message", [
        "400 INVALID_ARGUMENT. API_KEY_INVALID",
        "API key not valid. Please pass a valid API key.",
        "403 PERMISSION DENIED on resource",
        "Permission denied: billing disabled",
    ])
    def test_auth(self, message):
        classified = classify_message(message)

        assert classified.category is ErrorCategory.AUTH
        assert classified.user_message == AUTH_MESSAGE
        assert classified.needs_credential_reselection is True

    def test_not_found_checked_before_auth(self):
        classified = classify_message("Requested entity was not found. permission denied")
        assert classified.category is ErrorCategory.NOT_FOUND

    def test_generic_wraps_raw_message(self):
        classified = classify_message("500 INTERNAL. Something broke")

        assert classified.category is ErrorCategory.GENERIC
        assert classified.user_message == "Video generation failed: 500 INTERNAL. Something broke"
        assert classified.needs_credential_reselection is False
        assert classified.raw_message == "500 INTERNAL. Something broke"


class TestClassifyError:

    def test_upstream_error_uses_message_rules(self):
        classified = classify_error(UpstreamCallError("API key not valid", status_code=400))
        assert classified.category is ErrorCategory.AUTH

    def test_input_error_never_reselects(self):
        classified = classify_error(InputParseError("Story script is not valid JSON"))

        assert classified.category is ErrorCategory.INPUT
        assert classified.needs_credential_reselection is False
        assert classified.user_message.startswith("Video generation failed: ")

    def test_decode_error_never_reselects(self):
        classified = classify_error(DecodeError("permission denied"))

        assert classified.category is ErrorCategory.DECODE
        assert classified.needs_credential_reselection is False

    def test_missing_credential_reselects(self):
        classified = classify_error(CredentialError("GEMINI_API_KEY is not set"))

        assert classified.category is ErrorCategory.AUTH
        assert classified.needs_credential_reselection is True

    def test_empty_message(self):
        classified = classify_error(RuntimeError())
        assert classified.user_message == "Video generation failed: An unknown error occurred."
