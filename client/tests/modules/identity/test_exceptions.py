"""Tests for modules/identity/exceptions.py."""

from shared.exceptions import AuthenticationError
from modules.identity.exceptions import (
    AccountDisabledError,
    InvalidCredentialsError,
    NetworkUnavailableError,
    OperationCancelledError,
    ProviderError,
    TooManyRequestsError,
    UnknownProviderError,
)


class TestProviderErrors:
    def test_provider_errors_are_authentication_errors(self):
        """Provider failures belong to the authentication family."""
        assert isinstance(InvalidCredentialsError(), AuthenticationError)

    def test_user_message_defaults_per_class(self):
        """Each class carries its own user-facing message."""
        assert InvalidCredentialsError().user_message != TooManyRequestsError().user_message

    def test_user_message_override(self):
        """A custom user message wins over the default."""
        error = ProviderError("x", user_message="Custom")
        assert error.user_message == "Custom"

    def test_retryable_classification(self):
        """Transient failures are retryable; account problems are not."""
        assert TooManyRequestsError.retryable
        assert NetworkUnavailableError.retryable
        assert OperationCancelledError.retryable
        assert not InvalidCredentialsError.retryable
        assert not AccountDisabledError.retryable
        assert not UnknownProviderError.retryable

    def test_to_dict_includes_user_fields(self):
        """to_dict should expose user message and retryable flag."""
        data = NetworkUnavailableError(code="TIMEOUT").to_dict()
        assert data["error"] == "TIMEOUT"
        assert data["retryable"] is True
        assert "user_message" in data
