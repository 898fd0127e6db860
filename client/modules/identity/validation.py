"""
Local credential checks.

These run synchronously before any provider call so a malformed email or
a short password never costs a round trip (or a rate-limit slot).
"""

from pydantic import EmailStr, TypeAdapter, ValidationError as PydanticValidationError

from .exceptions import InvalidEmailError, WeakPasswordError

_email_adapter = TypeAdapter(EmailStr)


def validate_email(email: str) -> str:
    """
    Check an email address and return it normalized.

    Raises:
        InvalidEmailError: If the address is malformed
    """
    try:
        return _email_adapter.validate_python(email)
    except PydanticValidationError:
        raise InvalidEmailError(email)


def validate_password(password: str, min_length: int = 6) -> None:
    """
    Check a password against the minimum length.

    Raises:
        WeakPasswordError: If the password is too short
    """
    if not password or len(password) < min_length:
        raise WeakPasswordError(min_length)


def validate_credentials(email: str, password: str, min_length: int = 6) -> str:
    """Validate both credentials; returns the normalized email."""
    normalized = validate_email(email)
    validate_password(password, min_length)
    return normalized
