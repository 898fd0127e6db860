"""
Identity module data models.

Results returned by the identity gateway. Dispatch and link results never
raise; their failures are described by an ErrorDetail.
"""

from typing import Optional

from pydantic import BaseModel, Field

from shared.exceptions import LocaliteError
from shared.models import Session


class ErrorDetail(BaseModel):
    """Code and message of a failure reported inside a result."""

    code: str = Field(..., description="Stable error code")
    message: str = Field(..., description="Human-readable message")

    model_config = {"frozen": True}

    @classmethod
    def from_error(cls, error: LocaliteError) -> "ErrorDetail":
        return cls(code=error.code, message=error.message)


class SignInOutcome(BaseModel):
    """Provider response to a successful sign-in."""

    session: Session


class SignUpOutcome(BaseModel):
    """
    Provider response to a successful sign-up.

    The verification email is dispatched as part of sign-up; a dispatch
    failure is recorded here instead of failing the sign-up.
    """

    session: Session
    verification_email_sent: bool = Field(default=False)
    verification_email_error: Optional[str] = Field(None)


class EmailDispatchResult(BaseModel):
    """Outcome of sending a verification email."""

    success: bool
    error: Optional[ErrorDetail] = None


class LinkConsumeResult(BaseModel):
    """Outcome of applying a verification link to the signed-in session."""

    success: bool
    error: Optional[ErrorDetail] = None
