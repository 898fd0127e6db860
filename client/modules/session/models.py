"""
Session module data models.

Results handed back to UI collaborators by the session controller.
"""

from typing import Optional

from pydantic import BaseModel, Field

from shared.models import Session
from modules.identity.models import ErrorDetail
from modules.verification.models import VerificationState


class SignInResult(BaseModel):
    """Result of an explicit sign-in."""

    session: Session
    state: VerificationState
    verification_email_sent: Optional[bool] = Field(
        None,
        description="Set when a reminder email was attempted for an unverified user",
    )


class SignUpResult(BaseModel):
    """Result of an explicit sign-up."""

    session: Session
    state: VerificationState
    email: str
    needs_email_verification: bool
    verification_email_sent: bool = False
    verification_email_error: Optional[str] = None


class ResendResult(BaseModel):
    """
    Result of a verification email resend request.

    When the cooldown denies the send, `retry_after_ms` tells the UI how
    long to count down before offering the button again.
    """

    sent: bool
    retry_after_ms: int = Field(default=0, ge=0)
    error: Optional[ErrorDetail] = None
