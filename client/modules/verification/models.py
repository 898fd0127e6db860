"""
Verification module data models.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from modules.identity.models import ErrorDetail
from modules.profiles.models import ProfileRecord


class VerificationState(str, Enum):
    """The single externally visible answer to "is this user's email confirmed"."""

    VERIFIED = "verified"                          # Profile record says confirmed
    PENDING_VERIFICATION = "pending_verification"  # Signed in, not (yet) confirmed
    GUEST = "guest"                                # Browsing without an account
    NONE = "none"                                  # No session


@dataclass(frozen=True)
class Reconciliation:
    """State computed by the reconciler plus the record it was derived from."""

    state: VerificationState
    record: Optional[ProfileRecord] = None
    synced_back: bool = False


class LinkStage(str, Enum):
    """How far a deep link got through the verification pipeline."""

    RECEIVED = "received"
    CLASSIFIED = "classified"
    FORWARDED = "forwarded"    # Not a verification link; handed back to the host
    CONSUMED = "consumed"
    RECONCILED = "reconciled"


class LinkHandlingResult(BaseModel):
    """Outcome of handling one inbound URL."""

    url: str = Field(..., description="The inbound URL")
    stage: LinkStage = Field(..., description="Last stage reached")
    success: bool = Field(default=False)
    state: Optional[VerificationState] = Field(None, description="State after reconciliation")
    error: Optional[ErrorDetail] = Field(None)
