"""
Profiles module data models.

The profile record is the authoritative source for email verification.
Only the verification-related fields are modeled here; display name,
stats and preferences belong to other collaborators.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field

from .exceptions import StoreError


T = TypeVar("T")


class ProfileSeed(BaseModel):
    """Initial values for a profile record created on behalf of a session."""

    uid: str = Field(..., description="Identity key; becomes the record id")
    email: str = Field(..., description="Email address at creation time")
    email_confirmed_authoritative: bool = Field(
        default=False,
        description="Seeded from the provider claim; authoritative once written",
    )
    preferred_language: str = Field(default="zh-TW", description="UI/email language")


class ProfileRecord(BaseModel):
    """A user's store-resident profile, authoritative for verification."""

    id: str = Field(..., description="Record ID (equal to the session uid)")
    email: str = Field(..., description="Email address")
    email_confirmed_authoritative: bool = Field(
        default=False,
        description="Single source of truth for email verification",
    )
    confirmed_at: Optional[datetime] = Field(None, description="When verification was recorded")
    preferred_language: str = Field(default="zh-TW", description="UI/email language")
    created_at: Optional[datetime] = Field(None, description="Record creation time")
    updated_at: Optional[datetime] = Field(None, description="Last update time")


@dataclass(frozen=True)
class StoreResult(Generic[T]):
    """
    Outcome of a profile store operation.

    Exactly one of `data` / `error` is meaningful: check `ok` first.
    A successful `get` for a missing record has `ok=True` and `data=None`.
    """

    data: Optional[T] = None
    error: Optional[StoreError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, data: Optional[T] = None) -> "StoreResult[T]":
        return cls(data=data)

    @classmethod
    def failure(cls, error: StoreError) -> "StoreResult[T]":
        return cls(error=error)
