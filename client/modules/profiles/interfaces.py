"""
Profiles module interface.

The verification reconciler depends on IProfileStore, not on Supabase.
This keeps reconciliation testable with an in-memory store.
"""

from typing import Protocol, Optional, runtime_checkable

from .models import ProfileRecord, ProfileSeed, StoreResult


@runtime_checkable
class IProfileStore(Protocol):
    """
    Interface for the single-user profile record.

    None of these methods raise for store failures; failures are
    reported through StoreResult.error as a StoreError.
    """

    async def get(self, uid: str) -> StoreResult[Optional[ProfileRecord]]:
        """
        Read a user's profile record.

        Args:
            uid: Identity key of the user

        Returns:
            StoreResult whose data is the record, or None if it doesn't exist
        """
        ...

    async def create(self, seed: ProfileSeed) -> StoreResult[ProfileRecord]:
        """
        Create a profile record from a seed.

        Args:
            seed: Initial field values, including the seeded verification flag

        Returns:
            StoreResult with the created record
        """
        ...

    async def set_verified(self, uid: str) -> StoreResult[None]:
        """
        Mark a record's email as confirmed and stamp confirmed_at.

        Safe to call repeatedly: an already-verified record keeps its
        original confirmed_at.

        Args:
            uid: Identity key of the user

        Returns:
            StoreResult with no data
        """
        ...
