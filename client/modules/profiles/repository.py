"""
Profile repository for document store access.

Encapsulates the Supabase queries and data mapping for the `users` table
row that carries a user's authoritative verification flag:
- id (== auth uid)
- email
- is_email_verified
- email_verified_at
- preferred_language
- created_at / updated_at
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional, Any

import httpx
import pydantic
from postgrest.exceptions import APIError
from supabase import AsyncClient

from shared.repository import BaseRepository
from .exceptions import StoreError, StoreTimeoutError
from .models import ProfileRecord, ProfileSeed, StoreResult

logger = logging.getLogger(__name__)

# Postgres unique_violation
_DUPLICATE_KEY = "23505"


class ProfileRepository(BaseRepository[ProfileRecord]):
    """
    Supabase-backed implementation of IProfileStore.

    Every method resolves to a StoreResult; database, transport and
    timeout failures are converted to StoreError instead of raised.

    Note: This repository does NOT decide verification state.
    The verification reconciler is the only writer of the flag.
    """

    def __init__(
        self,
        db: AsyncClient,
        table: str = "users",
        timeout_seconds: float = 15.0,
    ) -> None:
        super().__init__(db, timeout_seconds)
        self._table = table

    async def get(self, uid: str) -> StoreResult[Optional[ProfileRecord]]:
        """Read a profile record; a missing row is a successful None."""
        try:
            result = await self._bounded(
                self._db.table(self._table).select("*").eq("id", uid).execute()
            )
        except (APIError, httpx.HTTPError, asyncio.TimeoutError) as e:
            return StoreResult.failure(self._to_store_error("get", uid, e))

        if not result.data:
            return StoreResult.success(None)

        return self._mapped("get", uid, result.data[0])

    async def create(self, seed: ProfileSeed) -> StoreResult[ProfileRecord]:
        """Insert a new profile row from a seed."""
        now = datetime.now(timezone.utc).isoformat()
        data: dict[str, Any] = {
            "id": seed.uid,
            "email": seed.email,
            "is_email_verified": seed.email_confirmed_authoritative,
            "preferred_language": seed.preferred_language,
            "created_at": now,
            "updated_at": now,
        }
        if seed.email_confirmed_authoritative:
            data["email_verified_at"] = now

        try:
            result = await self._bounded(
                self._db.table(self._table).insert(data).execute()
            )
        except APIError as e:
            if e.code == _DUPLICATE_KEY:
                # Another client created the row first; the stored row wins.
                logger.info(f"Profile {seed.uid} already exists, reading stored record")
                return await self._get_existing(seed.uid)
            return StoreResult.failure(self._to_store_error("create", seed.uid, e))
        except (httpx.HTTPError, asyncio.TimeoutError) as e:
            return StoreResult.failure(self._to_store_error("create", seed.uid, e))

        if not result.data:
            return StoreResult.failure(
                StoreError(
                    f"Profile create for {seed.uid} returned no row",
                    code="EMPTY_RESULT",
                    details={"uid": seed.uid},
                )
            )

        return self._mapped("create", seed.uid, result.data[0])

    async def set_verified(self, uid: str) -> StoreResult[None]:
        """
        Mark the record verified.

        The update is filtered on is_email_verified = false, so repeating
        it leaves an already-verified row (and its timestamp) untouched.
        """
        now = datetime.now(timezone.utc).isoformat()
        data = {
            "is_email_verified": True,
            "email_verified_at": now,
            "updated_at": now,
        }

        try:
            await self._bounded(
                self._db.table(self._table)
                .update(data)
                .eq("id", uid)
                .eq("is_email_verified", False)
                .execute()
            )
        except (APIError, httpx.HTTPError, asyncio.TimeoutError) as e:
            return StoreResult.failure(self._to_store_error("set_verified", uid, e))

        return StoreResult.success(None)

    # -------------------------------------------------------------------------
    # Private helpers
    # -------------------------------------------------------------------------

    async def _get_existing(self, uid: str) -> StoreResult[ProfileRecord]:
        found = await self.get(uid)
        if not found.ok:
            return StoreResult.failure(found.error)
        if found.data is None:
            return StoreResult.failure(
                StoreError(
                    f"Profile {uid} reported as duplicate but not readable",
                    code="CREATE_CONFLICT",
                    details={"uid": uid},
                )
            )
        return StoreResult.success(found.data)

    def _mapped(self, operation: str, uid: str, row: dict[str, Any]) -> StoreResult[ProfileRecord]:
        """Map a row, reporting an unreadable one as MALFORMED_RECORD."""
        try:
            return StoreResult.success(self._map_to_record(row))
        except (pydantic.ValidationError, KeyError, TypeError) as e:
            logger.warning(f"Malformed profile row for {uid} on {operation}: {e}")
            return StoreResult.failure(
                StoreError(
                    f"Profile store {operation} returned a malformed record",
                    code="MALFORMED_RECORD",
                    details={"operation": operation, "uid": uid},
                )
            )

    def _to_store_error(self, operation: str, uid: str, error: Exception) -> StoreError:
        """Convert a database/transport exception to a StoreError."""
        if isinstance(error, asyncio.TimeoutError):
            store_error: StoreError = StoreTimeoutError(operation, self._timeout)
        elif isinstance(error, APIError):
            store_error = StoreError(
                f"Profile store {operation} failed: {error.message}",
                code=error.code or "API_ERROR",
                details={"operation": operation},
            )
        else:
            store_error = StoreError(
                f"Profile store {operation} failed: {error}",
                code="NETWORK_ERROR",
                details={"operation": operation},
            )
        store_error.details["uid"] = uid
        logger.warning(f"{store_error.message} (uid={uid}, code={store_error.code})")
        return store_error

    def _map_to_record(self, data: dict[str, Any]) -> ProfileRecord:
        """Map database row to ProfileRecord model."""
        return ProfileRecord(
            id=str(data["id"]),
            email=data.get("email") or "",
            email_confirmed_authoritative=data.get("is_email_verified") is True,
            confirmed_at=data.get("email_verified_at"),
            preferred_language=data.get("preferred_language") or "zh-TW",
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )
