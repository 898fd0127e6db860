"""
Base repository class for document store access.

Provides a common abstraction layer for all repositories, encapsulating
Supabase client access and the per-call timeout every gateway must honor.
"""

import asyncio
from typing import Any, Awaitable, TypeVar, Generic

from supabase import AsyncClient


T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Base class for all repositories.

    Provides common functionality for database operations:
    - Supabase client access via self._db
    - A bounded await via self._bounded() so no call can hang forever
    - Generic type parameter for model type hints

    Subclasses implement domain-specific data access methods and handle
    dict-to-Pydantic model mapping internally.

    Example:
        class ProfileRepository(BaseRepository[ProfileRecord]):
            async def get(self, uid: str) -> StoreResult[Optional[ProfileRecord]]:
                result = await self._bounded(
                    self._db.table("users").select("*").eq("id", uid).execute()
                )
                ...
    """

    def __init__(self, db: AsyncClient, timeout_seconds: float = 15.0) -> None:
        """
        Initialize the repository with a Supabase client.

        Args:
            db: Async Supabase client instance for database operations.
            timeout_seconds: Upper bound for a single database round trip.
        """
        self._db = db
        self._timeout = timeout_seconds

    async def _bounded(self, operation: Awaitable[Any]) -> Any:
        """Await a database operation, raising asyncio.TimeoutError past the bound."""
        return await asyncio.wait_for(operation, timeout=self._timeout)
