"""
Profiles module.

Narrow gateway over the per-user profile document: read, create, and
mark verified. Nothing else in the document is touched here.

Public API:
- IProfileStore: Interface for profile store operations
- ProfileRecord / ProfileSeed: Profile data
- StoreResult: Result wrapper carrying data or a StoreError
- StoreError: Store failure (never raised by the gateway)
"""

from .interfaces import IProfileStore
from .models import ProfileRecord, ProfileSeed, StoreResult
from .exceptions import StoreError, StoreTimeoutError

__all__ = [
    # Interface
    "IProfileStore",
    # Models
    "ProfileRecord",
    "ProfileSeed",
    "StoreResult",
    # Exceptions
    "StoreError",
    "StoreTimeoutError",
]
