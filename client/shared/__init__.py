"""
Shared infrastructure for the Localite auth client.

This package contains cross-cutting concerns that are used by multiple modules:
- config: Centralized settings management
- database: Supabase client factory
- exceptions: Base exception classes
- models: The provider session shared by every module

Note: Business logic should NOT go here. This is for infrastructure only.
"""

from .config import Settings, get_settings
from .database import get_supabase_client, reset_client_cache
from .exceptions import (
    LocaliteError,
    ValidationError,
    AuthenticationError,
    ExternalServiceError,
)
from .models import Session

__all__ = [
    "Settings",
    "get_settings",
    "get_supabase_client",
    "reset_client_cache",
    "LocaliteError",
    "ValidationError",
    "AuthenticationError",
    "ExternalServiceError",
    "Session",
]
