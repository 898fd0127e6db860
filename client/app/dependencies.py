"""
Dependency wiring.

This module provides the "container" that wires together all module
implementations. Each module exposes its behavior through an interface,
and this file creates the concrete Supabase-backed implementations.

The Supabase client is created asynchronously, so the container must be
initialized inside the event loop before any component is accessed:

    container = await get_container().initialize()
    controller = container.session
"""

from typing import TYPE_CHECKING, Optional

from shared.config import Settings, get_settings

# Type checking imports for interfaces (avoids circular imports)
if TYPE_CHECKING:
    from supabase import AsyncClient
    from modules.identity.interfaces import IIdentityProvider
    from modules.profiles.interfaces import IProfileStore
    from modules.session.controller import SessionController
    from modules.verification.cooldown import ResendCooldownGuard
    from modules.verification.deep_links import DeepLinkVerificationHandler
    from modules.verification.reconciler import VerificationReconciler


class ServiceContainer:
    """
    Container for all component instances.

    Components are created lazily on first access and cached as
    singletons within the container. Use reset() to clear them in tests.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings
        self._client: "AsyncClient | None" = None
        self._identity: "IIdentityProvider | None" = None
        self._profiles: "IProfileStore | None" = None
        self._reconciler: "VerificationReconciler | None" = None
        self._cooldown: "ResendCooldownGuard | None" = None
        self._session: "SessionController | None" = None
        self._deep_links: "DeepLinkVerificationHandler | None" = None

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    async def initialize(self) -> "ServiceContainer":
        """Create the shared Supabase client. Safe to call more than once."""
        if self._client is None:
            from shared.database import get_supabase_client
            self._client = await get_supabase_client()
        return self

    @property
    def client(self) -> "AsyncClient":
        if self._client is None:
            raise RuntimeError("ServiceContainer not initialized; await initialize() first")
        return self._client

    @property
    def identity(self) -> "IIdentityProvider":
        """Get the identity provider gateway."""
        if self._identity is None:
            from modules.identity.service import SupabaseIdentityProvider
            self._identity = SupabaseIdentityProvider(self.client, settings=self.settings)
        return self._identity

    @property
    def profiles(self) -> "IProfileStore":
        """Get the profile store gateway."""
        if self._profiles is None:
            from modules.profiles.repository import ProfileRepository
            self._profiles = ProfileRepository(
                self.client,
                table=self.settings.profiles_table,
                timeout_seconds=self.settings.gateway_timeout_seconds,
            )
        return self._profiles

    @property
    def reconciler(self) -> "VerificationReconciler":
        if self._reconciler is None:
            from modules.verification.reconciler import VerificationReconciler
            self._reconciler = VerificationReconciler(
                self.profiles,
                default_language=self.settings.default_language,
            )
        return self._reconciler

    @property
    def cooldown(self) -> "ResendCooldownGuard":
        if self._cooldown is None:
            from modules.verification.cooldown import ResendCooldownGuard
            self._cooldown = ResendCooldownGuard(self.settings.resend_cooldown_ms)
        return self._cooldown

    @property
    def session(self) -> "SessionController":
        """
        Get the session controller.

        Creating it subscribes to provider notifications, so the first
        access must happen inside the running event loop.
        """
        if self._session is None:
            from modules.session.controller import SessionController
            self._session = SessionController(
                identity=self.identity,
                reconciler=self.reconciler,
                cooldown=self.cooldown,
                settings=self.settings,
            )
        return self._session

    @property
    def deep_links(self) -> "DeepLinkVerificationHandler":
        """Get the deep link handler, bound to the session controller."""
        if self._deep_links is None:
            from modules.verification.deep_links import DeepLinkVerificationHandler
            self._deep_links = DeepLinkVerificationHandler(self.identity, self.session)
        return self._deep_links

    def reset(self) -> None:
        """
        Reset all cached components.

        The Supabase client itself is owned by shared.database and is
        only dropped from this container.
        """
        self._client = None
        self._identity = None
        self._profiles = None
        self._reconciler = None
        self._cooldown = None
        self._session = None
        self._deep_links = None


# Module-level container singleton
_container: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """Get the singleton service container."""
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def reset_container() -> None:
    """
    Reset the service container.

    The next call to get_container() creates a fresh container.
    Primarily used for testing.
    """
    global _container
    _container = None
