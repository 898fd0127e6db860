"""
Feature access policy.

Pure functions consumed by UI surfaces; nothing here mutates state.
"""

from .models import VerificationState

# Available to everyone, guests and unverified users included
BASIC_FEATURES = frozenset({
    "view_places",
    "view_guides",
    "browse_content",
    "view_news",
})

# Features a guest is prompted to sign in for
LOGIN_REQUIRED_FEATURES = frozenset({
    "create_journey_record",
    "save_personal_data",
    "share_journey",
    "view_badge_collection",
    "manage_profile",
})


def can_access_feature(
    state: VerificationState,
    is_guest: bool,
    is_authenticated: bool,
    feature: str,
) -> bool:
    """
    Decide whether a feature is available.

    Basic features are always allowed. Everything else requires a
    signed-in, non-guest user whose state is VERIFIED.
    """
    if feature in BASIC_FEATURES:
        return True
    if is_guest or not is_authenticated:
        return False
    return state == VerificationState.VERIFIED


def should_prompt_login(is_guest: bool, feature: str) -> bool:
    """True when a guest asks for a feature that needs an account."""
    return is_guest and feature in LOGIN_REQUIRED_FEATURES
