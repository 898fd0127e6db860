"""
Verification link parsing.

Supabase confirmation emails land in the app in one of two shapes:

- token hash flow:  localite://auth/verify?token_hash=...&type=signup
- implicit flow:    localite://auth/verify#access_token=...&refresh_token=...&type=signup

Parameters are read from both the query string and the fragment.
"""

from dataclasses import dataclass
from typing import Optional
from urllib.parse import parse_qs, urlsplit

# Link types that complete an email verification
VERIFICATION_LINK_TYPES = frozenset({"signup", "email"})


@dataclass(frozen=True)
class VerificationLink:
    """The parts of a verification link needed to apply it."""

    type: str
    token_hash: Optional[str] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None

    @property
    def has_session_tokens(self) -> bool:
        return bool(self.access_token and self.refresh_token)


def _link_params(url: str) -> dict[str, str]:
    parts = urlsplit(url)
    params: dict[str, str] = {}
    for raw in (parts.query, parts.fragment):
        for key, values in parse_qs(raw).items():
            if values:
                params[key] = values[0]
    return params


def parse_verification_link(url: str) -> Optional[VerificationLink]:
    """
    Parse a URL as a verification link.

    Args:
        url: Raw inbound URL

    Returns:
        VerificationLink, or None if the URL doesn't complete a verification
    """
    if not url:
        return None

    params = _link_params(url)
    link_type = params.get("type")
    if link_type not in VERIFICATION_LINK_TYPES:
        return None

    link = VerificationLink(
        type=link_type,
        token_hash=params.get("token_hash"),
        access_token=params.get("access_token"),
        refresh_token=params.get("refresh_token"),
    )
    if not link.token_hash and not link.has_session_tokens:
        return None
    return link
