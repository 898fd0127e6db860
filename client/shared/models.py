"""
Shared data models used across modules.

These models are shared infrastructure, not business logic.
Module-specific models should stay in their respective module directories.
"""

from pydantic import BaseModel, Field


class Session(BaseModel):
    """
    The identity provider's live representation of a signed-in user.

    Owned by the identity gateway and read-only everywhere else.
    `provider_confirmed` is the provider's own "email verified" claim and
    can be stale until the session is reloaded.
    """

    uid: str = Field(..., description="Stable identity key")
    email: str = Field(..., description="User's email address")
    provider_confirmed: bool = Field(
        default=False,
        description="Provider-side email confirmation claim",
    )

    model_config = {
        "frozen": True,
        "extra": "ignore",
    }
