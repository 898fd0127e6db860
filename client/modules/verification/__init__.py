"""
Verification module.

Reconciles the authoritative verification flag, rate-limits verification
emails, applies verification links and answers feature-access questions.
"""

from .access import (
    BASIC_FEATURES,
    LOGIN_REQUIRED_FEATURES,
    can_access_feature,
    should_prompt_login,
)
from .cooldown import ResendCooldownGuard
from .deep_links import DeepLinkVerificationHandler
from .models import LinkHandlingResult, LinkStage, Reconciliation, VerificationState
from .reconciler import VerificationReconciler

__all__ = [
    "VerificationState",
    "Reconciliation",
    "LinkStage",
    "LinkHandlingResult",
    "VerificationReconciler",
    "ResendCooldownGuard",
    "DeepLinkVerificationHandler",
    "BASIC_FEATURES",
    "LOGIN_REQUIRED_FEATURES",
    "can_access_feature",
    "should_prompt_login",
]
