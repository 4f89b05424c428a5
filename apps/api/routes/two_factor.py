"""
Two-factor API routes.

Docs:
  - docs/architecture/two_factor/two-factor-totp-v1.md
"""

from __future__ import annotations

from fastapi import APIRouter

from tfa.contexts.two_factor.adapters.inbound.api.deps import RequireUserIdHeaderDependency
from tfa.contexts.two_factor.adapters.inbound.api.routes import build_two_factor_totp_router
from tfa.contexts.two_factor.adapters.outbound.session import InMemoryEnrollmentSessionRegistry
from tfa.contexts.two_factor.application.ports import TwoFactorProvider


def build_two_factor_router(
    *,
    provider: TwoFactorProvider,
    current_user_dependency: RequireUserIdHeaderDependency,
    session_registry: InMemoryEnrollmentSessionRegistry,
) -> APIRouter:
    """
    Build two-factor router facade for FastAPI app composition root.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-v1.md
    Related:
      - src/tfa/contexts/two_factor/adapters/inbound/api/routes/two_factor_totp.py
      - apps/api/wiring/modules/two_factor.py

    Args:
        provider: Two-factor capability interface.
        current_user_dependency: FastAPI dependency resolving acting user id.
        session_registry: Registry of per-session pending-secret stores.
    Returns:
        APIRouter: Configured two-factor router.
    Assumptions:
        Login/profile HTML lives in the host application.
    Raises:
        ValueError: If dependencies are missing.
    Side Effects:
        None.
    """
    router = APIRouter()
    router.include_router(
        build_two_factor_totp_router(
            provider=provider,
            current_user_dependency=current_user_dependency,
            session_registry=session_registry,
        )
    )
    return router
