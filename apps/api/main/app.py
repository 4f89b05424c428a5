"""
FastAPI application factory for the TOTP second-factor API.
"""

from __future__ import annotations

import logging
import os
from typing import Mapping

from fastapi import FastAPI

from apps.api.common import register_api_error_handlers
from apps.api.wiring.modules import build_two_factor_api_module

log = logging.getLogger(__name__)


def create_app(*, environ: Mapping[str, str] | None = None) -> FastAPI:
    """
    Build FastAPI app with the two-factor module wired at startup.

    Docs: docs/architecture/two_factor/two-factor-totp-v1.md
    Related: apps.api.routes.two_factor,
      apps.api.wiring.modules.two_factor,
      tfa.contexts.two_factor.application.ports.two_factor_provider

    Args:
        environ: Optional environment mapping override.
    Returns:
        FastAPI: Application instance with registered routers.
    Assumptions:
        Module wiring performs fail-fast validation before first request.
    Raises:
        TwoFactorDependencyUnavailableError: If `pyotp` or `cryptography` is missing.
        FileNotFoundError: If explicit TOTP config path is missing.
        ValueError: If config parsing/validation fails.
    Side Effects:
        Reads TOTP YAML config and validates runtime settings.
    """
    effective_environ = os.environ if environ is None else environ

    app = FastAPI(
        title="TFA TOTP API",
        version="1.0.0",
    )
    register_api_error_handlers(app=app)
    two_factor_module = build_two_factor_api_module(environ=effective_environ)
    app.include_router(two_factor_module.router)
    app.state.two_factor_provider = two_factor_module.provider
    return app


app = create_app()
