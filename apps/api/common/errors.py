"""
Shared API error handlers for two-factor errors and deterministic 422 payloads.

Docs:
  - docs/architecture/two_factor/two-factor-totp-v1.md
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, cast

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.requests import Request
from starlette.responses import JSONResponse

from tfa.contexts.two_factor.domain.errors import TwoFactorOperationError

log = logging.getLogger(__name__)


def register_api_error_handlers(*, app: FastAPI) -> None:
    """
    Register global API handlers for two-factor errors and FastAPI validation errors.

    Args:
        app: FastAPI application instance.
    Returns:
        None.
    Assumptions:
        Handlers are installed once during application startup.
    Raises:
        ValueError: If `app` dependency is missing.
    Side Effects:
        Mutates FastAPI exception-handler registry.
    """
    if app is None:  # type: ignore[truthy-bool]
        raise ValueError("register_api_error_handlers requires app")

    app.add_exception_handler(TwoFactorOperationError, two_factor_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)


def two_factor_error_handler(_request: Request, error: Exception) -> JSONResponse:
    """
    Convert uncaught two-factor error into its JSON payload and status code.

    Args:
        _request: Starlette request object (unused).
        error: Raised `TwoFactorOperationError` instance.
    Returns:
        JSONResponse: Response with `{"error": ..., "message": ...}` payload.
    Raises:
        None.
    Side Effects:
        Writes one warning log record.
    """
    two_factor_error = cast(TwoFactorOperationError, error)
    log.warning(
        "event=two_factor_error_unhandled_in_route error=%s status_code=%s",
        two_factor_error.code,
        two_factor_error.status_code,
    )
    return JSONResponse(
        status_code=two_factor_error.status_code,
        content=two_factor_error.payload(),
    )


def request_validation_error_handler(_request: Request, error: Exception) -> JSONResponse:
    """
    Build 422 `validation_error` payload listing failed fields without their values.

    Args:
        _request: Starlette request object (unused).
        error: FastAPI request validation exception.
    Returns:
        JSONResponse: `{"error", "message", "details": {"errors": [...]}}` payload.
    Assumptions:
        Submitted codes must never be echoed back, so Pydantic `input` is dropped.
    Raises:
        None.
    Side Effects:
        None.
    """
    validation_error = cast(RequestValidationError, error)
    items = [
        _validation_item(raw_error=raw_error)
        for raw_error in validation_error.errors()
        if isinstance(raw_error, Mapping)
    ]
    items.sort(key=lambda item: (item["path"], item["code"], item["message"]))
    return JSONResponse(
        status_code=422,
        content={
            "error": "validation_error",
            "message": "Validation failed",
            "details": {"errors": items},
        },
    )


def _validation_item(*, raw_error: Mapping[str, Any]) -> dict[str, str]:
    """
    Reduce one Pydantic error mapping to `path`, `code`, and `message` strings.

    Args:
        raw_error: Mapping with `loc`, `type`, and `msg` keys.
    Returns:
        dict[str, str]: Item such as `{"path": "body.code", "code": "string_type", ...}`.
    Assumptions:
        Pydantic reports absent fields with type `missing`, exposed here as `required`.
    Raises:
        None.
    Side Effects:
        None.
    """
    loc = raw_error.get("loc")
    if isinstance(loc, (list, tuple)) and loc:
        path = ".".join(str(part) for part in loc)
    else:
        path = "unknown" if loc is None else str(loc)

    raw_type = str(raw_error.get("type") or "").strip().lower()
    if raw_type == "missing" or raw_type.endswith(".missing"):
        code = "required"
    else:
        code = raw_type or "validation_error"

    return {
        "path": path,
        "code": code,
        "message": str(raw_error.get("msg", "Validation error")),
    }
