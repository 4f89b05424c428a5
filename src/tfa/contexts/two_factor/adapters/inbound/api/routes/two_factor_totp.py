from __future__ import annotations

import logging
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from tfa.contexts.two_factor.adapters.inbound.api.deps.current_user import (
    RequireUserIdHeaderDependency,
)
from tfa.contexts.two_factor.adapters.outbound.session import InMemoryEnrollmentSessionRegistry
from tfa.contexts.two_factor.application.ports.two_factor_provider import TwoFactorProvider
from tfa.contexts.two_factor.domain.entities import UserTfaSettings
from tfa.contexts.two_factor.domain.errors import TwoFactorOperationError
from tfa.shared_kernel.primitives import UserId

log = logging.getLogger(__name__)


class TwoFactorStatusResponse(BaseModel):
    """API response payload for `GET /2fa/status`."""

    enabled: bool


class TwoFactorEnrollmentResponse(BaseModel):
    """
    TwoFactorEnrollmentResponse — API response payload for `POST /2fa/enrollment`.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-v1.md
    Related:
      - src/tfa/contexts/two_factor/application/dto/enrollment.py
      - src/tfa/contexts/two_factor/application/use_cases/begin_two_factor_enrollment.py

    Enrollment fields are omitted when the user already has a confirmed secret.
    """

    enabled: bool
    account_label: str | None = None
    secret: str | None = None
    otpauth_uri: str | None = None
    instructions: str | None = None


class TwoFactorCodeRequest(BaseModel):
    """
    TwoFactorCodeRequest — API request payload carrying a user-typed TOTP code.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-v1.md
    Related:
      - src/tfa/contexts/two_factor/application/use_cases/verify_two_factor_code.py
      - src/tfa/contexts/two_factor/application/use_cases/confirm_two_factor_enrollment.py
    """

    code: str = ""


class TwoFactorNoticeResponse(BaseModel):
    level: Literal["success", "error"]
    message: str


class TwoFactorConfirmResponse(BaseModel):
    """API response payload for `POST /2fa/enrollment/confirm`."""

    enabled: bool
    notice: TwoFactorNoticeResponse | None = None


class TwoFactorVerifyResponse(BaseModel):
    """API response payload for `POST /2fa/verify`."""

    valid: bool


def build_two_factor_totp_router(
    *,
    provider: TwoFactorProvider,
    current_user_dependency: RequireUserIdHeaderDependency,
    session_registry: InMemoryEnrollmentSessionRegistry,
) -> APIRouter:
    """
    Build router exposing TOTP status, enrollment, verification and disable endpoints.

    Args:
        provider: Two-factor capability interface.
        current_user_dependency: Dependency resolving the acting user id.
        session_registry: Registry of per-session pending-secret stores.
    Returns:
        APIRouter: Configured router under `/2fa`.
    Assumptions:
        Caller is already authenticated by the first factor.
    Raises:
        ValueError: If required dependencies are missing.
    Side Effects:
        None.
    """
    if provider is None:  # type: ignore[truthy-bool]
        raise ValueError("build_two_factor_totp_router requires provider")
    if current_user_dependency is None:  # type: ignore[truthy-bool]
        raise ValueError("build_two_factor_totp_router requires current_user_dependency")
    if session_registry is None:  # type: ignore[truthy-bool]
        raise ValueError("build_two_factor_totp_router requires session_registry")

    router = APIRouter(prefix="/2fa", tags=["two_factor"])

    @router.get("/status", response_model=TwoFactorStatusResponse)
    def get_two_factor_status(
        user_id: UserId = Depends(current_user_dependency),
    ) -> TwoFactorStatusResponse:
        """
        Report whether the user has a confirmed second factor.

        Args:
            user_id: Acting user.
        Returns:
            TwoFactorStatusResponse: Enabled marker payload.
        Raises:
            HTTPException: 503 when settings storage is unavailable.
        """
        try:
            settings = provider.read_user_settings(user_id=user_id)
        except TwoFactorOperationError as error:
            raise _http_error(error) from error
        return TwoFactorStatusResponse(enabled=provider.enabled_for_user(settings=settings))

    @router.post(
        "/enrollment",
        response_model=TwoFactorEnrollmentResponse,
        response_model_exclude_none=True,
    )
    def post_two_factor_enrollment(
        user_id: UserId = Depends(current_user_dependency),
    ) -> TwoFactorEnrollmentResponse:
        """
        Start enrollment and return secret plus otpauth URI for QR rendering.

        Args:
            user_id: Acting user.
        Returns:
            TwoFactorEnrollmentResponse: Enrollment fields, or only `enabled=true`.
        Assumptions:
            Repeated calls replace the pending secret of the same session.
        Raises:
            HTTPException: 503 when settings storage is unavailable.
        Side Effects:
            Stores pending secret in the caller session store.
        """
        session = session_registry.for_session(str(user_id))
        try:
            view = provider.get_user_settings_fields(user_id=user_id, session=session)
        except TwoFactorOperationError as error:
            raise _http_error(error) from error
        if view is None:
            return TwoFactorEnrollmentResponse(enabled=True)
        return TwoFactorEnrollmentResponse(
            enabled=False,
            account_label=view.account_label,
            secret=view.secret,
            otpauth_uri=view.otpauth_uri,
            instructions=view.instructions,
        )

    @router.post("/enrollment/confirm", response_model=TwoFactorConfirmResponse)
    def post_two_factor_enrollment_confirm(
        request: TwoFactorCodeRequest,
        user_id: UserId = Depends(current_user_dependency),
    ) -> TwoFactorConfirmResponse:
        """
        Confirm pending enrollment with a code from the authenticator app.

        Args:
            request: Submitted code payload.
            user_id: Acting user.
        Returns:
            TwoFactorConfirmResponse: Resulting enabled flag and user notice.
        Assumptions:
            A wrong code is a normal outcome reported in the notice, not an HTTP error.
        Raises:
            HTTPException: 503 when settings storage is unavailable.
        Side Effects:
            Persists settings and discards pending secret.
        """
        session = session_registry.for_session(str(user_id))
        try:
            result = provider.process_user_settings_fields(
                user_id=user_id,
                session=session,
                submitted_settings=UserTfaSettings(pending_confirm_code=request.code),
            )
        except TwoFactorOperationError as error:
            raise _http_error(error) from error
        notice = None
        if result.notice is not None:
            notice = TwoFactorNoticeResponse(
                level=result.notice.level,
                message=result.notice.message,
            )
        return TwoFactorConfirmResponse(enabled=result.enabled, notice=notice)

    @router.post("/verify", response_model=TwoFactorVerifyResponse)
    def post_two_factor_verify(
        request: TwoFactorCodeRequest,
        user_id: UserId = Depends(current_user_dependency),
    ) -> TwoFactorVerifyResponse:
        """
        Verify login-time code and consume its time slice.

        Args:
            request: Submitted code payload.
            user_id: Acting user.
        Returns:
            TwoFactorVerifyResponse: `valid=true` at most once per accepted slice.
        Raises:
            HTTPException: 503 when settings storage is unavailable.
        Side Effects:
            Advances the replay watermark on success.
        """
        try:
            valid = provider.is_valid_user_code(user_id=user_id, code=request.code)
        except TwoFactorOperationError as error:
            raise _http_error(error) from error
        return TwoFactorVerifyResponse(valid=valid)

    @router.post("/disable", response_model=TwoFactorStatusResponse)
    def post_two_factor_disable(
        user_id: UserId = Depends(current_user_dependency),
    ) -> TwoFactorStatusResponse:
        """
        Turn off the second factor and drop the stored secret.

        Args:
            user_id: Acting user.
        Returns:
            TwoFactorStatusResponse: Always `enabled=false`.
        Raises:
            HTTPException: 503 when settings storage is unavailable.
        """
        try:
            settings = provider.disable(user_id=user_id)
        except TwoFactorOperationError as error:
            raise _http_error(error) from error
        return TwoFactorStatusResponse(enabled=provider.enabled_for_user(settings=settings))

    return router


def _http_error(error: TwoFactorOperationError) -> HTTPException:
    """
    Map two-factor error into HTTPException with deterministic payload.

    Args:
        error: Raised two-factor error.
    Returns:
        HTTPException: Exception carrying `error.payload()` as detail.
    """
    log.warning(
        "event=two_factor_request_failed error=%s status_code=%s",
        error.code,
        error.status_code,
    )
    return HTTPException(status_code=error.status_code, detail=error.payload())
