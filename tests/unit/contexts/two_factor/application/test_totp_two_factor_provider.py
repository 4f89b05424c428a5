from __future__ import annotations

import base64
import hashlib
import hmac
from datetime import datetime, timezone

import pytest

from tfa.contexts.two_factor.adapters.outbound.persistence.in_memory import (
    InMemoryTwoFactorSettingsRepository,
)
from tfa.contexts.two_factor.adapters.outbound.security.totp import PyOtpTotpCodec
from tfa.contexts.two_factor.adapters.outbound.security.vault import (
    AesGcmEnvelopeTwoFactorSecretVault,
)
from tfa.contexts.two_factor.adapters.outbound.session import InMemoryEnrollmentSessionStore
from tfa.contexts.two_factor.application.ports import TwoFactorClock
from tfa.contexts.two_factor.application.use_cases import (
    BeginTwoFactorEnrollmentUseCase,
    ConfirmTwoFactorEnrollmentUseCase,
    DisableTwoFactorUseCase,
    SaveTwoFactorSettingsUseCase,
    TotpTwoFactorProvider,
    VerifyTwoFactorCodeUseCase,
)
from tfa.contexts.two_factor.domain.entities import UserTfaSettings
from tfa.shared_kernel.primitives import UserId

_NOW = datetime(2026, 2, 14, 16, 30, 10, tzinfo=timezone.utc)
_USER_ID = UserId.from_string("user-501")
_KEK_B64 = base64.b64encode(b"tfa-unit-test-two-factor-kek-002").decode("ascii")


class _FixedClock(TwoFactorClock):
    """
    Deterministic UTC clock for provider flows.
    """

    def __init__(self, *, now_value: datetime) -> None:
        self._now_value = now_value

    def now(self) -> datetime:
        return self._now_value


def _build_provider(
    *,
    repository: InMemoryTwoFactorSettingsRepository,
) -> TotpTwoFactorProvider:
    """
    Build provider with AES-GCM vault, pyotp codec, and fixed clock.

    Args:
        repository: In-memory settings repository shared with assertions.
    Returns:
        TotpTwoFactorProvider: Fully wired provider.
    Assumptions:
        Window tolerance is one slice on each side.
    Raises:
        ValueError: If wiring is invalid.
    Side Effects:
        None.
    """
    codec = PyOtpTotpCodec()
    vault = AesGcmEnvelopeTwoFactorSecretVault(kek_b64=_KEK_B64)
    clock = _FixedClock(now_value=_NOW)
    save_settings = SaveTwoFactorSettingsUseCase(repository=repository, secret_vault=vault)
    return TotpTwoFactorProvider(
        repository=repository,
        begin_enrollment=BeginTwoFactorEnrollmentUseCase(
            repository=repository,
            totp_codec=codec,
            issuer="tfa-unit",
        ),
        confirm_enrollment=ConfirmTwoFactorEnrollmentUseCase(
            repository=repository,
            totp_codec=codec,
            save_settings=save_settings,
            clock=clock,
        ),
        save_settings=save_settings,
        verify_code=VerifyTwoFactorCodeUseCase(
            repository=repository,
            secret_vault=vault,
            totp_codec=codec,
            clock=clock,
        ),
        disable=DisableTwoFactorUseCase(repository=repository, save_settings=save_settings),
    )


def test_provider_covers_enroll_login_and_disable_lifecycle() -> None:
    """
    Verify a host controller can drive the full second-factor lifecycle through the provider.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Controller keeps one session store per enrollment attempt.
    Raises:
        AssertionError: If any lifecycle step produces an unexpected outcome.
    Side Effects:
        None.
    """
    repository = InMemoryTwoFactorSettingsRepository()
    provider = _build_provider(repository=repository)
    session = InMemoryEnrollmentSessionStore()

    initial = provider.read_user_settings(user_id=_USER_ID)
    assert provider.enabled_for_user(settings=initial) is False

    view = provider.get_user_settings_fields(user_id=_USER_ID, session=session)
    assert view is not None
    code = _build_totp_code(secret=view.secret, timeslice=int(_NOW.timestamp()) // 30)

    result = provider.process_user_settings_fields(user_id=_USER_ID, session=session, code=code)
    assert result.enabled is True

    settings = provider.read_user_settings(user_id=_USER_ID)
    assert provider.enabled_for_user(settings=settings) is True
    assert settings.encrypted is True
    assert settings.secret != view.secret

    assert provider.is_valid_user_code(user_id=_USER_ID, code=code, settings=settings) is True
    assert provider.is_valid_user_code(user_id=_USER_ID, code=code) is False

    disabled = provider.disable(user_id=_USER_ID)
    assert provider.enabled_for_user(settings=disabled) is False
    assert provider.get_user_settings_fields(user_id=_USER_ID, session=session) is not None


def test_provider_save_user_settings_protects_secret() -> None:
    repository = InMemoryTwoFactorSettingsRepository()
    provider = _build_provider(repository=repository)

    stored = provider.save_user_settings(
        user_id=_USER_ID,
        settings=UserTfaSettings(enabled=True, secret="JBSWY3DPEHPK3PXPJBSWY3DPEHPK3PXP"),
    )

    assert stored.encrypted is True
    assert repository.read(user_id=_USER_ID) == stored


def test_provider_requires_every_dependency() -> None:
    repository = InMemoryTwoFactorSettingsRepository()
    provider = _build_provider(repository=repository)

    with pytest.raises(ValueError, match="verify_code"):
        TotpTwoFactorProvider(
            repository=repository,
            begin_enrollment=provider._begin_enrollment,
            confirm_enrollment=provider._confirm_enrollment,
            save_settings=provider._save_settings,
            verify_code=None,  # type: ignore[arg-type]
            disable=provider._disable,
        )


def _build_totp_code(*, secret: str, timeslice: int, digits: int = 6) -> str:
    """
    Build deterministic RFC 6238 TOTP code for one slice index.

    Args:
        secret: Base32 TOTP secret.
        timeslice: Slice index (counter).
        digits: Number of code digits.
    Returns:
        str: Zero-padded numeric code string.
    """
    normalized = secret.strip().upper()
    padding = "=" * ((8 - (len(normalized) % 8)) % 8)
    key = base64.b32decode(f"{normalized}{padding}", casefold=True)
    digest = hmac.new(
        key,
        timeslice.to_bytes(8, byteorder="big", signed=False),
        hashlib.sha1,
    ).digest()
    offset = digest[-1] & 0x0F
    binary = int.from_bytes(digest[offset : offset + 4], byteorder="big") & 0x7FFFFFFF
    return str(binary % (10**digits)).zfill(digits)
