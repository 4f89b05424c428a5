from __future__ import annotations

import base64
import hashlib
import hmac
from datetime import datetime, timedelta, timezone

import pytest

from tfa.contexts.two_factor.adapters.outbound.persistence.in_memory import (
    InMemoryTwoFactorSettingsRepository,
)
from tfa.contexts.two_factor.adapters.outbound.security.totp import PyOtpTotpCodec
from tfa.contexts.two_factor.adapters.outbound.security.vault import (
    AesGcmEnvelopeTwoFactorSecretVault,
    PassthroughTwoFactorSecretVault,
)
from tfa.contexts.two_factor.application.ports.clock import TwoFactorClock
from tfa.contexts.two_factor.application.use_cases import (
    SaveTwoFactorSettingsUseCase,
    VerifyTwoFactorCodeUseCase,
    two_factor_enabled_for_user,
)
from tfa.contexts.two_factor.domain.entities import UserTfaSettings
from tfa.shared_kernel.primitives import UserId

_SECRET = "JBSWY3DPEHPK3PXPJBSWY3DPEHPK3PXP"
_NOW = datetime(2026, 2, 14, 16, 30, 10, tzinfo=timezone.utc)
_PERIOD_SECONDS = 30
_USER_ID = UserId.from_string("user-301")
_KEK_B64 = base64.b64encode(b"tfa-unit-test-two-factor-kek-001").decode("ascii")


class _MutableClock(TwoFactorClock):
    """
    Mutable deterministic UTC clock for login verification flows.
    """

    def __init__(self, *, now_value: datetime) -> None:
        self._now_value = now_value

    def set_now(self, *, now_value: datetime) -> None:
        self._now_value = now_value

    def now(self) -> datetime:
        return self._now_value


class _LosingRaceRepository(InMemoryTwoFactorSettingsRepository):
    """
    Repository whose watermark advance always loses to a concurrent writer.
    """

    def advance_timeslice(self, *, user_id: UserId, expected: int, timeslice: int) -> bool:
        return False


class _CountingReadRepository(InMemoryTwoFactorSettingsRepository):
    """
    Repository counting explicit reads.
    """

    def __init__(self) -> None:
        super().__init__()
        self.reads = 0

    def read(self, *, user_id: UserId) -> UserTfaSettings:
        self.reads += 1
        return super().read(user_id=user_id)


def _build_verify_use_case(
    *,
    repository: InMemoryTwoFactorSettingsRepository,
    clock: TwoFactorClock,
    discrepancy: int = 1,
    secret_vault: object | None = None,
) -> VerifyTwoFactorCodeUseCase:
    return VerifyTwoFactorCodeUseCase(
        repository=repository,
        secret_vault=secret_vault or PassthroughTwoFactorSecretVault(),  # type: ignore[arg-type]
        totp_codec=PyOtpTotpCodec(),
        clock=clock,
        discrepancy=discrepancy,
    )


def _enable(
    *,
    repository: InMemoryTwoFactorSettingsRepository,
    timeslice: int = 0,
) -> UserTfaSettings:
    return repository.write(
        user_id=_USER_ID,
        settings=UserTfaSettings(enabled=True, secret=_SECRET, timeslice=timeslice),
    )


def _current_timeslice(*, at_time: datetime = _NOW) -> int:
    return int(at_time.timestamp()) // _PERIOD_SECONDS


@pytest.mark.parametrize("discrepancy", [0, 1, 2])
def test_verify_accepts_current_slice_code_and_advances_watermark(discrepancy: int) -> None:
    """
    Verify a fresh current-slice code succeeds and stores its slice as new watermark.

    Args:
        discrepancy: Window size under test.
    Returns:
        None.
    Assumptions:
        Stored watermark starts at 0, far behind real clocks.
    Raises:
        AssertionError: If code is rejected or watermark is not advanced.
    Side Effects:
        None.
    """
    repository = InMemoryTwoFactorSettingsRepository()
    _enable(repository=repository)
    use_case = _build_verify_use_case(
        repository=repository,
        clock=_MutableClock(now_value=_NOW),
        discrepancy=discrepancy,
    )
    timeslice = _current_timeslice()

    assert use_case.verify(
        user_id=_USER_ID,
        code=_build_totp_code(secret=_SECRET, timeslice=timeslice),
    ) is True
    assert repository.read(user_id=_USER_ID).timeslice == timeslice


def test_verify_rejects_replay_of_the_same_code() -> None:
    repository = InMemoryTwoFactorSettingsRepository()
    _enable(repository=repository)
    use_case = _build_verify_use_case(repository=repository, clock=_MutableClock(now_value=_NOW))
    code = _build_totp_code(secret=_SECRET, timeslice=_current_timeslice())

    assert use_case.verify(user_id=_USER_ID, code=code) is True
    assert use_case.verify(user_id=_USER_ID, code=code) is False


def test_verify_rejects_older_slice_after_newer_one_was_accepted() -> None:
    """
    Verify a code from a slice at or below the watermark is refused even inside the window.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Window of one slice accepts T-1, T, and T+1.
    Raises:
        AssertionError: If an already superseded slice is accepted.
    Side Effects:
        None.
    """
    repository = InMemoryTwoFactorSettingsRepository()
    _enable(repository=repository)
    use_case = _build_verify_use_case(repository=repository, clock=_MutableClock(now_value=_NOW))
    timeslice = _current_timeslice()
    codes_by_slice = {
        candidate: _build_totp_code(secret=_SECRET, timeslice=candidate)
        for candidate in (timeslice - 1, timeslice, timeslice + 1)
    }
    if len(set(codes_by_slice.values())) != len(codes_by_slice):
        pytest.skip("adjacent slices produced identical codes")

    assert use_case.verify(user_id=_USER_ID, code=codes_by_slice[timeslice + 1]) is True
    assert use_case.verify(user_id=_USER_ID, code=codes_by_slice[timeslice]) is False
    assert use_case.verify(user_id=_USER_ID, code=codes_by_slice[timeslice - 1]) is False
    assert repository.read(user_id=_USER_ID).timeslice == timeslice + 1


def test_verify_window_accepts_adjacent_slices_and_rejects_outer_ones() -> None:
    timeslice = _current_timeslice()
    window_codes = {
        _build_totp_code(secret=_SECRET, timeslice=candidate)
        for candidate in (timeslice - 1, timeslice, timeslice + 1)
    }

    for offset, expected in ((-2, False), (-1, True), (1, True), (2, False)):
        code = _build_totp_code(secret=_SECRET, timeslice=timeslice + offset)
        if not expected and code in window_codes:
            pytest.skip("outer slice code collides with window code")
        repository = InMemoryTwoFactorSettingsRepository()
        _enable(repository=repository)
        use_case = _build_verify_use_case(
            repository=repository,
            clock=_MutableClock(now_value=_NOW),
        )

        assert use_case.verify(user_id=_USER_ID, code=code) is expected


def test_verify_accepts_next_slice_code_after_clock_moves_forward() -> None:
    repository = InMemoryTwoFactorSettingsRepository()
    _enable(repository=repository)
    clock = _MutableClock(now_value=_NOW)
    use_case = _build_verify_use_case(repository=repository, clock=clock, discrepancy=0)

    first_slice = _current_timeslice()
    assert use_case.verify(
        user_id=_USER_ID,
        code=_build_totp_code(secret=_SECRET, timeslice=first_slice),
    ) is True

    later = _NOW + timedelta(seconds=_PERIOD_SECONDS)
    clock.set_now(now_value=later)
    assert use_case.verify(
        user_id=_USER_ID,
        code=_build_totp_code(secret=_SECRET, timeslice=_current_timeslice(at_time=later)),
    ) is True


def test_verify_returns_false_when_watermark_advance_loses_race() -> None:
    repository = _LosingRaceRepository()
    _enable(repository=repository)
    use_case = _build_verify_use_case(repository=repository, clock=_MutableClock(now_value=_NOW))

    assert use_case.verify(
        user_id=_USER_ID,
        code=_build_totp_code(secret=_SECRET, timeslice=_current_timeslice()),
    ) is False
    assert repository.read(user_id=_USER_ID).timeslice == 0


def test_verify_uses_caller_snapshot_without_reading_store() -> None:
    repository = _CountingReadRepository()
    snapshot = _enable(repository=repository)
    use_case = _build_verify_use_case(repository=repository, clock=_MutableClock(now_value=_NOW))

    accepted = use_case.verify(
        user_id=_USER_ID,
        code=_build_totp_code(secret=_SECRET, timeslice=_current_timeslice()),
        settings=snapshot,
    )

    assert accepted is True
    assert repository.reads == 0


@pytest.mark.parametrize("code", ["", "   "])
def test_verify_rejects_blank_code(code: str) -> None:
    repository = InMemoryTwoFactorSettingsRepository()
    _enable(repository=repository)
    use_case = _build_verify_use_case(repository=repository, clock=_MutableClock(now_value=_NOW))

    assert use_case.verify(user_id=_USER_ID, code=code) is False


def test_verify_rejects_user_without_secret() -> None:
    repository = InMemoryTwoFactorSettingsRepository()
    use_case = _build_verify_use_case(repository=repository, clock=_MutableClock(now_value=_NOW))

    assert use_case.verify(
        user_id=_USER_ID,
        code=_build_totp_code(secret=_SECRET, timeslice=_current_timeslice()),
    ) is False


def test_verify_never_accepts_slice_zero_against_initial_watermark() -> None:
    repository = InMemoryTwoFactorSettingsRepository()
    _enable(repository=repository)
    near_epoch = datetime(1970, 1, 1, 0, 0, 10, tzinfo=timezone.utc)
    use_case = _build_verify_use_case(
        repository=repository,
        clock=_MutableClock(now_value=near_epoch),
        discrepancy=0,
    )

    assert use_case.verify(
        user_id=_USER_ID,
        code=_build_totp_code(secret=_SECRET, timeslice=0),
    ) is False


def test_verify_reveals_protected_secret_through_vault() -> None:
    vault = AesGcmEnvelopeTwoFactorSecretVault(kek_b64=_KEK_B64)
    repository = InMemoryTwoFactorSettingsRepository()
    SaveTwoFactorSettingsUseCase(repository=repository, secret_vault=vault).save(
        user_id=_USER_ID,
        settings=UserTfaSettings(enabled=True, secret=_SECRET),
    )
    use_case = _build_verify_use_case(
        repository=repository,
        clock=_MutableClock(now_value=_NOW),
        secret_vault=vault,
    )

    assert repository.read(user_id=_USER_ID).encrypted is True
    assert use_case.verify(
        user_id=_USER_ID,
        code=_build_totp_code(secret=_SECRET, timeslice=_current_timeslice()),
    ) is True


def test_verify_raises_when_protected_secret_is_corrupted() -> None:
    repository = InMemoryTwoFactorSettingsRepository()
    repository.write(
        user_id=_USER_ID,
        settings=UserTfaSettings(enabled=True, secret="corrupted-blob", encrypted=True),
    )
    use_case = _build_verify_use_case(
        repository=repository,
        clock=_MutableClock(now_value=_NOW),
        secret_vault=AesGcmEnvelopeTwoFactorSecretVault(kek_b64=_KEK_B64),
    )

    with pytest.raises(ValueError):
        use_case.verify(user_id=_USER_ID, code="123456")


def test_verify_use_case_rejects_negative_discrepancy() -> None:
    with pytest.raises(ValueError, match="discrepancy"):
        _build_verify_use_case(
            repository=InMemoryTwoFactorSettingsRepository(),
            clock=_MutableClock(now_value=_NOW),
            discrepancy=-1,
        )


@pytest.mark.parametrize(
    ("settings", "expected"),
    [
        (UserTfaSettings(enabled=True, secret=_SECRET), True),
        (UserTfaSettings(enabled=True, secret=""), False),
        (UserTfaSettings(enabled=False, secret=_SECRET), False),
        (UserTfaSettings(enabled=1, secret=_SECRET), False),
        (UserTfaSettings(enabled="true", secret=_SECRET), False),
        (UserTfaSettings.disabled(), False),
    ],
)
def test_two_factor_enabled_for_user_requires_literal_true_and_secret(
    settings: UserTfaSettings,
    expected: bool,
) -> None:
    assert two_factor_enabled_for_user(settings) is expected


def _build_totp_code(*, secret: str, timeslice: int, digits: int = 6) -> str:
    """
    Build deterministic RFC 6238 TOTP code for one slice index.

    Args:
        secret: Base32 TOTP secret.
        timeslice: Slice index (counter).
        digits: Number of code digits.
    Returns:
        str: Zero-padded numeric code string.
    Assumptions:
        HMAC-SHA1 profile matches codec defaults.
    Raises:
        ValueError: If secret cannot be decoded as base32.
    Side Effects:
        None.
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
