from __future__ import annotations

from datetime import datetime, timezone

import pyotp
from pyotp.utils import strings_equal

from tfa.contexts.two_factor.application.ports.totp_codec import TotpCodec
from tfa.contexts.two_factor.domain.value_objects import TotpVerification

_DEFAULT_TOTP_DIGITS = 6
_DEFAULT_TOTP_PERIOD_SECONDS = 30
_MIN_SECRET_BITS = 160
_BASE32_BLOCK_BITS = 40
_BASE32_CHAR_BITS = 5


class PyOtpTotpCodec(TotpCodec):
    """
    PyOtpTotpCodec — RFC 6238 codec backed by `pyotp` reporting the matched slice.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-v1.md
    Related:
      - src/tfa/contexts/two_factor/application/ports/totp_codec.py
      - src/tfa/contexts/two_factor/application/use_cases/verify_two_factor_code.py
      - src/tfa/contexts/two_factor/application/use_cases/begin_two_factor_enrollment.py
    """

    def __init__(
        self,
        *,
        digits: int = _DEFAULT_TOTP_DIGITS,
        period_seconds: int = _DEFAULT_TOTP_PERIOD_SECONDS,
    ) -> None:
        """
        Initialize code length and slice length.

        Args:
            digits: Number of code digits.
            period_seconds: Slice length in seconds.
        Returns:
            None.
        Assumptions:
            Defaults match common authenticator apps (6 digits, 30 seconds, SHA1).
        Raises:
            ValueError: If arguments are outside supported ranges.
        Side Effects:
            None.
        """
        if digits <= 0 or digits > 10:
            raise ValueError("PyOtpTotpCodec digits must be within 1..10")
        if period_seconds <= 0:
            raise ValueError("PyOtpTotpCodec period_seconds must be > 0")

        self._digits = digits
        self._period_seconds = period_seconds

    def generate_secret(self, *, length_bits: int = _MIN_SECRET_BITS) -> str:
        """
        Generate new unpadded base32 secret.

        Args:
            length_bits: Secret entropy; at least 160 and a multiple of 40.
        Returns:
            str: Upper-case base32 secret of `length_bits / 5` characters.
        Assumptions:
            Multiples of 40 bits encode to whole base32 blocks, so no padding is needed.
        Raises:
            ValueError: If length is too short or not block aligned.
        Side Effects:
            Reads OS random source.
        """
        if length_bits < _MIN_SECRET_BITS:
            raise ValueError(f"PyOtpTotpCodec secrets must be at least {_MIN_SECRET_BITS} bits")
        if length_bits % _BASE32_BLOCK_BITS != 0:
            raise ValueError(
                f"PyOtpTotpCodec secret length must be a multiple of {_BASE32_BLOCK_BITS} bits"
            )
        secret = pyotp.random_base32(length=length_bits // _BASE32_CHAR_BITS)
        normalized = secret.strip().upper()
        if not normalized:
            raise ValueError("PyOtpTotpCodec generated empty secret")
        return normalized

    def verify_code(
        self,
        *,
        secret: str,
        code: str,
        discrepancy: int,
        at_time: datetime | None = None,
    ) -> TotpVerification:
        """
        Check code against current slice and `discrepancy` slices on each side.

        Args:
            secret: Plaintext base32 secret.
            code: User-submitted code.
            discrepancy: Accepted slices before and after the current one.
            at_time: Reference UTC time; system time when omitted.
        Returns:
            TotpVerification: First match scanning from oldest to newest slice.
        Assumptions:
            Malformed input is a negative outcome, never an exception.
        Raises:
            ValueError: If `at_time` is naive or not UTC.
        Side Effects:
            None.
        """
        now = datetime.now(timezone.utc) if at_time is None else at_time
        current_timeslice = self.timeslice_at(at_time=now)

        normalized_secret = _normalize_secret(secret=secret)
        normalized_code = code.strip() if isinstance(code, str) else ""
        if not normalized_secret or discrepancy < 0:
            return TotpVerification.rejected()
        if len(normalized_code) != self._digits or not normalized_code.isdigit():
            return TotpVerification.rejected()

        totp = pyotp.TOTP(
            normalized_secret,
            digits=self._digits,
            interval=self._period_seconds,
        )
        for offset in range(-discrepancy, discrepancy + 1):
            candidate = current_timeslice + offset
            if candidate < 0:
                continue
            try:
                expected_code = totp.generate_otp(candidate)
            except ValueError:
                # binascii.Error from a non-base32 secret is a ValueError subclass.
                return TotpVerification.rejected()
            if strings_equal(expected_code, normalized_code):
                return TotpVerification.matched(timeslice=candidate)
        return TotpVerification.rejected()

    def timeslice_at(self, *, at_time: datetime) -> int:
        """
        Return slice index `floor(unix_seconds / period_seconds)` for UTC instant.

        Args:
            at_time: Timezone-aware UTC datetime.
        Returns:
            int: Slice index.
        Raises:
            ValueError: If datetime is naive or non-UTC.
        """
        now = _ensure_utc_datetime(value=at_time, field_name="at_time")
        return int(now.timestamp()) // self._period_seconds

    def build_otpauth_uri(self, *, secret: str, account_label: str, issuer: str) -> str:
        """
        Build standard otpauth URI for QR rendering by the UI.

        Args:
            secret: Plaintext base32 secret.
            account_label: Account name shown in authenticator apps.
            issuer: Issuer label shown in authenticator apps.
        Returns:
            str: URI starting with `otpauth://totp`.
        Assumptions:
            Non-default digits/period are encoded by pyotp as URI parameters.
        Raises:
            ValueError: If any argument is empty or the produced URI is unexpected.
        Side Effects:
            None.
        """
        normalized_secret = _normalize_secret(secret=secret)
        normalized_label = account_label.strip()
        normalized_issuer = issuer.strip()
        if not normalized_secret:
            raise ValueError("PyOtpTotpCodec requires non-empty secret")
        if not normalized_label:
            raise ValueError("PyOtpTotpCodec requires non-empty account_label")
        if not normalized_issuer:
            raise ValueError("PyOtpTotpCodec requires non-empty issuer")

        totp = pyotp.TOTP(
            normalized_secret,
            digits=self._digits,
            interval=self._period_seconds,
        )
        uri = totp.provisioning_uri(name=normalized_label, issuer_name=normalized_issuer)
        if not uri.startswith("otpauth://totp"):
            raise ValueError("PyOtpTotpCodec produced invalid otpauth URI")
        return uri


def _normalize_secret(*, secret: str) -> str:
    """
    Strip whitespace (including grouping spaces users type) and upper-case secret.

    Args:
        secret: Raw secret value.
    Returns:
        str: Normalized secret, or `""` for non-string input.
    """
    if not isinstance(secret, str):
        return ""
    return "".join(secret.split()).upper()


def _ensure_utc_datetime(*, value: datetime, field_name: str) -> datetime:
    """
    Validate datetime is timezone-aware UTC and return same value.

    Args:
        value: Datetime value to validate.
        field_name: Field label for error message.
    Returns:
        datetime: Same validated datetime.
    Assumptions:
        UTC datetimes have zero offset.
    Raises:
        ValueError: If datetime is naive or non-UTC.
    Side Effects:
        None.
    """
    offset = value.utcoffset()
    if value.tzinfo is None or offset is None:
        raise ValueError(f"{field_name} must be timezone-aware UTC datetime")
    if offset.total_seconds() != 0:
        raise ValueError(f"{field_name} must be UTC datetime")
    return value
