from __future__ import annotations

from datetime import datetime
from typing import Protocol

from tfa.contexts.two_factor.domain.value_objects import TotpVerification


class TotpCodec(Protocol):
    """
    TotpCodec — port over an RFC 6238 TOTP primitive library.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-v1.md
    Related:
      - src/tfa/contexts/two_factor/adapters/outbound/security/totp/pyotp_totp_codec.py
      - src/tfa/contexts/two_factor/application/use_cases/begin_two_factor_enrollment.py
      - src/tfa/contexts/two_factor/application/use_cases/verify_two_factor_code.py
    """

    def generate_secret(self, *, length_bits: int = 160) -> str:
        """
        Generate new base32 secret for authenticator apps.

        Args:
            length_bits: Secret entropy in bits.
        Returns:
            str: Unpadded upper-case base32 secret.
        Assumptions:
            Randomness comes from a cryptographically secure source.
        Raises:
            ValueError: If requested length is unsupported.
        Side Effects:
            Reads OS random source.
        """
        ...

    def verify_code(
        self,
        *,
        secret: str,
        code: str,
        discrepancy: int,
        at_time: datetime | None = None,
    ) -> TotpVerification:
        """
        Check code against `2 * discrepancy + 1` slices centered on `at_time`.

        Args:
            secret: Plaintext base32 secret.
            code: User-submitted code.
            discrepancy: Accepted slices before and after the current one.
            at_time: Reference UTC time; current time when omitted.
        Returns:
            TotpVerification: Match flag and matched slice index.
        Assumptions:
            Empty or malformed secret/code are negative outcomes, not errors.
        Raises:
            ValueError: If `at_time` is naive or not UTC.
        Side Effects:
            None.
        """
        ...

    def timeslice_at(self, *, at_time: datetime) -> int:
        """
        Return TOTP slice index for UTC instant.
        """
        ...

    def build_otpauth_uri(self, *, secret: str, account_label: str, issuer: str) -> str:
        """
        Build `otpauth://totp` URI consumed by the QR rendering collaborator.

        Args:
            secret: Plaintext base32 secret.
            account_label: Account name shown in authenticator apps.
            issuer: Issuer label shown in authenticator apps.
        Returns:
            str: URI starting with `otpauth://totp`.
        Assumptions:
            URI carries the secret and must never be logged.
        Raises:
            ValueError: If secret, label, or issuer is empty.
        Side Effects:
            None.
        """
        ...
