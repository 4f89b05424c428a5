from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class TotpVerification:
    """
    TotpVerification — outcome of checking one code against a TOTP window.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-v1.md
    Related:
      - src/tfa/contexts/two_factor/application/ports/totp_codec.py
      - src/tfa/contexts/two_factor/application/use_cases/verify_two_factor_code.py
    """

    valid: bool
    timeslice: int | None = None

    def __post_init__(self) -> None:
        """
        Validate that a matched slice is present exactly when the code is valid.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Slice indexes are `unix_seconds // period_seconds` and never negative.
        Raises:
            ValueError: If `timeslice` presence disagrees with `valid` or is negative.
        Side Effects:
            None.
        """
        if self.valid:
            if self.timeslice is None:
                raise ValueError("TotpVerification.timeslice is required when valid is true")
            if self.timeslice < 0:
                raise ValueError("TotpVerification.timeslice must be >= 0")
            return
        if self.timeslice is not None:
            raise ValueError("TotpVerification.timeslice must be None when valid is false")

    @classmethod
    def rejected(cls) -> TotpVerification:
        return cls(valid=False, timeslice=None)

    @classmethod
    def matched(cls, *, timeslice: int) -> TotpVerification:
        return cls(valid=True, timeslice=timeslice)
