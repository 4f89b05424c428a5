from __future__ import annotations

from datetime import datetime
from typing import Protocol


class TwoFactorClock(Protocol):
    """
    TwoFactorClock — port of the current UTC time used to pick TOTP slices.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-v1.md
    Related:
      - src/tfa/contexts/two_factor/adapters/outbound/time/system_two_factor_clock.py
      - src/tfa/contexts/two_factor/application/use_cases/verify_two_factor_code.py
    """

    def now(self) -> datetime:
        """
        Return current UTC timestamp.

        Args:
            None.
        Returns:
            datetime: Timezone-aware UTC datetime.
        Assumptions:
            Host clock is synchronized closely enough for the configured window.
        Raises:
            None.
        Side Effects:
            None.
        """
        ...
