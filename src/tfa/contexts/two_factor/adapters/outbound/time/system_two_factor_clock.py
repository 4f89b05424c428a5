from __future__ import annotations

from datetime import datetime, timezone

from tfa.contexts.two_factor.application.ports.clock import TwoFactorClock


class SystemTwoFactorClock(TwoFactorClock):
    """
    SystemTwoFactorClock — `TwoFactorClock` backed by system UTC time.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-v1.md
    Related:
      - src/tfa/contexts/two_factor/application/ports/clock.py
      - apps/api/wiring/modules/two_factor.py
    """

    def now(self) -> datetime:
        """
        Return current timezone-aware UTC datetime.

        Args:
            None.
        Returns:
            datetime: Current UTC datetime.
        Assumptions:
            System clock is synchronized (NTP); drift beyond the window rejects codes.
        Raises:
            None.
        Side Effects:
            Reads system wall clock.
        """
        return datetime.now(timezone.utc)
