from __future__ import annotations

from typing import Protocol

PENDING_SECRET_KEY = "pending_secret"


class EnrollmentSessionStore(Protocol):
    """
    EnrollmentSessionStore — ephemeral key/value store of one enrollment attempt.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-v1.md
    Related:
      - src/tfa/contexts/two_factor/adapters/outbound/session/in_memory_enrollment_session_store.py
      - src/tfa/contexts/two_factor/application/use_cases/begin_two_factor_enrollment.py
      - src/tfa/contexts/two_factor/application/use_cases/confirm_two_factor_enrollment.py

    Only the unconfirmed secret is kept here, under `PENDING_SECRET_KEY`.
    """

    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        """Remove key; missing keys are ignored."""
        ...

    def pop(self, key: str) -> str | None:
        """
        Atomically remove key and return its value, or `None` when absent.

        Args:
            key: Entry key, usually `PENDING_SECRET_KEY`.
        Returns:
            str | None: Removed value.
        Assumptions:
            Concurrent callers never both receive the same value.
        Raises:
            None.
        Side Effects:
            Deletes the entry.
        """
        ...
