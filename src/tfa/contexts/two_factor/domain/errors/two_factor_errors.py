from __future__ import annotations


class TwoFactorOperationError(RuntimeError):
    """
    TwoFactorOperationError — base error for two-factor failures surfaced to callers.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-v1.md
    Related:
      - src/tfa/contexts/two_factor/application/ports/settings_repository.py
      - src/tfa/contexts/two_factor/adapters/inbound/api/routes/two_factor_totp.py
      - apps/api/wiring/modules/two_factor.py

    Wrong, expired, or replayed codes are never reported through this hierarchy;
    they are plain `False` outcomes.
    """

    def __init__(self, *, code: str, message: str, status_code: int) -> None:
        """
        Initialize stable error attributes for HTTP mapping.

        Args:
            code: Machine-readable error code.
            message: Human-readable message.
            status_code: HTTP status expected by inbound adapter.
        Returns:
            None.
        Assumptions:
            Status code is final and needs no extra adapter mapping.
        Raises:
            None.
        Side Effects:
            None.
        """
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code

    def payload(self) -> dict[str, str]:
        """
        Build HTTP error payload with stable key order.

        Returns:
            dict[str, str]: `{"error": "...", "message": "..."}` payload.
        """
        return {
            "error": self.code,
            "message": self.message,
        }


class TwoFactorSettingsPersistenceError(TwoFactorOperationError):
    """
    TwoFactorSettingsPersistenceError — settings store failed to read or write a record.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-v1.md
    Related:
      - src/tfa/contexts/two_factor/adapters/outbound/persistence/postgres/settings_repository.py
      - src/tfa/contexts/two_factor/application/use_cases/confirm_two_factor_enrollment.py
    """

    def __init__(self, *, detail: str = "") -> None:
        """
        Initialize 503 error; `detail` is kept for logs and never sent to clients.

        Args:
            detail: Optional adapter-specific failure description.
        Returns:
            None.
        """
        super().__init__(
            code="two_factor_settings_unavailable",
            message="Two-factor settings are temporarily unavailable. Please try again later.",
            status_code=503,
        )
        self.detail = detail


class TwoFactorDependencyUnavailableError(TwoFactorOperationError):
    """
    TwoFactorDependencyUnavailableError — required crypto library is not installed.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-v1.md
    Related:
      - apps/api/wiring/modules/two_factor.py
    """

    def __init__(self, *, module_name: str) -> None:
        """
        Initialize fatal setup error naming the missing module.

        Args:
            module_name: Import name of the missing dependency.
        Returns:
            None.
        Assumptions:
            Raised at startup only; never retried.
        """
        super().__init__(
            code="two_factor_dependency_unavailable",
            message=f"Required two-factor dependency '{module_name}' is not installed.",
            status_code=500,
        )
        self.module_name = module_name
