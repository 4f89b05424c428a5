from __future__ import annotations

from typing import Protocol

from tfa.contexts.two_factor.application.dto import (
    ConfirmTwoFactorEnrollmentResult,
    TwoFactorEnrollmentView,
)
from tfa.contexts.two_factor.application.ports.enrollment_session_store import (
    EnrollmentSessionStore,
)
from tfa.contexts.two_factor.domain.entities import UserTfaSettings
from tfa.shared_kernel.primitives import UserId


class TwoFactorProvider(Protocol):
    """
    TwoFactorProvider — capability interface a login/profile controller talks to.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-v1.md
    Related:
      - src/tfa/contexts/two_factor/application/use_cases/totp_two_factor_provider.py
      - src/tfa/contexts/two_factor/adapters/inbound/api/routes/two_factor_totp.py
    """

    def enabled_for_user(self, *, settings: UserTfaSettings) -> bool:
        ...

    def is_valid_user_code(
        self,
        *,
        user_id: UserId,
        code: str,
        settings: UserTfaSettings | None = None,
    ) -> bool:
        ...

    def get_user_settings_fields(
        self,
        *,
        user_id: UserId,
        session: EnrollmentSessionStore,
        account_label: str | None = None,
    ) -> TwoFactorEnrollmentView | None:
        ...

    def process_user_settings_fields(
        self,
        *,
        user_id: UserId,
        session: EnrollmentSessionStore,
        code: str | None = None,
        submitted_settings: UserTfaSettings | None = None,
    ) -> ConfirmTwoFactorEnrollmentResult:
        ...

    def save_user_settings(
        self,
        *,
        user_id: UserId,
        settings: UserTfaSettings,
    ) -> UserTfaSettings:
        ...

    def read_user_settings(self, *, user_id: UserId) -> UserTfaSettings:
        ...

    def disable(self, *, user_id: UserId) -> UserTfaSettings:
        ...
