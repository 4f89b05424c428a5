from __future__ import annotations

from tfa.contexts.two_factor.application.dto import (
    ConfirmTwoFactorEnrollmentResult,
    TwoFactorEnrollmentView,
)
from tfa.contexts.two_factor.application.ports.enrollment_session_store import (
    EnrollmentSessionStore,
)
from tfa.contexts.two_factor.application.ports.settings_repository import (
    TwoFactorSettingsRepository,
)
from tfa.contexts.two_factor.application.ports.two_factor_provider import TwoFactorProvider
from tfa.contexts.two_factor.application.use_cases.begin_two_factor_enrollment import (
    BeginTwoFactorEnrollmentUseCase,
)
from tfa.contexts.two_factor.application.use_cases.confirm_two_factor_enrollment import (
    ConfirmTwoFactorEnrollmentUseCase,
)
from tfa.contexts.two_factor.application.use_cases.disable_two_factor import (
    DisableTwoFactorUseCase,
)
from tfa.contexts.two_factor.application.use_cases.save_two_factor_settings import (
    SaveTwoFactorSettingsUseCase,
)
from tfa.contexts.two_factor.application.use_cases.verify_two_factor_code import (
    VerifyTwoFactorCodeUseCase,
    two_factor_enabled_for_user,
)
from tfa.contexts.two_factor.domain.entities import UserTfaSettings
from tfa.shared_kernel.primitives import UserId


class TotpTwoFactorProvider(TwoFactorProvider):
    """
    TotpTwoFactorProvider — TOTP implementation of the two-factor capability interface.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-v1.md
    Related:
      - src/tfa/contexts/two_factor/application/ports/two_factor_provider.py
      - apps/api/wiring/modules/two_factor.py
      - src/tfa/contexts/two_factor/adapters/inbound/api/routes/two_factor_totp.py

    Thin facade: every operation delegates to one use-case so callers depend on a
    single object instead of the whole use-case graph.
    """

    def __init__(
        self,
        *,
        repository: TwoFactorSettingsRepository,
        begin_enrollment: BeginTwoFactorEnrollmentUseCase,
        confirm_enrollment: ConfirmTwoFactorEnrollmentUseCase,
        save_settings: SaveTwoFactorSettingsUseCase,
        verify_code: VerifyTwoFactorCodeUseCase,
        disable: DisableTwoFactorUseCase,
    ) -> None:
        """
        Initialize provider from already wired use-cases.

        Args:
            repository: Settings persistence port for plain reads.
            begin_enrollment: Enrollment start use-case.
            confirm_enrollment: Enrollment confirmation use-case.
            save_settings: Vault-aware settings writer.
            verify_code: Login-time verification use-case.
            disable: Disable use-case.
        Returns:
            None.
        Raises:
            ValueError: If a dependency is missing.
        """
        dependencies = {
            "repository": repository,
            "begin_enrollment": begin_enrollment,
            "confirm_enrollment": confirm_enrollment,
            "save_settings": save_settings,
            "verify_code": verify_code,
            "disable": disable,
        }
        for name, dependency in dependencies.items():
            if dependency is None:
                raise ValueError(f"TotpTwoFactorProvider requires {name}")

        self._repository = repository
        self._begin_enrollment = begin_enrollment
        self._confirm_enrollment = confirm_enrollment
        self._save_settings = save_settings
        self._verify_code = verify_code
        self._disable = disable

    def enabled_for_user(self, *, settings: UserTfaSettings) -> bool:
        return two_factor_enabled_for_user(settings)

    def is_valid_user_code(
        self,
        *,
        user_id: UserId,
        code: str,
        settings: UserTfaSettings | None = None,
    ) -> bool:
        return self._verify_code.verify(user_id=user_id, code=code, settings=settings)

    def get_user_settings_fields(
        self,
        *,
        user_id: UserId,
        session: EnrollmentSessionStore,
        account_label: str | None = None,
    ) -> TwoFactorEnrollmentView | None:
        return self._begin_enrollment.begin(
            user_id=user_id,
            session=session,
            account_label=account_label,
        )

    def process_user_settings_fields(
        self,
        *,
        user_id: UserId,
        session: EnrollmentSessionStore,
        code: str | None = None,
        submitted_settings: UserTfaSettings | None = None,
    ) -> ConfirmTwoFactorEnrollmentResult:
        return self._confirm_enrollment.confirm(
            user_id=user_id,
            session=session,
            code=code,
            submitted_settings=submitted_settings,
        )

    def save_user_settings(
        self,
        *,
        user_id: UserId,
        settings: UserTfaSettings,
    ) -> UserTfaSettings:
        return self._save_settings.save(user_id=user_id, settings=settings)

    def read_user_settings(self, *, user_id: UserId) -> UserTfaSettings:
        return self._repository.read(user_id=user_id)

    def disable(self, *, user_id: UserId) -> UserTfaSettings:
        return self._disable.disable(user_id=user_id)
