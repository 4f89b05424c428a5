"""
Composition helpers for two-factor API module.

Docs: docs/architecture/two_factor/two-factor-totp-v1.md
"""

from __future__ import annotations

import importlib.util
import logging
from dataclasses import dataclass
from typing import Mapping

from fastapi import APIRouter

from apps.api.routes import build_two_factor_router as build_two_factor_api_router
from tfa.contexts.two_factor.adapters.inbound.api.deps import RequireUserIdHeaderDependency
from tfa.contexts.two_factor.adapters.outbound.persistence import (
    InMemoryTwoFactorSettingsRepository,
    PostgresTwoFactorSettingsRepository,
    PsycopgTwoFactorPostgresGateway,
)
from tfa.contexts.two_factor.adapters.outbound.session import InMemoryEnrollmentSessionRegistry
from tfa.contexts.two_factor.adapters.outbound.time import SystemTwoFactorClock
from tfa.contexts.two_factor.application.ports import (
    TotpCodec,
    TwoFactorSecretVault,
    TwoFactorSettingsRepository,
)
from tfa.contexts.two_factor.application.use_cases import (
    BeginTwoFactorEnrollmentUseCase,
    ConfirmTwoFactorEnrollmentUseCase,
    DisableTwoFactorUseCase,
    SaveTwoFactorSettingsUseCase,
    TotpTwoFactorProvider,
    VerifyTwoFactorCodeUseCase,
)
from tfa.contexts.two_factor.domain.errors import TwoFactorDependencyUnavailableError
from tfa.platform.config import (
    TwoFactorTotpConfig,
    load_two_factor_totp_config,
    resolve_env_name,
)

log = logging.getLogger(__name__)

_FAIL_FAST_KEY = "TFA_FAIL_FAST"
_SECRET_KEK_KEY = "TFA_SECRET_KEK_B64"
_PG_DSN_KEY = "TFA_PG_DSN"
_USER_HEADER_KEY = "TFA_USER_HEADER"
_DEFAULT_USER_HEADER = "X-User-Id"
_ALLOWED_ENVS = ("dev", "prod", "test")


@dataclass(frozen=True, slots=True)
class TwoFactorRuntimeSettings:
    """
    TwoFactorRuntimeSettings — runtime policy for two-factor wiring.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-v1.md
    Related:
      - apps/api/wiring/modules/two_factor.py
      - apps/api/main/app.py
      - src/tfa/platform/config/two_factor_totp.py
    """

    env_name: str
    fail_fast: bool
    secret_kek_b64: str
    postgres_dsn: str
    user_header: str

    def __post_init__(self) -> None:
        """
        Validate two-factor runtime settings invariants.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Values are normalized by resolver before dataclass construction.
        Raises:
            ValueError: If one of invariants is violated.
        Side Effects:
            None.
        """
        if self.env_name not in _ALLOWED_ENVS:
            raise ValueError(
                f"TwoFactorRuntimeSettings.env_name must be one of {_ALLOWED_ENVS}, "
                f"got {self.env_name!r}"
            )
        if self.fail_fast and not self.secret_kek_b64:
            raise ValueError("TwoFactorRuntimeSettings.secret_kek_b64 is required when fail_fast")
        if not self.user_header:
            raise ValueError("TwoFactorRuntimeSettings.user_header must be non-empty")


@dataclass(frozen=True, slots=True)
class TwoFactorApiModule:
    """
    TwoFactorApiModule — wired router plus provider for other modules to reuse.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-v1.md
    Related:
      - apps/api/main/app.py
      - src/tfa/contexts/two_factor/application/ports/two_factor_provider.py
    """

    router: APIRouter
    provider: TotpTwoFactorProvider
    current_user_dependency: RequireUserIdHeaderDependency


def build_two_factor_api_module(*, environ: Mapping[str, str]) -> TwoFactorApiModule:
    """
    Build fully wired two-factor module from environment settings.

    Docs: docs/architecture/two_factor/two-factor-totp-v1.md
    Related: apps.api.routes.two_factor,
      tfa.contexts.two_factor.adapters.outbound,
      apps.api.main.app

    Args:
        environ: Runtime environment mapping.
    Returns:
        TwoFactorApiModule: Router, provider and current-user dependency.
    Assumptions:
        Missing DSN selects in-memory storage; missing KEK selects passthrough vault.
    Raises:
        TwoFactorDependencyUnavailableError: If `pyotp` or `cryptography` is not installed.
        FileNotFoundError: If explicit TOTP config path is missing.
        ValueError: If fail-fast settings require missing secrets or values are invalid.
    Side Effects:
        Reads TOTP YAML config.
    """
    settings = _resolve_two_factor_runtime_settings(environ=environ)
    config = load_two_factor_totp_config(environ=environ)

    provider = build_two_factor_provider(
        config=config,
        repository=_build_settings_repository(settings=settings),
        secret_vault=_build_secret_vault(settings=settings),
    )
    current_user_dependency = RequireUserIdHeaderDependency(header_name=settings.user_header)
    router = build_two_factor_api_router(
        provider=provider,
        current_user_dependency=current_user_dependency,
        session_registry=InMemoryEnrollmentSessionRegistry(),
    )
    log.info(
        "event=two_factor_module_wired env=%s storage=%s vault=%s issuer=%s discrepancy=%s",
        settings.env_name,
        "postgres" if settings.postgres_dsn else "in_memory",
        "aes_gcm" if settings.secret_kek_b64 else "passthrough",
        config.title,
        config.discrepancy,
    )
    return TwoFactorApiModule(
        router=router,
        provider=provider,
        current_user_dependency=current_user_dependency,
    )


def build_two_factor_router(*, environ: Mapping[str, str]) -> APIRouter:
    """
    Build fully wired two-factor router from environment settings.

    Args:
        environ: Runtime environment mapping.
    Returns:
        APIRouter: Two-factor API router.
    Raises:
        TwoFactorDependencyUnavailableError: If a required library is missing.
        ValueError: If runtime settings are invalid.
    """
    return build_two_factor_api_module(environ=environ).router


def build_two_factor_provider(
    *,
    config: TwoFactorTotpConfig,
    repository: TwoFactorSettingsRepository,
    secret_vault: TwoFactorSecretVault,
) -> TotpTwoFactorProvider:
    """
    Compose use-cases into the TOTP provider facade.

    Args:
        config: Resolved TOTP settings.
        repository: Settings persistence adapter.
        secret_vault: Secret-at-rest protection adapter.
    Returns:
        TotpTwoFactorProvider: Provider sharing one codec and clock across use-cases.
    Raises:
        TwoFactorDependencyUnavailableError: If `pyotp` is not installed.
    Side Effects:
        None.
    """
    totp_codec = _build_totp_codec(config=config)
    clock = SystemTwoFactorClock()
    save_settings = SaveTwoFactorSettingsUseCase(
        repository=repository,
        secret_vault=secret_vault,
    )
    return TotpTwoFactorProvider(
        repository=repository,
        begin_enrollment=BeginTwoFactorEnrollmentUseCase(
            repository=repository,
            totp_codec=totp_codec,
            issuer=config.title,
            secret_bits=config.secret_bits,
        ),
        confirm_enrollment=ConfirmTwoFactorEnrollmentUseCase(
            repository=repository,
            totp_codec=totp_codec,
            save_settings=save_settings,
            clock=clock,
            discrepancy=config.discrepancy,
        ),
        save_settings=save_settings,
        verify_code=VerifyTwoFactorCodeUseCase(
            repository=repository,
            secret_vault=secret_vault,
            totp_codec=totp_codec,
            clock=clock,
            discrepancy=config.discrepancy,
        ),
        disable=DisableTwoFactorUseCase(
            repository=repository,
            save_settings=save_settings,
        ),
    )


def _build_totp_codec(*, config: TwoFactorTotpConfig) -> TotpCodec:
    """
    Build pyotp-backed codec after checking the library is importable.

    Args:
        config: Resolved TOTP settings.
    Returns:
        TotpCodec: Codec configured with digits and period.
    Raises:
        TwoFactorDependencyUnavailableError: If `pyotp` is not installed.
    Side Effects:
        Imports codec adapter module.
    """
    _require_module(module_name="pyotp")
    from tfa.contexts.two_factor.adapters.outbound.security.totp import PyOtpTotpCodec

    return PyOtpTotpCodec(digits=config.digits, period_seconds=config.period_seconds)


def _build_secret_vault(*, settings: TwoFactorRuntimeSettings) -> TwoFactorSecretVault:
    """
    Build secret vault adapter based on KEK availability.

    Args:
        settings: Resolved runtime settings.
    Returns:
        TwoFactorSecretVault: AES-GCM envelope vault or passthrough vault.
    Assumptions:
        Passthrough storage is acceptable only for dev/test runs.
    Raises:
        TwoFactorDependencyUnavailableError: If KEK is set but `cryptography` is missing.
        ValueError: If KEK is malformed.
    Side Effects:
        Imports vault adapter modules.
    """
    if settings.secret_kek_b64:
        _require_module(module_name="cryptography")
        from tfa.contexts.two_factor.adapters.outbound.security.vault import (
            AesGcmEnvelopeTwoFactorSecretVault,
        )

        return AesGcmEnvelopeTwoFactorSecretVault(kek_b64=settings.secret_kek_b64)

    from tfa.contexts.two_factor.adapters.outbound.security.vault import (
        PassthroughTwoFactorSecretVault,
    )

    log.warning("event=two_factor_secret_vault_passthrough env=%s", settings.env_name)
    return PassthroughTwoFactorSecretVault()


def _build_settings_repository(
    *,
    settings: TwoFactorRuntimeSettings,
) -> TwoFactorSettingsRepository:
    """
    Build settings repository adapter based on runtime DSN availability.

    Args:
        settings: Resolved runtime settings.
    Returns:
        TwoFactorSettingsRepository: Postgres or in-memory adapter.
    Assumptions:
        Postgres DSN is optional in dev/test, in-memory fallback is acceptable for local runs.
    Raises:
        ValueError: If Postgres DSN is malformed for gateway construction.
    Side Effects:
        None.
    """
    if settings.postgres_dsn:
        gateway = PsycopgTwoFactorPostgresGateway(dsn=settings.postgres_dsn)
        return PostgresTwoFactorSettingsRepository(gateway=gateway)
    return InMemoryTwoFactorSettingsRepository()


def _require_module(*, module_name: str) -> None:
    """
    Fail with a setup error when a library cannot be imported.

    Args:
        module_name: Top-level import name.
    Returns:
        None.
    Raises:
        TwoFactorDependencyUnavailableError: If module spec cannot be found.
    Side Effects:
        None.
    """
    if importlib.util.find_spec(module_name) is None:
        log.error("event=two_factor_dependency_missing module=%s", module_name)
        raise TwoFactorDependencyUnavailableError(module_name=module_name)


def _resolve_two_factor_runtime_settings(
    *,
    environ: Mapping[str, str],
) -> TwoFactorRuntimeSettings:
    """
    Resolve two-factor runtime settings with fail-fast policy and defaults.

    Args:
        environ: Runtime environment mapping.
    Returns:
        TwoFactorRuntimeSettings: Validated normalized settings.
    Assumptions:
        Missing `TFA_ENV` defaults to `dev`.
    Raises:
        ValueError: If env values are invalid or fail-fast policy requires missing secrets.
    Side Effects:
        None.
    """
    env_name = resolve_env_name(environ=environ)
    fail_fast = _resolve_fail_fast(environ=environ, env_name=env_name)

    secret_kek_b64 = environ.get(_SECRET_KEK_KEY, "").strip()
    if fail_fast and not secret_kek_b64:
        raise ValueError(f"{_SECRET_KEK_KEY} must be set when {_FAIL_FAST_KEY}=true")

    return TwoFactorRuntimeSettings(
        env_name=env_name,
        fail_fast=fail_fast,
        secret_kek_b64=secret_kek_b64,
        postgres_dsn=environ.get(_PG_DSN_KEY, "").strip(),
        user_header=environ.get(_USER_HEADER_KEY, _DEFAULT_USER_HEADER).strip(),
    )


def _resolve_fail_fast(*, environ: Mapping[str, str], env_name: str) -> bool:
    """
    Resolve fail-fast policy for two-factor startup validation.

    Args:
        environ: Runtime environment mapping.
        env_name: Normalized environment name.
    Returns:
        bool: Effective fail-fast flag.
    Assumptions:
        Default is enabled for `prod` and disabled for `dev`/`test`.
    Raises:
        ValueError: If override value is not parseable as boolean.
    Side Effects:
        None.
    """
    default_fail_fast = env_name == "prod"
    raw_override = environ.get(_FAIL_FAST_KEY, "").strip()
    if not raw_override:
        return default_fail_fast
    return _parse_bool(raw_value=raw_override, key=_FAIL_FAST_KEY)


def _parse_bool(*, raw_value: str, key: str) -> bool:
    """
    Parse strict boolean env value from known textual literals.

    Args:
        raw_value: Raw env string value.
        key: Env key used in error messages.
    Returns:
        bool: Parsed boolean value.
    Assumptions:
        Accepted true values: `1,true,yes,on`; false values: `0,false,no,off`.
    Raises:
        ValueError: If value is not recognized.
    Side Effects:
        None.
    """
    normalized = raw_value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise ValueError(
        f"{key} must be a boolean literal (1/0/true/false/yes/no/on/off), got {raw_value!r}"
    )
