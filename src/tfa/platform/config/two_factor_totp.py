"""
Runtime config loader for TOTP second-factor settings.

Docs: docs/architecture/two_factor/two-factor-totp-v1.md
Related: tfa.contexts.two_factor.adapters.outbound.security.totp.pyotp_totp_codec,
  apps.api.wiring.modules.two_factor
"""

from __future__ import annotations

import logging
import socket
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

log = logging.getLogger(__name__)

_ENV_NAME_KEY = "TFA_ENV"
_CONFIG_PATH_KEY = "TFA_TOTP_CONFIG"
_ALLOWED_ENVS = ("dev", "prod", "test")

_TITLE_ENV_KEY = "TFA_TITLE"
_DISCREPANCY_ENV_KEY = "TFA_DISCREPANCY"
_SECRET_BITS_ENV_KEY = "TFA_SECRET_BITS"
_DIGITS_ENV_KEY = "TFA_DIGITS"
_PERIOD_ENV_KEY = "TFA_PERIOD_SECONDS"

_DEFAULT_DISCREPANCY = 1
_DEFAULT_SECRET_BITS = 160
_DEFAULT_DIGITS = 6
_DEFAULT_PERIOD_SECONDS = 30


def _default_title() -> str:
    return socket.gethostname()


@dataclass(frozen=True, slots=True)
class TwoFactorTotpConfig:
    """
    Immutable TOTP settings shared by enrollment and verification.

    Docs: docs/architecture/two_factor/two-factor-totp-v1.md
    Related: tfa.contexts.two_factor.application.use_cases.begin_two_factor_enrollment,
      tfa.contexts.two_factor.application.use_cases.verify_two_factor_code

    `title` is the issuer label shown in authenticator apps; it defaults to the
    host name.
    """

    title: str = field(default_factory=_default_title)
    discrepancy: int = _DEFAULT_DISCREPANCY
    secret_bits: int = _DEFAULT_SECRET_BITS
    digits: int = _DEFAULT_DIGITS
    period_seconds: int = _DEFAULT_PERIOD_SECONDS

    def __post_init__(self) -> None:
        """
        Validate TOTP config invariants.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Secret length is block aligned so generated secrets need no padding.
        Raises:
            ValueError: If any value violates required bounds.
        Side Effects:
            Normalizes title whitespace.
        """
        normalized_title = self.title.strip() if isinstance(self.title, str) else ""
        if not normalized_title:
            raise ValueError("title must be a non-empty string")
        if self.discrepancy < 0:
            raise ValueError(f"discrepancy must be >= 0, got {self.discrepancy}")
        if self.secret_bits < 160 or self.secret_bits % 40 != 0:
            raise ValueError(
                "secret_bits must be >= 160 and a multiple of 40, "
                f"got {self.secret_bits}"
            )
        if not 1 <= self.digits <= 10:
            raise ValueError(f"digits must be within 1..10, got {self.digits}")
        if self.period_seconds <= 0:
            raise ValueError(f"period_seconds must be > 0, got {self.period_seconds}")
        object.__setattr__(self, "title", normalized_title)


def load_two_factor_totp_config(
    *,
    environ: Mapping[str, str],
) -> TwoFactorTotpConfig:
    """
    Load TOTP config from YAML and env overrides.

    Args:
        environ: Environment mapping used to resolve env and override values.
    Returns:
        TwoFactorTotpConfig: Validated settings.
    Assumptions:
        Optional `two_factor.totp` section lives in `configs/<env>/two_factor.yaml`.
    Raises:
        FileNotFoundError: If explicit `TFA_TOTP_CONFIG` path does not exist.
        ValueError: If YAML or environment values are invalid.
    Side Effects:
        Reads at most one YAML file from disk.
    """
    config_path, explicit = _resolve_two_factor_config_path(environ=environ)
    file_payload = _load_optional_totp_payload(path=config_path, required=explicit)

    title = _resolve_title(environ=environ, payload=file_payload)
    discrepancy = _resolve_int_setting(
        environ=environ,
        env_key=_DISCREPANCY_ENV_KEY,
        payload=file_payload,
        payload_key="discrepancy",
        default=_DEFAULT_DISCREPANCY,
        minimum=0,
    )
    secret_bits = _resolve_int_setting(
        environ=environ,
        env_key=_SECRET_BITS_ENV_KEY,
        payload=file_payload,
        payload_key="secret_bits",
        default=_DEFAULT_SECRET_BITS,
        minimum=1,
    )
    digits = _resolve_int_setting(
        environ=environ,
        env_key=_DIGITS_ENV_KEY,
        payload=file_payload,
        payload_key="digits",
        default=_DEFAULT_DIGITS,
        minimum=1,
    )
    period_seconds = _resolve_int_setting(
        environ=environ,
        env_key=_PERIOD_ENV_KEY,
        payload=file_payload,
        payload_key="period_seconds",
        default=_DEFAULT_PERIOD_SECONDS,
        minimum=1,
    )

    if title is None:
        return TwoFactorTotpConfig(
            discrepancy=discrepancy,
            secret_bits=secret_bits,
            digits=digits,
            period_seconds=period_seconds,
        )
    return TwoFactorTotpConfig(
        title=title,
        discrepancy=discrepancy,
        secret_bits=secret_bits,
        digits=digits,
        period_seconds=period_seconds,
    )


def _resolve_two_factor_config_path(*, environ: Mapping[str, str]) -> tuple[Path, bool]:
    """
    Resolve two-factor YAML path using explicit override or `TFA_ENV`.

    Args:
        environ: Environment mapping.
    Returns:
        tuple[Path, bool]: YAML path and whether it was set explicitly.
    Assumptions:
        `TFA_TOTP_CONFIG` has priority over env-derived path.
    Raises:
        ValueError: If env value is invalid.
    Side Effects:
        None.
    """
    override = environ.get(_CONFIG_PATH_KEY, "").strip()
    if override:
        return Path(override), True

    env_name = resolve_env_name(environ=environ)
    return Path("configs") / env_name / "two_factor.yaml", False


def resolve_env_name(*, environ: Mapping[str, str]) -> str:
    """
    Resolve normalized runtime environment name.

    Args:
        environ: Environment mapping.
    Returns:
        str: One of `dev`, `prod`, `test`.
    Assumptions:
        Missing env falls back to `dev`.
    Raises:
        ValueError: If value is outside allowed set.
    Side Effects:
        None.
    """
    raw_env = environ.get(_ENV_NAME_KEY, "dev").strip().lower()
    if raw_env not in _ALLOWED_ENVS:
        raise ValueError(
            f"{_ENV_NAME_KEY} must be one of {_ALLOWED_ENVS}, got {raw_env!r}"
        )
    return raw_env


def _load_optional_totp_payload(*, path: Path, required: bool) -> Mapping[str, Any]:
    """
    Load optional `two_factor.totp` mapping from YAML.

    Args:
        path: Two-factor config path.
        required: Whether a missing file is an error.
    Returns:
        Mapping[str, Any]: Optional `two_factor.totp` mapping, or empty mapping.
    Assumptions:
        Unknown keys are ignored by this loader.
    Raises:
        FileNotFoundError: If a required YAML path does not exist.
        ValueError: If YAML structure is invalid.
    Side Effects:
        Reads one UTF-8 file from disk.
    """
    if not path.exists():
        if required:
            raise FileNotFoundError(f"two-factor config not found: {path}")
        log.debug("event=two_factor_config_file_missing path=%s", path)
        return {}
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError("two-factor config must be a mapping at top-level")

    two_factor_map = raw.get("two_factor")
    if two_factor_map is None:
        return {}
    if not isinstance(two_factor_map, dict):
        raise ValueError("two_factor section must be a mapping")

    totp_map = two_factor_map.get("totp")
    if totp_map is None:
        return {}
    if not isinstance(totp_map, dict):
        raise ValueError("two_factor.totp section must be a mapping")
    return totp_map


def _resolve_title(*, environ: Mapping[str, str], payload: Mapping[str, Any]) -> str | None:
    """
    Resolve issuer title from env -> payload; `None` keeps the host-name default.

    Args:
        environ: Environment mapping.
        payload: Parsed YAML subsection.
    Returns:
        str | None: Explicit title or `None`.
    Raises:
        ValueError: If YAML title is not a non-empty string.
    """
    raw = environ.get(_TITLE_ENV_KEY, "").strip()
    if raw:
        return raw

    payload_value = payload.get("title")
    if payload_value is None:
        return None
    if not isinstance(payload_value, str) or not payload_value.strip():
        raise ValueError("two_factor.totp.title must be a non-empty string")
    return payload_value.strip()


def _resolve_int_setting(
    *,
    environ: Mapping[str, str],
    env_key: str,
    payload: Mapping[str, Any],
    payload_key: str,
    default: int,
    minimum: int,
) -> int:
    """
    Resolve integer setting from env -> payload -> default precedence.

    Args:
        environ: Environment mapping.
        env_key: Env variable name.
        payload: Parsed YAML subsection.
        payload_key: YAML key name.
        default: Fallback default value.
        minimum: Smallest accepted value.
    Returns:
        int: Resolved integer value.
    Assumptions:
        String env values use base-10 integer format.
    Raises:
        ValueError: If provided value is not an int or is below `minimum`.
    Side Effects:
        None.
    """
    raw = environ.get(env_key, "").strip()
    if raw:
        return _parse_bounded_int(raw, key=env_key, minimum=minimum)

    payload_value = payload.get(payload_key)
    if payload_value is None:
        return default

    if isinstance(payload_value, bool) or not isinstance(payload_value, int):
        raise ValueError(
            f"expected int for two_factor.totp.{payload_key}, "
            f"got {type(payload_value).__name__}"
        )
    if payload_value < minimum:
        raise ValueError(
            f"two_factor.totp.{payload_key} must be >= {minimum}, got {payload_value}"
        )
    return payload_value


def _parse_bounded_int(raw: str, *, key: str, minimum: int) -> int:
    """
    Parse integer with lower bound from environment string.

    Args:
        raw: Raw env string.
        key: Env key name for diagnostics.
        minimum: Smallest accepted value.
    Returns:
        int: Parsed integer.
    Raises:
        ValueError: If value is not an integer or is below `minimum`.
    """
    try:
        parsed = int(raw, 10)
    except ValueError as error:
        raise ValueError(f"{key} must be int, got {raw!r}") from error
    if parsed < minimum:
        raise ValueError(f"{key} must be >= {minimum}, got {parsed}")
    return parsed


__all__ = [
    "TwoFactorTotpConfig",
    "load_two_factor_totp_config",
    "resolve_env_name",
]
