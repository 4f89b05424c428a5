"""
`tfa-api` entrypoint serving the TOTP second-factor API with uvicorn.

Pending enrollment secrets live in process memory, so the service always runs
as one uvicorn process; scale it behind sticky routing per user instead.

Docs: docs/architecture/two_factor/two-factor-totp-v1.md
Related: apps.api.main.app, tfa.platform.config.two_factor_totp
"""

from __future__ import annotations

import argparse
import logging
import os
from typing import Mapping, MutableMapping

import uvicorn

log = logging.getLogger(__name__)

_APP_IMPORT_PATH = "apps.api.main.app:app"
_HOST_ENV_KEY = "TFA_API_HOST"
_PORT_ENV_KEY = "TFA_API_PORT"
_ENV_NAME_KEY = "TFA_ENV"
_CONFIG_PATH_KEY = "TFA_TOTP_CONFIG"
_DEFAULT_HOST = "127.0.0.1"
_DEFAULT_PORT = 8000


def _build_parser(*, environ: Mapping[str, str]) -> argparse.ArgumentParser:
    """
    Build parser whose bind defaults come from `TFA_API_HOST` and `TFA_API_PORT`.

    Args:
        environ: Environment mapping used for defaults.
    Returns:
        argparse.ArgumentParser: Parser of `tfa-api`.
    Raises:
        ValueError: If `TFA_API_PORT` is not an integer.
    """
    raw_port = environ.get(_PORT_ENV_KEY, "").strip()
    try:
        default_port = int(raw_port) if raw_port else _DEFAULT_PORT
    except ValueError as error:
        raise ValueError(f"{_PORT_ENV_KEY} must be an integer, got {raw_port!r}") from error

    parser = argparse.ArgumentParser(prog="tfa-api")
    parser.add_argument(
        "--host",
        default=environ.get(_HOST_ENV_KEY, "").strip() or _DEFAULT_HOST,
    )
    parser.add_argument("--port", type=int, default=default_port)
    parser.add_argument(
        "--env",
        choices=("dev", "prod", "test"),
        default=None,
        help=f"Overrides ${_ENV_NAME_KEY} for config and fail-fast policy.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help=f"Explicit TOTP YAML path; overrides ${_CONFIG_PATH_KEY}.",
    )
    parser.add_argument(
        "--log-level",
        default="info",
        choices=("critical", "error", "warning", "info", "debug"),
    )
    return parser


def _export_app_settings(*, args: argparse.Namespace, environ: MutableMapping[str, str]) -> None:
    """
    Publish CLI overrides as environment read by `apps.api.main.app` at import.

    Args:
        args: Parsed `tfa-api` arguments.
        environ: Mutable environment, `os.environ` in production.
    Returns:
        None.
    Assumptions:
        Must run before uvicorn imports the app module.
    Raises:
        None.
    Side Effects:
        Mutates `environ`.
    """
    if args.env is not None:
        environ[_ENV_NAME_KEY] = args.env
    if args.config is not None:
        environ[_CONFIG_PATH_KEY] = args.config


def main(argv: list[str] | None = None) -> int:
    args = _build_parser(environ=os.environ).parse_args(argv)
    _export_app_settings(args=args, environ=os.environ)
    log.info(
        "starting tfa-api host=%s port=%s env=%s",
        args.host,
        args.port,
        os.environ.get(_ENV_NAME_KEY, "dev"),
    )
    uvicorn.run(
        _APP_IMPORT_PATH,
        host=args.host,
        port=args.port,
        log_level=args.log_level,
        workers=1,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
