from __future__ import annotations

from pathlib import Path

import pytest

from apps.migrations import main as migrations_main

_REPO_ROOT = Path(__file__).resolve().parents[4]


def test_resolve_dsn_prefers_cli_argument() -> None:
    dsn = migrations_main._resolve_dsn(
        arg_dsn=" postgresql://cli/tfa ",
        environ={"TFA_PG_DSN": "postgresql://env/tfa"},
    )

    assert dsn == "postgresql://cli/tfa"


def test_resolve_dsn_falls_back_to_environment() -> None:
    dsn = migrations_main._resolve_dsn(arg_dsn="", environ={"TFA_PG_DSN": "dbname=tfa"})

    assert dsn == "dbname=tfa"


def test_resolve_dsn_requires_a_value() -> None:
    with pytest.raises(ValueError, match="TFA_PG_DSN"):
        migrations_main._resolve_dsn(arg_dsn="  ", environ={})


def test_alembic_config_points_to_repository_scripts() -> None:
    config = migrations_main._build_alembic_config(repo_root=_REPO_ROOT)

    assert config.get_main_option("script_location") == str(_REPO_ROOT / "alembic")


def test_alembic_config_requires_ini_file(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="alembic.ini"):
        migrations_main._build_alembic_config(repo_root=tmp_path)


def test_main_reports_failure_without_dsn(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.delenv("TFA_PG_DSN", raising=False)

    exit_code = migrations_main.main([])

    assert exit_code == 1
    assert "Migration failed" in capsys.readouterr().out


def test_parser_defaults_lock_key() -> None:
    args = migrations_main._build_parser().parse_args([])

    assert args.dsn == ""
    assert args.revision == "head"
    assert args.lock_key == 61823004917
