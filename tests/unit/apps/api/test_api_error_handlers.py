from __future__ import annotations

from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import BaseModel

from apps.api.common import register_api_error_handlers
from tfa.contexts.two_factor.domain.errors import TwoFactorSettingsPersistenceError


class _PayloadRequest(BaseModel):
    code: str
    label: str


def _build_client() -> TestClient:
    app = FastAPI()
    register_api_error_handlers(app=app)

    @app.post("/echo")
    def post_echo(request: _PayloadRequest) -> dict[str, str]:
        return {"code": request.code}

    @app.get("/storage")
    def get_storage() -> dict[str, str]:
        raise TwoFactorSettingsPersistenceError(detail="pool exhausted")

    return TestClient(app)


def test_validation_errors_are_sorted_and_use_required_code() -> None:
    """
    Verify 422 payload lists errors sorted by path and maps `missing` to `required`.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Both body fields are absent from the request.
    Raises:
        AssertionError: If payload shape or ordering differs.
    Side Effects:
        None.
    """
    response = _build_client().post("/echo", json={})

    assert response.status_code == 422
    payload = response.json()
    assert payload["error"] == "validation_error"
    assert payload["message"] == "Validation failed"
    errors = payload["details"]["errors"]
    assert [item["path"] for item in errors] == ["body.code", "body.label"]
    assert {item["code"] for item in errors} == {"required"}


def test_unhandled_two_factor_error_becomes_json_payload() -> None:
    response = _build_client().get("/storage")

    assert response.status_code == 503
    assert response.json() == {
        "error": "two_factor_settings_unavailable",
        "message": "Two-factor settings are temporarily unavailable. Please try again later.",
    }
    assert "pool exhausted" not in response.text
