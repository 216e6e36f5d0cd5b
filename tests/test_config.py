"""Tests for settings loading and client construction."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from klaviyo_admin.config import Settings
from klaviyo_admin.main import app
from klaviyo_admin.services.klaviyo import KlaviyoAPIError, build_client


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("KLAVIYO_API_KEY", raising=False)

    settings = Settings(_env_file=None)

    assert settings.klaviyo_api_key is None
    assert settings.klaviyo_revision == "2024-10-15"
    assert settings.klaviyo_form_revision == "2025-07-15.pre"
    assert settings.klaviyo_form_id == "SDnX9G"
    assert settings.cors_origins == ["https://mkyigitoglu.framer.website"]


def test_settings_read_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("KLAVIYO_API_KEY", "pk_live")
    monkeypatch.setenv("CORS_ORIGINS", '["https://a.example.com", "https://b.example.com"]')

    settings = Settings(_env_file=None)

    assert settings.klaviyo_api_key == "pk_live"
    assert settings.cors_origins == ["https://a.example.com", "https://b.example.com"]


@pytest.mark.parametrize("api_key", [None, ""])
def test_build_client_requires_key(api_key) -> None:
    assert build_client(Settings(klaviyo_api_key=api_key, _env_file=None)) is None


def test_build_client_carries_settings() -> None:
    settings = Settings(
        klaviyo_api_key="pk_x",
        klaviyo_base_url="https://klaviyo.test/",
        klaviyo_form_revision="2026-01-01.pre",
        _env_file=None,
    )

    client = build_client(settings)

    assert client.api_key == "pk_x"
    assert client.base_url == "https://klaviyo.test"
    assert client.form_revision == "2026-01-01.pre"


def test_api_error_message_fallbacks() -> None:
    assert KlaviyoAPIError(400, '{"message": "nope"}').message("default") == "nope"
    assert KlaviyoAPIError(400, '{"errors": [{"title": "Bad"}]}').message("default") == "Bad"
    assert KlaviyoAPIError(400, "plain text").message("default") == "default"
    assert KlaviyoAPIError(400, "[1, 2]").message("default") == "default"


def test_health_check() -> None:
    with TestClient(app) as client:
        response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
