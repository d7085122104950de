"""Tests for pydantic-settings-backed configuration loading."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from packages.api_call.config import HttpSettings, load_settings
from packages.api_call.http import basic_auth_header


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop ambient API_CALL_* variables so each test sets its own."""
    for key in list(os.environ):
        if key.startswith("API_CALL_"):
            monkeypatch.delenv(key)


def test_load_settings_uses_precedence_cascade(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """CLI params should override env, env should override YAML, then defaults."""
    config_file = tmp_path / "api-call.yaml"
    config_file.write_text(
        "\n".join(
            [
                "logging:",
                "  level: INFO",
                "http:",
                "  base_url: https://yaml.test",
                "  timeout_seconds: 3",
                "  headers:",
                "    X-Source: yaml",
            ]
        ),
        encoding="utf-8",
    )
    monkeypatch.setenv("API_CALL_LOGGING__LEVEL", "ERROR")
    monkeypatch.setenv("API_CALL_HTTP__TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("OTHER_HTTP__BASE_URL", "https://ignored.test")

    settings = load_settings(
        cli_params={"logging": {"level": "debug"}},
        config_path=config_file,
    )

    assert settings.logging.level == "DEBUG"
    assert settings.http.timeout_seconds == 2.5
    assert settings.http.base_url == "https://yaml.test"
    assert settings.http.headers == {"X-Source": "yaml"}


def test_load_settings_uses_model_defaults_when_sources_missing(
    tmp_path: Path,
) -> None:
    """Settings fall back to model defaults when env and YAML are absent."""
    settings = load_settings(config_path=tmp_path / "missing.yaml")

    assert settings.logging.level == "WARNING"
    assert settings.logging.json_output is False
    assert settings.logging.service == "api-call"
    assert settings.http.base_url == ""
    assert settings.http.timeout_seconds is None


def test_config_path_applies_only_to_its_own_call(tmp_path: Path) -> None:
    """A YAML path given to one call does not leak into the next."""
    config_file = tmp_path / "api-call.yaml"
    config_file.write_text("http:\n  base_url: https://yaml.test\n", encoding="utf-8")

    first = load_settings(config_path=config_file)
    second = load_settings(config_path=tmp_path / "missing.yaml")

    assert first.http.base_url == "https://yaml.test"
    assert second.http.base_url == ""


def test_env_json_value_fills_nested_model(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """A JSON env value for a nested model is decoded."""
    monkeypatch.setenv("API_CALL_HTTP", '{"base_url": "https://env.test"}')

    settings = load_settings(config_path=tmp_path / "missing.yaml")

    assert settings.http.base_url == "https://env.test"


def test_password_without_username_is_rejected(tmp_path: Path) -> None:
    """Credentials must come as a pair."""
    with pytest.raises(ValueError):
        load_settings(
            cli_params={"http": {"password": "s3cret"}},
            config_path=tmp_path / "missing.yaml",
        )


def test_http_settings_build_call_config() -> None:
    """HTTP defaults carry into the per-call configuration."""
    http = HttpSettings(
        base_url="https://api.test",
        timeout_seconds=7,
        headers={"token": "abcdefghijk"},
        username="admin",
        password="s3cret",
    )

    config = http.to_call_config("/items", method="POST", body="{}")

    assert config.target_url == "https://api.test/items"
    assert config.method == "POST"
    assert config.body == "{}"
    assert config.timeout_seconds == 7
    assert config.headers["token"] == "abcdefghijk"
    assert config.headers["Authorization"] == basic_auth_header("admin", "s3cret")
