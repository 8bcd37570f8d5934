from __future__ import annotations

from pathlib import Path

from helpdesk_metrics.config import get_settings


def test_default_settings(monkeypatch) -> None:
    for name in [
        "HELPDESK_HOST",
        "HELPDESK_PORT",
        "HELPDESK_SERVER_NAME",
        "HELPDESK_STATIC_DIR",
        "HELPDESK_LOG_LEVEL",
        "HELPDESK_CORS_ORIGINS",
    ]:
        monkeypatch.delenv(name, raising=False)

    settings = get_settings()

    assert settings.port == 2222
    assert settings.static_dir is None
    assert settings.log_level == "INFO"
    assert settings.cors_origins == ["*"]


def test_settings_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("HELPDESK_PORT", "8080")
    monkeypatch.setenv("HELPDESK_STATIC_DIR", "frontend")
    monkeypatch.setenv("HELPDESK_LOG_LEVEL", "debug")
    monkeypatch.setenv("HELPDESK_CORS_ORIGINS", "http://a.example, http://b.example")

    settings = get_settings()

    assert settings.port == 8080
    assert settings.static_dir == Path("frontend")
    assert settings.log_level == "DEBUG"
    assert settings.cors_origins == ["http://a.example", "http://b.example"]
