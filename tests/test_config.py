import pytest

from coming_soon.config import Settings


@pytest.fixture
def settings(monkeypatch):
    for name in ("CORS_ORIGIN", "ENV", "RAILWAY_ENVIRONMENT", "PORT", "DB_CONNECT_TIMEOUT_SECONDS"):
        monkeypatch.delenv(name, raising=False)
    return Settings()


def test_default_origins_in_development(settings):
    assert settings.environment == "development"
    assert settings.allowed_origins == ["http://localhost:3000", "http://localhost:3001"]


def test_production_without_cors_origin_allows_everything(settings, monkeypatch):
    monkeypatch.setenv("ENV", "production")
    assert settings.allowed_origins == ["*"]


def test_cors_origin_accepts_comma_separated_list(settings, monkeypatch):
    monkeypatch.setenv("ENV", "production")
    monkeypatch.setenv("CORS_ORIGIN", "https://example.com, https://www.example.com,,http://localhost:3000")

    assert settings.allowed_origins == [
        "http://localhost:3000",
        "http://localhost:3001",
        "https://example.com",
        "https://www.example.com",
    ]


def test_connect_timeout_from_env(settings, monkeypatch):
    assert settings.db_connect_timeout_seconds == 5
    monkeypatch.setenv("DB_CONNECT_TIMEOUT_SECONDS", "2")
    assert settings.db_connect_timeout_seconds == 2
    monkeypatch.setenv("DB_CONNECT_TIMEOUT_SECONDS", "nope")
    assert settings.db_connect_timeout_seconds == 5
