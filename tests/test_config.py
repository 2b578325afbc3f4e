"""Tests for environment-driven settings."""
import pytest

from chatrelay.config import DEFAULT_FALLBACK_REPLY, Settings


@pytest.fixture
def clean_env(monkeypatch):
    for key in (
        "APP_ENV",
        "CHATRELAY_JWT_SECRET",
        "CHATRELAY_DEFAULT_PROVIDER",
        "CHATRELAY_PROVIDER_TIMEOUT",
        "CHATRELAY_STORE",
        "CHATRELAY_FALLBACK_REPLY",
        "GEMINI_API_KEY",
        "OPENAI_API_KEY",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr("chatrelay.config.load_dotenv", lambda: None)
    return monkeypatch


def test_defaults(clean_env):
    settings = Settings.from_env()

    assert settings.jwt_secret is None
    assert settings.default_provider == "gemini"
    assert settings.provider_timeout == 30.0
    assert settings.store_backend == "sqlite"
    assert settings.fallback_reply == DEFAULT_FALLBACK_REPLY
    assert settings.providers["gemini"].api_key is None
    assert settings.providers["gemini"].model == "gemini-2.5-flash"


def test_environment_overrides(clean_env):
    clean_env.setenv("CHATRELAY_JWT_SECRET", "s3cret")
    clean_env.setenv("CHATRELAY_DEFAULT_PROVIDER", "openai")
    clean_env.setenv("CHATRELAY_PROVIDER_TIMEOUT", "2.5")
    clean_env.setenv("CHATRELAY_STORE", "memory")
    clean_env.setenv("OPENAI_API_KEY", "sk-test")

    settings = Settings.from_env()

    assert settings.jwt_secret == "s3cret"
    assert settings.default_provider == "openai"
    assert settings.provider_timeout == 2.5
    assert settings.store_backend == "memory"
    assert settings.providers["openai"].api_key == "sk-test"


def test_timeout_must_be_positive(clean_env):
    clean_env.setenv("CHATRELAY_PROVIDER_TIMEOUT", "0")

    with pytest.raises(ValueError):
        Settings.from_env()
