"""Application settings loaded from environment variables.

Keep all credentials and tunables centralized here; the rest of the package
receives a ``Settings`` instance instead of reading the environment.
"""

import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel, Field

DEFAULT_FALLBACK_REPLY = (
    "Sorry, the assistant is unavailable right now. Please try again in a moment."
)


class ProviderCredentials(BaseModel):
    """API key and model for one completion backend."""

    api_key: str | None = None
    model: str | None = None


class Settings(BaseModel):
    """Server-side configuration."""

    app_env: str = "development"
    jwt_secret: str | None = None
    jwt_algorithm: str = "HS256"
    token_ttl_seconds: int = Field(default=3600, gt=0)
    default_provider: str = "gemini"
    provider_timeout: float = Field(default=30.0, gt=0)
    store_backend: str = "sqlite"
    db_path: str = "./chatrelay.db"
    fallback_reply: str = DEFAULT_FALLBACK_REPLY
    log_level: str = "INFO"
    providers: dict[str, ProviderCredentials] = Field(default_factory=dict)

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment (after ``.env``)."""
        load_dotenv()
        return cls(
            app_env=os.getenv("APP_ENV", "development"),
            jwt_secret=os.getenv("CHATRELAY_JWT_SECRET"),
            jwt_algorithm=os.getenv("CHATRELAY_JWT_ALGORITHM", "HS256"),
            token_ttl_seconds=int(os.getenv("CHATRELAY_TOKEN_TTL_SECONDS", "3600")),
            default_provider=os.getenv("CHATRELAY_DEFAULT_PROVIDER", "gemini"),
            provider_timeout=float(os.getenv("CHATRELAY_PROVIDER_TIMEOUT", "30")),
            store_backend=os.getenv("CHATRELAY_STORE", "sqlite"),
            db_path=os.getenv("CHATRELAY_DB_PATH", "./chatrelay.db"),
            fallback_reply=os.getenv("CHATRELAY_FALLBACK_REPLY", DEFAULT_FALLBACK_REPLY),
            log_level=os.getenv("CHATRELAY_LOG_LEVEL", "INFO"),
            providers={
                "gemini": ProviderCredentials(
                    api_key=os.getenv("GEMINI_API_KEY"),
                    model=os.getenv("GEMINI_MODEL", "gemini-2.5-flash"),
                ),
                "openai": ProviderCredentials(
                    api_key=os.getenv("OPENAI_API_KEY"),
                    model=os.getenv("OPENAI_CHAT_MODEL", "gpt-4o-mini"),
                ),
                "anthropic": ProviderCredentials(
                    api_key=os.getenv("ANTHROPIC_API_KEY"),
                    model=os.getenv("ANTHROPIC_MODEL", "claude-sonnet-4-20250514"),
                ),
                "deepseek": ProviderCredentials(
                    api_key=os.getenv("DEEPSEEK_API_KEY"),
                    model=os.getenv("DEEPSEEK_MODEL", "deepseek-chat"),
                ),
            },
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
