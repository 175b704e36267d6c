# src/config.py
import logging
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

log = logging.getLogger("aura-scribe")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8', extra='ignore')

    # --- Clerk (identity provider) ---
    CLERK_PUBLISHABLE_KEY: str | None = None
    CLERK_SECRET_KEY: str | None = None
    CLERK_JWKS_URL: str = "https://api.clerk.com/v1/jwks"
    CLERK_AUTHORIZED_PARTIES: List[str] = []
    JWKS_CACHE_TTL: int = 3600
    JWKS_MIN_REFRESH_INTERVAL: int = 60
    EMBED_URL: str | None = None

    # --- Gemini ---
    GEMINI_API_KEY: str | None = None
    GEMINI_MODEL: str = "gemini-2.5-flash"
    MAX_OUTPUT_TOKENS: int = 1024
    TEMPERATURE: float = 0.7
    TOP_P: float = 0.95
    MODEL_TIMEOUT: float = 60.0
    MAX_HISTORY_TURNS: int = 50

    # --- Soul repository (persona source) ---
    SOUL_REPO_TOKEN: str | None = None
    SOUL_REPO_API_URL: str = "https://api.github.com"
    SOUL_REPO_OWNER: str = "fnqureshi"
    SOUL_REPO_NAME: str = "aura-citadel-soul"
    PERSONA_PATH: str = "personas/sovereign_scribe_endo.md"
    PERSONA_TIMEOUT: float = 10.0
    # 0 disables the cache: every chat turn re-fetches the persona.
    PERSONA_CACHE_TTL: int = 0

    # --- Server ---
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]
    STATIC_DIR: str = "public"
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    CLOUD_LOGGING: bool = False
    LOG_LEVEL: str = "INFO"


def setup_logging(settings: Settings) -> None:
    """Routes records to Cloud Logging when enabled, to stderr otherwise."""
    if settings.CLOUD_LOGGING:
        import google.cloud.logging

        client = google.cloud.logging.Client()
        client.setup_logging()
    else:
        logging.basicConfig(level=settings.LOG_LEVEL, format="[%(asctime)s] %(levelname)s %(name)s - %(message)s")
    log.setLevel(settings.LOG_LEVEL)


settings = Settings()
