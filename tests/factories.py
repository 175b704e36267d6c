"""Builders for test data."""

from src.config import Settings

PERSONA = "You are Scribe."


def make_settings(**overrides) -> Settings:
    """Settings isolated from the real environment's .env file."""
    values = {
        "CLERK_PUBLISHABLE_KEY": None,
        "CLERK_SECRET_KEY": None,
        "EMBED_URL": None,
        "GEMINI_API_KEY": "gemini-key",
        "SOUL_REPO_TOKEN": "soul-token",
        "PERSONA_CACHE_TTL": 0,
        "MAX_HISTORY_TURNS": 50,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)
