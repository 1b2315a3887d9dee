"""Service configuration via pydantic-settings.

Every value can be overridden through the environment or a ``.env`` file.
Import the module-level ``settings`` instance rather than building new ones.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven settings for the insights service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Supabase (service role key: the API reads every baby's logs)
    SUPABASE_URL: str = ""
    SUPABASE_KEY: str = ""

    # OpenAI-compatible chat completions endpoint for daily insights
    LLM_PROVIDER: str = "openai"
    LLM_MODEL: str = "gpt-4o-mini"
    LLM_API_KEY: str = ""
    LLM_TIMEOUT_SECONDS: float = 12.0

    # Comma separated list, or "*"
    ALLOWED_ORIGINS: str = "*"

    # Insights refresh job
    INSIGHTS_REFRESH_INTERVAL_HOURS: int = 6
    INSIGHTS_MAX_BABIES: int = 50

    # Today screen
    SUGGESTIONS_MAX_COUNT: int = 4
    MEDICATION_HISTORY_LIMIT: int = 20

    LOG_LEVEL: str = "INFO"

    @property
    def allowed_origins(self) -> list[str]:
        raw = self.ALLOWED_ORIGINS.strip()
        if raw == "*":
            return ["*"]
        return [origin.strip() for origin in raw.split(",") if origin.strip()]


settings = Settings()  # type: ignore[call-arg]
