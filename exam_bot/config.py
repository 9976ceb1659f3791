"""Configuration settings using pydantic-settings."""
from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Telegram Bot
    BOT_TOKEN: str = Field(default="", description="Telegram Bot API token")

    # Database
    DATABASE_PATH: str = Field(
        default="data/exam_bot.db",
        description="Path to SQLite database file"
    )

    # LLM (any OpenAI-compatible endpoint)
    LLM_BASE_URL: str = Field(
        default="http://localhost:1234/v1",
        description="Base URL of the OpenAI-compatible API"
    )
    LLM_API_KEY: str = Field(default="not-needed", description="API key for the LLM endpoint")
    LLM_MODEL: str = Field(default="qwen2.5-7b-instruct", description="Model used for quiz generation")
    LLM_TEMPERATURE: float = Field(default=0.7, description="Sampling temperature")
    LLM_MAX_TOKENS: int = Field(default=4096, description="Maximum tokens in a generation reply")

    # Quiz generation
    MIN_QUESTIONS: int = Field(default=3, description="Smallest generated quiz")
    MAX_QUESTIONS: int = Field(default=15, description="Largest generated quiz")
    QUESTION_COUNTS: list[int] = Field(
        default=[3, 5, 10, 15],
        description="Question counts offered in the generation menu"
    )

    # Results
    PASS_THRESHOLD: int = Field(default=70, description="Score (%) shown as a pass")

    # Logging
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    LOG_FILE: str = Field(
        default="data/logs/bot.log",
        description="Path to log file"
    )

    class Config:
        """Pydantic config."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


# Global settings instance
settings = Settings()
