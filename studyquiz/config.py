"""
Configuration management using Pydantic Settings
"""
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Database
    DATABASE_URL: str

    # Gemini API
    GEMINI_API_KEY: str
    GEMINI_MODEL: str = "gemini-2.5-flash"
    GENERATION_TEMPERATURE: float = 0.8
    GENERATION_TIMEOUT_SECONDS: int = 60
    GENERATION_MAX_RETRIES: int = 3

    # Application
    APP_NAME: str = "Study Quiz Engine"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]

    # Quiz Settings
    QUESTIONS_PER_QUIZ: int = 7
    OPTIONS_PER_QUESTION: int = 4
    MAX_CONTENT_LENGTH: int = 10_000
    ATTEMPT_NUMBER_RETRIES: int = 3

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()
