"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.
"""

from functools import lru_cache
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    app_name: str = "Jobboard"
    debug: bool = False
    log_level: str = "INFO"
    site_url: str = "http://localhost:3000"
    cors_origins: List[str] = ["*"]

    # PostgreSQL
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "jobboard_user"
    postgres_password: str = "password"
    postgres_db: str = "jobboard_db"

    # MongoDB
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db: str = "jobboard_docs"

    # Generative AI (any OpenAI-compatible endpoint, Gemini by default)
    ai_api_key: str = ""
    ai_base_url: str = "https://generativelanguage.googleapis.com/v1beta/openai/"
    ai_model: str = "gemini-2.0-flash"
    ai_max_tokens: int = 2000
    ai_temperature: float = 0.1
    ai_max_retries: int = 3

    # JWT Auth
    jwt_secret_key: str = "change-this-secret"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 1440
    password_reset_expire_minutes: int = 60

    # Service-to-service calls (resume parsing)
    internal_api_token: str = ""

    # Productivity reports
    report_signing_secret: str = "dev-secret"
    share_link_ttl_days: int = 7

    # Email (Resend)
    resend_api_key: str = ""
    resend_api_url: str = "https://api.resend.com/emails"
    application_status_email_from: str = "Jobboard <no-reply@jobboard.local>"
    # Optional webhook tried before Resend
    application_status_email_endpoint: str = ""
    application_status_email_token: str = ""

    # Uploads
    max_resume_size_mb: int = 10

    @property
    def postgres_url(self) -> str:
        """Construct PostgreSQL connection URL"""
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def ai_configured(self) -> bool:
        return bool(self.ai_api_key and self.ai_model)

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
