"""Configuration management using Pydantic Settings."""
from typing import Optional
from urllib.parse import quote_plus
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database Configuration (MySQL wins when MYSQL_HOST is set)
    database_url: str = Field("sqlite+aiosqlite:///./resume_optimizer.db", alias="DATABASE_URL")
    mysql_host: Optional[str] = Field(None, alias="MYSQL_HOST")
    mysql_user: Optional[str] = Field(None, alias="MYSQL_USER")
    mysql_password: Optional[str] = Field(None, alias="MYSQL_PASSWORD")
    mysql_database: Optional[str] = Field(None, alias="MYSQL_DATABASE")
    mysql_port: int = Field(3306, alias="MYSQL_PORT")

    # Gemini Configuration
    gemini_api_key: Optional[str] = Field(None, alias="GEMINI_API_KEY")
    gemini_model: str = Field("gemini-1.5-flash", alias="GEMINI_MODEL")
    gemini_api_url: str = Field(
        "https://generativelanguage.googleapis.com/v1/models", alias="GEMINI_API_URL"
    )

    # Completion Settings
    ai_response_timeout_ms: int = Field(30000, alias="AI_RESPONSE_TIMEOUT_MS")
    ai_max_retries: int = Field(3, alias="AI_MAX_RETRIES")
    ai_temperature: float = Field(0.7, alias="AI_TEMPERATURE")
    ai_max_tokens: int = Field(4096, alias="AI_MAX_TOKENS")
    ai_top_p: float = Field(0.8, alias="AI_TOP_P")
    ai_top_k: int = Field(40, alias="AI_TOP_K")
    ai_overall_deadline_seconds: Optional[float] = Field(None, alias="AI_OVERALL_DEADLINE_SECONDS")
    ai_fail_fast_on_safety: bool = Field(False, alias="AI_FAIL_FAST_ON_SAFETY")

    # Outbound HTTP: auto | httpx | requests | socket
    http_transport: str = Field("auto", alias="HTTP_TRANSPORT")

    # Validation Rules
    profile_name_max_length: int = Field(100, alias="PROFILE_NAME_MAX_LENGTH")
    template_name_max_length: int = Field(100, alias="TEMPLATE_NAME_MAX_LENGTH")
    resume_title_max_length: int = Field(200, alias="RESUME_TITLE_MAX_LENGTH")

    # Server
    cors_origins: str = Field("*", alias="CORS_ORIGINS")
    environment: str = Field("development", alias="ENVIRONMENT")

    # Monitoring
    sentry_dsn: Optional[str] = Field(None, alias="SENTRY_DSN")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    # SQL Logging (for debugging)
    sql_echo: bool = Field(False, alias="SQL_ECHO")
    sql_log_level: str = Field("INFO", alias="SQL_LOG_LEVEL")

    @field_validator("gemini_api_key", "mysql_host", "sentry_dsn", "ai_overall_deadline_seconds", mode="before")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        """Treat empty strings from .env files as unset."""
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v

    @field_validator("ai_max_retries", "ai_response_timeout_ms", "ai_max_tokens")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be a positive integer")
        return v

    @field_validator("http_transport")
    @classmethod
    def validate_http_transport(cls, v: str) -> str:
        value = v.strip().lower()
        if value not in {"auto", "httpx", "requests", "socket"}:
            raise ValueError("HTTP_TRANSPORT must be one of: auto, httpx, requests, socket")
        return value

    @property
    def sqlalchemy_url(self) -> str:
        """Generate the async database URL."""
        if not self.mysql_host:
            return self.database_url

        # URL encode username and password to handle special characters
        encoded_user = quote_plus(self.mysql_user or "")
        encoded_password = quote_plus(self.mysql_password) if self.mysql_password else ""

        if encoded_password:
            auth = f"{encoded_user}:{encoded_password}"
        else:
            auth = encoded_user

        return (
            f"mysql+aiomysql://{auth}"
            f"@{self.mysql_host}:{self.mysql_port}/{self.mysql_database}"
            "?charset=utf8mb4"
        )

    @property
    def is_sqlite(self) -> bool:
        return self.sqlalchemy_url.startswith("sqlite")

    @property
    def ai_configured(self) -> bool:
        return bool(self.gemini_api_key)

    @property
    def cors_origin_list(self) -> list[str]:
        origins = [o.strip() for o in self.cors_origins.split(",") if o.strip()]
        return origins or ["*"]

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"
        populate_by_name = True


# Global settings instance
settings = Settings()
