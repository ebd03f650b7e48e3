from pathlib import Path

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]
ENV_FILE = BASE_DIR / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    app_env: str = "dev"
    log_level: str = "INFO"
    api_prefix: str = ""

    database_url_override: str | None = Field(
        default=None,
        validation_alias=AliasChoices("DATABASE_URL", "WATCHLIST_DATABASE_URL"),
    )
    database_echo: bool = False
    postgres_db: str = "stock_watchlist"
    postgres_user: str = "stock_watchlist"
    postgres_password: str = "stock_watchlist"
    postgres_host: str = "localhost"
    postgres_port: int = 5432

    quote_enrichment_enabled: bool = True
    quote_provider_base_url: str = "https://query1.finance.yahoo.com"
    quote_symbol_suffix: str = ".NS"
    quote_timeout_seconds: float = 5.0

    cors_allow_origins: list[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]

    client_api_base_url: str = "http://localhost:8000"
    client_message_ttl_seconds: float = 3.0

    @field_validator("quote_timeout_seconds", "client_message_ttl_seconds")
    @classmethod
    def _validate_positive_seconds(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeouts must be greater than zero")
        return value

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.strip().upper() or "INFO"

    @field_validator("api_prefix")
    @classmethod
    def _normalize_api_prefix(cls, value: str) -> str:
        normalized = value.strip().rstrip("/")
        if normalized and not normalized.startswith("/"):
            normalized = f"/{normalized}"
        return normalized

    @property
    def database_url(self) -> str:
        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql+psycopg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )


settings = Settings()
