"""
Centralised application settings loaded from environment / .env file.
"""
from __future__ import annotations

from pathlib import Path
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

_PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Load .env from project root (two levels up from this file)
_ENV_PATH = _PROJECT_ROOT / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # ── Postgres ─────────────────────────────────────────
    postgres_user: str = "dashboards"
    postgres_password: str = "dashboards_pw"
    postgres_db: str = "analytics"
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    database_url_override: str = ""  # e.g. sqlite:///./demo.db

    # ── Query execution ──────────────────────────────────
    sql_row_limit: int = 1000
    query_timeout_ms: int = 10_000
    cache_ttl_seconds: float = 60.0
    cache_max_size: int = 256

    # ── Catalog files ────────────────────────────────────
    catalog_path: str = str(_PROJECT_ROOT / "catalog" / "schema.yml")
    dashboards_path: str = str(_PROJECT_ROOT / "catalog" / "dashboards.yml")

    # ── App ──────────────────────────────────────────────
    api_port: int = 8000
    cors_origins: str = "*"  # comma-separated
    log_level: str = "INFO"
    sql_echo: bool = False

    @property
    def database_url(self) -> str:
        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
