import json
from functools import lru_cache
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CORS_ORIGINS = ["http://localhost:3000"]


def _parse_cors_origins(value: str | List[str] | None) -> List[str] | None:
    if value is None:
        return None

    if isinstance(value, (list, tuple, set)):
        return [str(origin).strip() for origin in value if str(origin).strip()]

    stripped = str(value).strip()
    if not stripped:
        return []

    if stripped.startswith("[") and stripped.endswith("]"):
        try:
            loaded = json.loads(stripped)
        except json.JSONDecodeError:
            inner = stripped[1:-1].strip()
            if not inner:
                return []
            stripped = inner
        else:
            if isinstance(loaded, list):
                return [str(origin).strip() for origin in loaded if str(origin).strip()]

    return [origin.strip() for origin in stripped.split(",") if origin.strip()]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Contributions Leaderboard"
    api_prefix: str = "/api"
    database_url: str = "sqlite+aiosqlite:///./wiki.db"
    cors_origins_raw: str | None = Field(default=None, alias="CORS_ORIGINS")
    log_level: str = "INFO"

    bot_group: str = "bot"
    default_limit: int = 25
    max_limit: int = 500
    # Deeper pages are not served; bounds both SQL OFFSET and the scored pool.
    max_offset: int = 10_000
    limit_choices: List[int] = Field(default_factory=lambda: [10, 25, 50, 100])
    candidate_oversample: int = 3
    revision_scan_cap: int = 10_000
    query_timeout_seconds: float = 10.0

    # The wiki database is read-only in production; schema creation is for local runs.
    create_schema_on_startup: bool = False

    @field_validator("database_url")
    @classmethod
    def ensure_async_driver(cls, value: str) -> str:
        """
        Rewrite plain postgres:// and postgresql:// URLs, as commonly found in
        hosting environment variables, to the asyncpg driver.
        """
        if not value:
            return value

        if value.startswith("postgres://"):
            return "postgresql+asyncpg://" + value[len("postgres://") :]

        if value.startswith("postgresql://") and "+asyncpg" not in value.split("://", 1)[0]:
            return value.replace("postgresql://", "postgresql+asyncpg://", 1)

        return value

    @field_validator("candidate_oversample", "max_limit", "max_offset")
    @classmethod
    def ensure_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be at least 1")
        return value

    @property
    def cors_origins(self) -> List[str]:
        parsed = _parse_cors_origins(self.cors_origins_raw)
        if not parsed:
            return DEFAULT_CORS_ORIGINS
        return parsed


@lru_cache
def get_settings() -> Settings:
    return Settings()
