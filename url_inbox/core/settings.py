from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings

DEFAULT_GENERIC_TITLES = [
    "네이버 카페",
    "naver cafe",
    "네이버카페",
    "네이버 블로그",
    "naver blog",
    "카카오톡",
    "kakaotalk",
    "인스타그램",
    "instagram",
    "페이스북",
    "facebook",
    "트위터",
    "twitter",
    "x",
    "유튜브",
    "youtube",
]

DEFAULT_TITLE_SUFFIXES = [
    " - 네이버 카페",
    " : 네이버 카페",
    " | 네이버 카페",
    " - 네이버 블로그",
    " : 네이버 블로그",
    " | 네이버 블로그",
    " - YouTube",
    " | YouTube",
    " on Instagram",
    " on Twitter",
    " on X",
]


class Settings(BaseSettings):
    # Application
    app_name: str = "URL Inbox"
    debug: bool = False
    log_level: str = "INFO"
    logs_dir: Path = Path("logs")

    # Buffer storage - "sql" persists through SQLAlchemy, "memory" is process-local
    database_url: str = "sqlite:///./url_inbox.db"
    store_backend: str = "sql"
    pending_slot_key: str = "pending_data"

    # Share channel
    channel_name: str = "url_inbox/share"
    reserved_scheme: str = "urlinbox"
    callback_marker: str = "login-callback"

    # Title heuristics
    generic_titles: list[str] = list(DEFAULT_GENERIC_TITLES)
    title_suffixes: list[str] = list(DEFAULT_TITLE_SUFFIXES)

    # Extension attachments; None waits for every load to finish
    attachment_load_timeout_seconds: float | None = None

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"

    @field_validator("store_backend")
    @classmethod
    def validate_store_backend(cls, v):
        backend = v.strip().lower()
        if backend not in {"sql", "memory"}:
            raise ValueError("STORE_BACKEND must be 'sql' or 'memory'")
        return backend

    @field_validator("attachment_load_timeout_seconds")
    @classmethod
    def validate_attachment_timeout(cls, v):
        if v is not None and v <= 0:
            return None
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
