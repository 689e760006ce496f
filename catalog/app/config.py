import logging
import os
from dataclasses import dataclass
from typing import Tuple

from dotenv import load_dotenv

load_dotenv()


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


def _database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    db_user = os.getenv("DB_USER", "app")
    db_pass = os.getenv("DB_PASS", "app")
    db_name = os.getenv("DB_NAME", "appdb")
    db_host = os.getenv("DB_HOST", "localhost")
    db_port = os.getenv("DB_PORT", "5432")
    return f"postgresql+psycopg://{db_user}:{db_pass}@{db_host}:{db_port}/{db_name}"


def _api_prefix() -> str:
    # Leave empty ("") if the gateway strips the prefix.
    prefix = os.getenv("API_PREFIX", "").strip()
    if prefix and not prefix.startswith("/"):
        prefix = "/" + prefix
    return prefix.rstrip("/")


@dataclass(frozen=True)
class Settings:
    environment: str
    port: int
    log_level: str
    api_prefix: str
    database_url: str
    pool_size: int
    default_page_size: int
    max_page_size: int
    default_sort_field: str
    cors_origins: Tuple[str, ...]

    @property
    def is_dev(self) -> bool:
        return self.environment == "development"

    @classmethod
    def from_env(cls) -> "Settings":
        origins = os.getenv("CORS_ORIGINS", "*")
        return cls(
            environment=os.getenv("APP_ENV", "development"),
            port=_int_env("PORT", 3000),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            api_prefix=_api_prefix(),
            database_url=_database_url(),
            pool_size=_int_env("DB_POOL_SIZE", 10),
            default_page_size=_int_env("DEFAULT_PAGE_SIZE", 50),
            max_page_size=_int_env("MAX_PAGE_SIZE", 1000),
            default_sort_field=os.getenv("DEFAULT_SORT_FIELD", "id"),
            cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
        )


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )
