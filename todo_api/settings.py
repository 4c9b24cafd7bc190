import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv
from sqlalchemy.engine import URL

load_dotenv()


@dataclass(frozen=True)
class Settings:
    """
    Runtime configuration, read once from the environment.

    DATABASE_URL wins over the DB_* parts. Missing parts are not checked here;
    they show up as a connection failure the first time the pool is used.
    """

    url_override: Optional[str]
    db_user: Optional[str]
    db_password: Optional[str]
    db_host: Optional[str]
    db_port: int
    db_name: Optional[str]
    pool_size: int = 5
    max_overflow: int = 10
    log_level: str = "INFO"
    seed_data: bool = False

    @property
    def database_url(self) -> str:
        if self.url_override:
            return self.url_override
        url = URL.create(
            "postgresql+asyncpg",
            username=self.db_user,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
        )
        return url.render_as_string(hide_password=False)


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def _bool_env(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def get_settings() -> Settings:
    return Settings(
        url_override=os.getenv("DATABASE_URL") or None,
        db_user=os.getenv("DB_USER"),
        db_password=os.getenv("DB_PASSWORD"),
        db_host=os.getenv("DB_HOST"),
        db_port=_int_env("DB_PORT", 5432),
        db_name=os.getenv("DB_NAME"),
        pool_size=_int_env("DB_POOL_SIZE", 5),
        max_overflow=_int_env("DB_MAX_OVERFLOW", 10),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        seed_data=_bool_env("SEED_DATA"),
    )
