import os
from dataclasses import dataclass
from pathlib import Path


@dataclass
class AppConfig:
    database_url: str
    log_level: str
    db_startup_timeout: float
    seed_count: int


def _ensure_sqlite_parent(database_url: str) -> None:
    # sqlite refuses to create a file whose directory is missing
    if database_url.startswith("sqlite:///") and ":memory:" not in database_url:
        db_path = database_url.split("sqlite:///")[-1]
        Path(db_path).expanduser().resolve().parent.mkdir(parents=True, exist_ok=True)


def load_env() -> AppConfig:
    """Read the service configuration from environment variables."""
    database_url = os.getenv("DATABASE_URL", "sqlite:///./database.db")
    _ensure_sqlite_parent(database_url)
    return AppConfig(
        database_url=database_url,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        db_startup_timeout=float(os.getenv("DB_STARTUP_TIMEOUT", "30")),
        seed_count=int(os.getenv("SEED_COUNT", "20")),
    )
