"""Engine and session setup for the water board database.

Everything is driven by environment variables:

``DATABASE_URL``
    SQLAlchemy URL. Defaults to ``junta_agua.db`` next to the package.
``REQUIRE_POSTGRES``
    When true, refuse to start on SQLite (production deployments).
``DATABASE_ECHO``
    Log every SQL statement.
``DATABASE_POOL_SIZE`` / ``DATABASE_MAX_OVERFLOW`` / ``DATABASE_POOL_TIMEOUT`` / ``DATABASE_POOL_RECYCLE``
    Pool tuning, ignored for SQLite.
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Generator, Mapping, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import declarative_base, sessionmaker

LOCAL_DB_FILE = Path(__file__).resolve().parent.parent / "junta_agua.db"

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_flag(env: Mapping[str, str], name: str) -> bool:
    return env.get(name, "").strip().lower() in _TRUE_VALUES


def _env_count(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer") from exc
    if value < 0:
        raise ValueError(f"{name} must be non-negative")
    return value


@dataclass(frozen=True)
class DatabaseSettings:
    url: str
    echo: bool = False
    pool_size: int = 5
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 1800

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    def engine_options(self) -> Dict[str, Any]:
        """Keyword arguments for :func:`sqlalchemy.create_engine`."""

        if self.is_sqlite:
            # Sessions are shared with FastAPI's threadpool.
            return {"echo": self.echo, "connect_args": {"check_same_thread": False}}
        return {
            "echo": self.echo,
            "pool_pre_ping": True,
            "pool_size": self.pool_size,
            "max_overflow": self.max_overflow,
            "pool_timeout": self.pool_timeout,
            "pool_recycle": self.pool_recycle,
        }


def resolve_database_url(raw_url: Optional[str], *, require_postgres: bool = False) -> str:
    """Validate ``raw_url`` and create the folder of a file-based SQLite database."""

    if not raw_url:
        if require_postgres:
            raise RuntimeError(
                "DATABASE_URL must be configured for PostgreSQL when REQUIRE_POSTGRES=1"
            )
        LOCAL_DB_FILE.parent.mkdir(parents=True, exist_ok=True)
        return f"sqlite:///{LOCAL_DB_FILE.as_posix()}"

    url = make_url(raw_url)
    if url.drivername.startswith("sqlite"):
        if require_postgres:
            raise RuntimeError("SQLite is not permitted when REQUIRE_POSTGRES=1; configure DATABASE_URL")
        if url.database not in (None, "", ":memory:"):
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    return url.render_as_string(hide_password=False)


def load_database_settings(env: Optional[Mapping[str, str]] = None) -> DatabaseSettings:
    env = os.environ if env is None else env
    defaults = DatabaseSettings(url="")
    return DatabaseSettings(
        url=resolve_database_url(
            env.get("DATABASE_URL"), require_postgres=_env_flag(env, "REQUIRE_POSTGRES")
        ),
        echo=_env_flag(env, "DATABASE_ECHO"),
        pool_size=_env_count(env, "DATABASE_POOL_SIZE", defaults.pool_size),
        max_overflow=_env_count(env, "DATABASE_MAX_OVERFLOW", defaults.max_overflow),
        pool_timeout=_env_count(env, "DATABASE_POOL_TIMEOUT", defaults.pool_timeout),
        pool_recycle=_env_count(env, "DATABASE_POOL_RECYCLE", defaults.pool_recycle),
    )


settings = load_database_settings()
SQLALCHEMY_DATABASE_URL = settings.url

engine = create_engine(settings.url, **settings.engine_options())
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db() -> Generator:
    """FastAPI dependency yielding a request-scoped session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope() -> Generator:
    """Commit on success and roll back on error; used by the billing CLI."""
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
