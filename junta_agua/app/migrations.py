"""Apply the Alembic schema for the billing tables before the API serves requests."""

from __future__ import annotations

import errno
import logging
import os
import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, Optional, Sequence

from alembic import command
from alembic.config import Config
from alembic.script import ScriptDirectory
from sqlalchemy import create_engine, inspect
from sqlalchemy.engine.reflection import Inspector

from .database import SQLALCHEMY_DATABASE_URL

LOGGER = logging.getLogger(__name__)

PACKAGE_DIR = Path(__file__).resolve().parent.parent
LOCK_FILENAME = ".alembic-migration.lock"
LOCK_RETRY_DELAY = 0.25
LOCK_TIMEOUT_ENV = "ALEMBIC_MIGRATION_LOCK_TIMEOUT"
DEFAULT_LOCK_TIMEOUT = 30.0

if os.name == "posix":  # pragma: no cover - platform specific
    import fcntl

    def _try_lock(fileobj) -> None:
        fcntl.flock(fileobj.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)

    def _unlock(fileobj) -> None:
        fcntl.flock(fileobj.fileno(), fcntl.LOCK_UN)

else:  # pragma: no cover - platform specific
    import msvcrt

    def _try_lock(fileobj) -> None:
        msvcrt.locking(fileobj.fileno(), msvcrt.LK_NBLCK, 1)

    def _unlock(fileobj) -> None:
        msvcrt.locking(fileobj.fileno(), msvcrt.LK_UNLCK, 1)


# ERROR_SHARING_VIOLATION (32) and ERROR_LOCK_VIOLATION (33) on Windows.
_LOCK_BUSY_ERRNOS = {errno.EACCES, errno.EAGAIN, errno.EBUSY}
_LOCK_BUSY_WINERRORS = {32, 33}

SchemaCheck = Callable[[Inspector], bool]


def _read_lock_timeout() -> float:
    raw = os.getenv(LOCK_TIMEOUT_ENV)
    if not raw:
        return DEFAULT_LOCK_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        LOGGER.warning(
            "Invalid %s=%s; falling back to %.1f seconds", LOCK_TIMEOUT_ENV, raw, DEFAULT_LOCK_TIMEOUT
        )
        return DEFAULT_LOCK_TIMEOUT
    if value <= 0:
        LOGGER.warning("%s must be positive; using %.1f seconds", LOCK_TIMEOUT_ENV, DEFAULT_LOCK_TIMEOUT)
        return DEFAULT_LOCK_TIMEOUT
    return value


def _lock_is_busy(error: OSError) -> bool:
    if isinstance(error, BlockingIOError):
        return True
    return (
        getattr(error, "errno", None) in _LOCK_BUSY_ERRNOS
        or getattr(error, "winerror", None) in _LOCK_BUSY_WINERRORS
    )


@contextmanager
def _migration_lock(path: Path, *, timeout: float) -> Iterator[None]:
    """Hold an exclusive file lock so concurrent workers migrate one at a time."""

    path.parent.mkdir(parents=True, exist_ok=True)
    deadline = time.monotonic() + timeout
    with path.open("a+") as handle:
        while True:
            try:
                _try_lock(handle)
                break
            except OSError as error:
                if not _lock_is_busy(error):
                    raise
                if time.monotonic() >= deadline:
                    raise TimeoutError("Timed out waiting for Alembic migration lock") from error
                time.sleep(LOCK_RETRY_DELAY)

        LOGGER.debug("Acquired Alembic migration lock at %s", path)
        try:
            yield
        finally:
            try:
                _unlock(handle)
            except OSError as error:  # pragma: no cover - platform specific
                LOGGER.debug("Unable to release Alembic migration lock: %s", error)


def _has_billing_schema(inspector: Inspector) -> bool:
    if not (inspector.has_table("meters") and inspector.has_table("tariffs")):
        return False
    if not inspector.has_table("bills"):
        return False
    return "garden_amount" in {column["name"] for column in inspector.get_columns("bills")}


def _has_comments_and_params(inspector: Inspector) -> bool:
    return (
        _has_billing_schema(inspector)
        and inspector.has_table("comments")
        and inspector.has_table("calculation_params")
    )


# Newest revision first: the first check that matches names the revision an
# unversioned database already corresponds to.
REVISION_SENTINELS: Sequence[tuple[str, SchemaCheck]] = (
    ("20251020_0002", _has_comments_and_params),
    ("20251019_0001", _has_billing_schema),
)


def _detect_revision(inspector: Inspector) -> Optional[str]:
    return next((revision for revision, check in REVISION_SENTINELS if check(inspector)), None)


def build_alembic_config(database_url: Optional[str] = None) -> Config:
    """Return the Alembic configuration bundled with the package."""

    config = Config(str(PACKAGE_DIR / "alembic.ini"))
    config.set_main_option("script_location", str(PACKAGE_DIR / "alembic"))

    project_root = str(PACKAGE_DIR.parent)
    if project_root not in sys.path:
        sys.path.insert(0, project_root)

    url = database_url or os.getenv("DATABASE_URL") or SQLALCHEMY_DATABASE_URL
    config.set_main_option("sqlalchemy.url", url)
    return config


def _upgrade_or_stamp(config: Config, inspector: Inspector) -> None:
    if inspector.has_table("alembic_version"):
        LOGGER.debug("Alembic version table already present; applying migrations if needed")
        command.upgrade(config, "head")
        return

    existing_tables = [name for name in inspector.get_table_names() if name != "alembic_version"]
    detected = _detect_revision(inspector) if existing_tables else None
    if detected is None:
        if existing_tables:
            LOGGER.info("Found tables without Alembic metadata; running full upgrade")
        command.upgrade(config, "head")
        return

    LOGGER.info("Existing tables match Alembic revision %s; stamping before upgrade", detected)
    command.stamp(config, detected)
    if detected != ScriptDirectory.from_config(config).get_current_head():
        command.upgrade(config, "head")


def run_database_migrations(database_url: Optional[str] = None) -> None:
    """Bring the database at ``database_url`` (or ``DATABASE_URL``) to the latest revision."""

    config = build_alembic_config(database_url)
    final_url = config.get_main_option("sqlalchemy.url")
    LOGGER.info("Running database migrations at %s", final_url)

    with _migration_lock(PACKAGE_DIR / LOCK_FILENAME, timeout=_read_lock_timeout()):
        connect_args = {"check_same_thread": False} if final_url.startswith("sqlite") else {}
        engine = create_engine(final_url, connect_args=connect_args)
        try:
            _upgrade_or_stamp(config, inspect(engine))
        finally:
            engine.dispose()
