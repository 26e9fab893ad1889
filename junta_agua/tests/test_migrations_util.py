from __future__ import annotations

from pathlib import Path

import pytest
from alembic.config import Config
from alembic.script import ScriptDirectory
from sqlalchemy import create_engine, inspect, text

from junta_agua.app.database import Base
from junta_agua.app.main import ensure_database_is_ready
from junta_agua.app import migrations
from junta_agua.app.migrations import run_database_migrations

PACKAGE_DIR = Path(__file__).resolve().parents[1]

BILLING_TABLES = {
    "meters",
    "readings",
    "tariffs",
    "debts",
    "meter_fines",
    "garden_values",
    "bills",
    "comments",
    "calculation_params",
}


def _configure_alembic_script() -> ScriptDirectory:
    config = Config(str(PACKAGE_DIR / "alembic.ini"))
    config.set_main_option("script_location", str(PACKAGE_DIR / "alembic"))
    return ScriptDirectory.from_config(config)


def _current_version(url: str) -> str:
    engine = create_engine(url, connect_args={"check_same_thread": False})
    try:
        with engine.connect() as connection:
            return connection.scalar(text("SELECT version_num FROM alembic_version"))
    finally:
        engine.dispose()


def test_run_database_migrations_upgrades_existing_database(tmp_path, monkeypatch) -> None:
    db_path = tmp_path / "legacy.db"
    url = f"sqlite:///{db_path}"

    engine = create_engine(url, connect_args={"check_same_thread": False})
    with engine.begin() as connection:
        connection.execute(text("CREATE TABLE legacy_table (id INTEGER PRIMARY KEY)"))
    engine.dispose()

    monkeypatch.setenv("DATABASE_URL", url)
    run_database_migrations()

    engine = create_engine(url, connect_args={"check_same_thread": False})
    tables = set(inspect(engine).get_table_names())
    engine.dispose()

    assert "legacy_table" in tables
    assert "alembic_version" in tables
    assert BILLING_TABLES <= tables
    assert _current_version(url) == _configure_alembic_script().get_current_head()


def test_run_database_migrations_stamps_head_for_current_schema(tmp_path) -> None:
    db_path = tmp_path / "current.db"
    url = f"sqlite:///{db_path}"

    engine = create_engine(url, connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    engine.dispose()

    run_database_migrations(url)

    assert _current_version(url) == _configure_alembic_script().get_current_head()

    # A second run finds the version table and leaves the schema untouched.
    run_database_migrations(url)
    assert _current_version(url) == _configure_alembic_script().get_current_head()


def test_run_database_migrations_adds_comment_tables_to_initial_schema(tmp_path) -> None:
    db_path = tmp_path / "initial.db"
    url = f"sqlite:///{db_path}"

    engine = create_engine(url, connect_args={"check_same_thread": False})
    initial_tables = [
        table
        for name, table in Base.metadata.tables.items()
        if name not in {"comments", "calculation_params"}
    ]
    Base.metadata.create_all(bind=engine, tables=initial_tables)
    engine.dispose()

    run_database_migrations(url)

    engine = create_engine(url, connect_args={"check_same_thread": False})
    tables = set(inspect(engine).get_table_names())
    engine.dispose()
    assert BILLING_TABLES <= tables
    assert _current_version(url) == "20251020_0002"


def test_read_lock_timeout_falls_back_on_invalid_values(monkeypatch) -> None:
    monkeypatch.setenv(migrations.LOCK_TIMEOUT_ENV, "abc")
    assert migrations._read_lock_timeout() == migrations.DEFAULT_LOCK_TIMEOUT

    monkeypatch.setenv(migrations.LOCK_TIMEOUT_ENV, "-3")
    assert migrations._read_lock_timeout() == migrations.DEFAULT_LOCK_TIMEOUT

    monkeypatch.setenv(migrations.LOCK_TIMEOUT_ENV, "5")
    assert migrations._read_lock_timeout() == pytest.approx(5.0)


def test_startup_skips_migrations_when_disabled(monkeypatch) -> None:
    calls = []
    monkeypatch.setattr("junta_agua.app.main.run_database_migrations", lambda: calls.append(True))

    monkeypatch.setenv("RUN_MIGRATIONS_ON_STARTUP", "0")
    ensure_database_is_ready()
    assert calls == []

    monkeypatch.setenv("RUN_MIGRATIONS_ON_STARTUP", "1")
    ensure_database_is_ready()
    assert calls == [True]
