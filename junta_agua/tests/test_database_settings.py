from __future__ import annotations

import pytest

from junta_agua.app.database import LOCAL_DB_FILE, load_database_settings, resolve_database_url


def test_settings_default_to_local_sqlite_file():
    settings = load_database_settings({})

    assert settings.url == f"sqlite:///{LOCAL_DB_FILE.as_posix()}"
    assert settings.is_sqlite
    assert settings.engine_options() == {"echo": False, "connect_args": {"check_same_thread": False}}


def test_postgres_settings_read_pool_options():
    settings = load_database_settings(
        {
            "DATABASE_URL": "postgresql+psycopg://junta:secreto@db/agua",
            "DATABASE_POOL_SIZE": "2",
            "DATABASE_ECHO": "yes",
        }
    )

    options = settings.engine_options()
    assert settings.url == "postgresql+psycopg://junta:secreto@db/agua"
    assert options["pool_size"] == 2
    assert options["max_overflow"] == 10
    assert options["pool_pre_ping"] is True
    assert options["echo"] is True


def test_invalid_pool_values_are_rejected():
    with pytest.raises(ValueError, match="DATABASE_POOL_SIZE"):
        load_database_settings({"DATABASE_URL": "postgresql://db/agua", "DATABASE_POOL_SIZE": "-1"})
    with pytest.raises(ValueError, match="DATABASE_POOL_TIMEOUT"):
        load_database_settings({"DATABASE_URL": "postgresql://db/agua", "DATABASE_POOL_TIMEOUT": "x"})


def test_require_postgres_refuses_sqlite(tmp_path):
    with pytest.raises(RuntimeError):
        resolve_database_url(None, require_postgres=True)
    with pytest.raises(RuntimeError):
        resolve_database_url(f"sqlite:///{tmp_path / 'agua.db'}", require_postgres=True)


def test_sqlite_file_folder_is_created(tmp_path):
    target = tmp_path / "datos" / "agua.db"

    url = resolve_database_url(f"sqlite:///{target}")

    assert url.endswith("agua.db")
    assert target.parent.is_dir()
