"""Tests for engine setup and table creation."""
from unittest.mock import patch
from sqlalchemy import create_engine, inspect
from sqlalchemy.pool import StaticPool

import main
from carebook.config import Settings
from carebook.database import init_db


def test_init_db_creates_tables():
    engine = create_engine("sqlite:///:memory:", poolclass=StaticPool)

    init_db(engine)

    tables = inspect(engine).get_table_names()
    for table in ("users", "user_sessions", "carers", "clients", "shifts", "invoices"):
        assert table in tables
    engine.dispose()


def test_startup_creates_local_sqlite_store(tmp_path, monkeypatch):
    """Test that startup builds the tables of a fresh SQLite file."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(main, "settings", Settings(db_user="sqlite", db_name="carebook_startup"))
    main.app.state.session_factory = None

    try:
        main.startup_event()
        assert "invoices" in inspect(main.app.state.engine).get_table_names()
        assert main.app.state.session_factory is not None
    finally:
        main.shutdown_event()
        main.app.state.session_factory = None
        main.app.state.engine = None

    assert (tmp_path / "carebook_startup.db").exists()


def test_startup_leaves_mysql_schema_to_migrations(monkeypatch):
    engine = create_engine("sqlite:///:memory:", poolclass=StaticPool)
    monkeypatch.setattr(main, "settings", Settings(db_user="carebook", db_password="pw"))
    main.app.state.session_factory = None

    try:
        with patch.object(main, "create_db_engine", return_value=engine), \
                patch.object(main, "init_db") as mock_init:
            main.startup_event()
        mock_init.assert_not_called()
    finally:
        main.shutdown_event()
        main.app.state.session_factory = None
        main.app.state.engine = None
