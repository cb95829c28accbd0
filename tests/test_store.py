"""Tests for the store layer (SQLite backend)."""

import sqlite3

import pytest

from conftest import fetch_all
from f1loader import SQLiteDatabaseService, create_service
from f1loader.errors import ConflictError, StoreError


class TestCreateService:
    def test_sqlite_url(self, tmp_path):
        assert isinstance(create_service(f"sqlite:///{tmp_path}/x.db"), SQLiteDatabaseService)

    def test_unsupported_scheme(self):
        with pytest.raises(ValueError, match="Unsupported database URL scheme"):
            create_service("mysql://localhost/f1")

    def test_sqlite_timestamp_cast(self):
        assert create_service("sqlite:///:memory:").timestamp_cast == "datetime('{}')"

    def test_sqlite_paths(self):
        assert create_service("sqlite:///f1.db")._db_path == "f1.db"
        assert create_service("sqlite:////var/lib/f1.db")._db_path == "/var/lib/f1.db"
        assert create_service("sqlite:///:memory:")._db_path == ":memory:"
        assert create_service("sqlite://")._db_path == ":memory:"
        assert create_service("SQLite:///f1.db")._db_path == "f1.db"

    def test_postgres_schemes(self):
        from f1loader.postgres_service import PostgresDatabaseService

        for url in ("postgresql://u:p@h/f1", "postgres://u:p@h/f1"):
            service = create_service(url)
            assert isinstance(service, PostgresDatabaseService)
            assert service.timestamp_cast == "CAST('{}' AS TIMESTAMP)"

    def test_malformed_url(self):
        with pytest.raises(ValueError, match="Malformed database URL"):
            create_service("f1.db")


class TestSQLiteSession:
    def test_commit(self, db_service, db_path):
        with db_service.open_session() as session:
            tx = session.new_transaction()
            tx.execute("CREATE TABLE t (id INTEGER PRIMARY KEY, name TEXT)")
            tx.execute("INSERT INTO t (id, name) VALUES (1, 'alice')")
            tx.commit()
        assert fetch_all(db_path, "SELECT * FROM t") == [{"id": 1, "name": "alice"}]

    def test_rollback_discards(self, db_service, db_path):
        with db_service.open_session() as session:
            tx = session.new_transaction()
            tx.execute("CREATE TABLE t (id INTEGER PRIMARY KEY)")
            tx.commit()

            tx = session.new_transaction()
            tx.execute("INSERT INTO t (id) VALUES (1)")
            tx.rollback()
        assert fetch_all(db_path, "SELECT * FROM t") == []

    def test_percent_escapes_collapse(self, db_service, db_path):
        with db_service.open_session() as session:
            tx = session.new_transaction()
            tx.execute("CREATE TABLE t (val TEXT)")
            tx.execute("INSERT INTO t (val) VALUES ('100%% fuel')")
            tx.commit()
        assert fetch_all(db_path, "SELECT val FROM t") == [{"val": "100% fuel"}]

    def test_statement_error_not_retryable(self, db_service):
        with db_service.open_session() as session:
            tx = session.new_transaction()
            with pytest.raises(StoreError) as info:
                tx.execute("INSERT INTO missing (id) VALUES (1)")
            tx.rollback()
        assert not info.value.retryable
        assert not isinstance(info.value, ConflictError)

    def test_write_lock_is_conflict(self, db_path):
        service = SQLiteDatabaseService(str(db_path), timeout=0.05)
        with service.open_session() as first, service.open_session() as second:
            holder = first.new_transaction()
            with pytest.raises(ConflictError) as info:
                second.new_transaction()
            holder.rollback()
        assert info.value.retryable

    def test_sessions_are_independent(self, db_service, db_path):
        with db_service.open_session() as setup:
            tx = setup.new_transaction()
            tx.execute("CREATE TABLE t (id INTEGER PRIMARY KEY)")
            tx.commit()

        with db_service.open_session() as a, db_service.open_session() as b:
            for n, session in enumerate((a, b)):
                tx = session.new_transaction()
                tx.execute(f"INSERT INTO t (id) VALUES ({n})")
                tx.commit()
        assert len(fetch_all(db_path, "SELECT * FROM t")) == 2

    def test_open_failure(self, tmp_path):
        service = SQLiteDatabaseService(str(tmp_path / "missing" / "dir" / "x.db"))
        with pytest.raises(StoreError, match="Unable to open"):
            service.open_session()

    def test_open_failure_closes_connection(self, monkeypatch):
        closed = []

        class BrokenConnection:
            def execute(self, sql):
                raise sqlite3.OperationalError("disk I/O error")

            def close(self):
                closed.append(True)

        monkeypatch.setattr(sqlite3, "connect", lambda *args, **kwargs: BrokenConnection())
        service = SQLiteDatabaseService("f1.db")
        with pytest.raises(StoreError, match="disk I/O error") as info:
            service.open_session()
        assert not info.value.retryable
        assert closed == [True]
