"""Shared test fixtures."""

import csv
import sqlite3
from pathlib import Path

import pytest

from f1loader import create_service
from f1loader.errors import ConflictError, StoreError
from f1loader.service import Session, Transaction


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "test.db"


@pytest.fixture
def db_service(db_path):
    """Provide a fresh file-backed SQLite DatabaseService for each test."""
    return create_service(f"sqlite:///{db_path}")


def fetch_all(db_path: Path, sql: str) -> list[dict]:
    """Read rows back with a plain sqlite3 connection."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    try:
        return [dict(row) for row in conn.execute(sql).fetchall()]
    finally:
        conn.close()


@pytest.fixture
def csv_dir(tmp_path):
    path = tmp_path / "CSV"
    path.mkdir()
    return path


def write_csv(directory: Path, table: str, header: list[str], rows: list[list[str]]) -> Path:
    csv_file = directory / f"{table}.csv"
    with open(csv_file, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        writer.writerows(rows)
    return csv_file


class FakeTransaction(Transaction):
    def __init__(self, session: "FakeSession"):
        self.session = session
        self.statements: list[str] = []
        self.rolled_back = False

    def execute(self, sql: str) -> None:
        if self.session.execute_failures > 0:
            self.session.execute_failures -= 1
            raise self.session.error
        self.statements.append(sql)

    def commit(self) -> None:
        if self.session.failures_left > 0:
            self.session.failures_left -= 1
            raise self.session.error
        self.session.committed.append(list(self.statements))

    def rollback(self) -> None:
        self.rolled_back = True


class FakeSession(Session):
    """Records committed batches.

    The first ``failures`` commits, ``execute_failures`` executes and
    ``begin_failures`` calls to new_transaction raise ``error``.
    """

    def __init__(
        self,
        failures: int = 0,
        error: StoreError | None = None,
        execute_failures: int = 0,
        begin_failures: int = 0,
    ):
        self.failures_left = failures
        self.execute_failures = execute_failures
        self.begin_failures = begin_failures
        self.error = error or ConflictError("write conflict")
        self.committed: list[list[str]] = []
        self.transactions: list[FakeTransaction] = []
        self.closed = False

    def new_transaction(self) -> FakeTransaction:
        if self.begin_failures > 0:
            self.begin_failures -= 1
            raise self.error
        tx = FakeTransaction(self)
        self.transactions.append(tx)
        return tx

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_session():
    return FakeSession()
