"""SQLite implementation of DatabaseService."""

import logging
import sqlite3

from f1loader.errors import ConflictError, StoreError
from f1loader.service import DatabaseService, Session, Transaction
from f1loader.types import Statement

logger = logging.getLogger(__name__)


def _translate(exc: sqlite3.Error) -> StoreError:
    message = str(exc)
    if isinstance(exc, sqlite3.OperationalError) and (
        "locked" in message or "busy" in message
    ):
        return ConflictError(message)
    return StoreError(message)


def _render(sql: Statement) -> str:
    """Collapse the pyformat escapes (``%%``) the way psycopg2 does."""
    try:
        return sql % ()
    except (TypeError, ValueError) as e:
        raise StoreError(f"Malformed statement template: {e}") from e


class SQLiteTransaction(Transaction):
    """Explicit BEGIN IMMEDIATE / COMMIT on an autocommit-mode connection."""

    def __init__(self, conn: sqlite3.Connection):
        self._conn = conn
        try:
            conn.execute("BEGIN IMMEDIATE")
        except sqlite3.Error as e:
            raise _translate(e) from e

    def execute(self, sql: Statement) -> None:
        try:
            self._conn.execute(_render(sql))
        except sqlite3.Error as e:
            raise _translate(e) from e

    def commit(self) -> None:
        try:
            self._conn.execute("COMMIT")
        except sqlite3.Error as e:
            raise _translate(e) from e

    def rollback(self) -> None:
        if not self._conn.in_transaction:
            return
        try:
            self._conn.execute("ROLLBACK")
        except sqlite3.Error as e:
            raise _translate(e) from e


class SQLiteSession(Session):
    def __init__(self, conn: sqlite3.Connection):
        self._conn = conn

    def new_transaction(self) -> SQLiteTransaction:
        return SQLiteTransaction(self._conn)

    def close(self) -> None:
        self._conn.close()


class SQLiteDatabaseService(DatabaseService):
    """SQLite backend using stdlib sqlite3.

    Every session gets its own connection, so concurrent workers contend on
    the database write lock. A writer that cannot get the lock within
    ``timeout`` seconds fails with a ConflictError.
    """

    timestamp_cast = "datetime('{}')"

    def __init__(self, db_path: str, timeout: float = 30.0):
        self._db_path = db_path
        self._timeout = timeout

    def open_session(self) -> SQLiteSession:
        conn = None
        try:
            conn = sqlite3.connect(
                self._db_path,
                timeout=self._timeout,
                isolation_level=None,
                check_same_thread=False,
            )
            conn.execute("PRAGMA journal_mode=WAL")
        except sqlite3.Error as e:
            if conn is not None:
                conn.close()
            raise StoreError(f"Unable to open {self._db_path}: {e}") from e
        logger.debug("Opened SQLite session on %s", self._db_path)
        return SQLiteSession(conn)
