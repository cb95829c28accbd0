"""PostgreSQL implementation of DatabaseService."""

import logging

import psycopg2
import psycopg2.errors

from f1loader.errors import ConflictError, StoreError
from f1loader.service import DatabaseService, Session, Transaction
from f1loader.types import Statement

logger = logging.getLogger(__name__)

_CONFLICTS = (
    psycopg2.errors.SerializationFailure,
    psycopg2.errors.DeadlockDetected,
    psycopg2.errors.LockNotAvailable,
)


def _translate(exc: psycopg2.Error) -> StoreError:
    message = str(exc).strip()
    if isinstance(exc, _CONFLICTS):
        return ConflictError(message)
    # Lost connections and server restarts.
    return StoreError(message, retryable=isinstance(exc, psycopg2.OperationalError))


class PostgresTransaction(Transaction):
    """The connection's implicit transaction, opened by the first statement."""

    def __init__(self, conn):
        self._conn = conn

    def execute(self, sql: Statement) -> None:
        try:
            with self._conn.cursor() as cur:
                # An empty argument tuple makes psycopg2 collapse "%%" to "%".
                cur.execute(sql, ())
        except psycopg2.Error as e:
            raise _translate(e) from e

    def commit(self) -> None:
        try:
            self._conn.commit()
        except psycopg2.Error as e:
            raise _translate(e) from e

    def rollback(self) -> None:
        if self._conn.closed:
            return
        try:
            self._conn.rollback()
        except psycopg2.Error as e:
            raise _translate(e) from e


class PostgresSession(Session):
    def __init__(self, conn):
        self._conn = conn

    def new_transaction(self) -> PostgresTransaction:
        if self._conn.closed:
            raise StoreError("Session connection is closed", retryable=False)
        return PostgresTransaction(self._conn)

    def close(self) -> None:
        if not self._conn.closed:
            self._conn.close()


class PostgresDatabaseService(DatabaseService):
    """PostgreSQL backend using psycopg2.

    Each session owns a dedicated connection. Sessions run at SERIALIZABLE
    isolation by default so that concurrent writers surface as
    serialization failures instead of blocking.
    """

    def __init__(self, dsn: str, isolation_level: str = "SERIALIZABLE"):
        self._dsn = dsn
        self._isolation_level = isolation_level

    def open_session(self) -> PostgresSession:
        try:
            conn = psycopg2.connect(self._dsn)
            conn.autocommit = False
            conn.set_session(isolation_level=self._isolation_level)
        except psycopg2.Error as e:
            raise StoreError(f"Failed to connect: {e}".strip()) from e
        logger.debug("Opened PostgreSQL session")
        return PostgresSession(conn)
