"""Abstract store interface: services open sessions, sessions open transactions."""

from abc import ABC, abstractmethod

from f1loader.types import Statement


class Transaction(ABC):
    """A single unit of work on a session's connection.

    A transaction is used for exactly one commit attempt. After commit()
    or rollback() it must be discarded.
    """

    @abstractmethod
    def execute(self, sql: Statement) -> None:
        """Execute a statement inside the transaction."""

    @abstractmethod
    def commit(self) -> None:
        """Commit the transaction. Raises StoreError on failure."""

    @abstractmethod
    def rollback(self) -> None:
        """Abandon the transaction."""


class Session(ABC):
    """A dedicated connection to the store.

    Sessions are not shared between threads: every worker opens its own.
    """

    @abstractmethod
    def new_transaction(self) -> Transaction:
        """Begin a new transaction on this session."""

    @abstractmethod
    def close(self) -> None:
        """Close the underlying connection."""

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class DatabaseService(ABC):
    """Database-agnostic entry point for the loader.

    Design principles:
    - Stateless: holds connection settings only, no connections
    - Thread-safe: open_session() may be called from any worker thread
    - DB-agnostic: callers program against this ABC, never a concrete backend
    """

    # Template wrapping a raw timestamp field into a cast expression.
    timestamp_cast = "CAST('{}' AS TIMESTAMP)"

    @abstractmethod
    def open_session(self) -> Session:
        """Open a new session. Raises StoreError if the store is unreachable."""
