"""Bounded batches of statements committed with retry on conflict."""

import logging
import threading
import time
from typing import Callable

from f1loader.errors import StoreError
from f1loader.service import Session, Transaction
from f1loader.types import Statement
from ingestion.errors import LoadAborted

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 256
MAX_ATTEMPTS = 5
BACKOFF_SECONDS = 0.1


class CollisionCounter:
    """Count of commit retries, shared by every worker of a load."""

    def __init__(self):
        self._value = 0
        self._lock = threading.Lock()

    def increment(self) -> int:
        with self._lock:
            self._value += 1
            return self._value

    @property
    def value(self) -> int:
        with self._lock:
            return self._value


class TxBatch:
    """Accumulates statements for one table and commits them in batches.

    Every commit attempt uses a fresh transaction and replays the whole
    buffer, so the store must apply nothing from a failed commit.
    """

    def __init__(
        self,
        session: Session,
        table: str,
        collisions: CollisionCounter,
        batch_size: int = DEFAULT_BATCH_SIZE,
        max_attempts: int = MAX_ATTEMPTS,
        backoff: float = BACKOFF_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self._session = session
        self._table = table
        self._collisions = collisions
        self._batch_size = batch_size
        self._max_attempts = max_attempts
        self._backoff = backoff
        self._sleep = sleep
        self._statements: list[Statement] = []
        self.total = 0

    @property
    def pending(self) -> int:
        return len(self._statements)

    def add(self, statement: Statement) -> None:
        self._statements.append(statement)
        if len(self._statements) >= self._batch_size:
            self.commit()

    def commit(self) -> None:
        if not self._statements:
            return

        for attempt in range(1, self._max_attempts + 1):
            tx = None
            try:
                tx = self._session.new_transaction()
                for statement in self._statements:
                    tx.execute(statement)
                logger.info(
                    "Committing %d [%d] in table %s",
                    len(self._statements),
                    self.total,
                    self._table,
                )
                tx.commit()
            except StoreError as e:
                self._discard(tx)
                if not e.retryable:
                    raise LoadAborted(self._table, f"store error: {e}") from e
                self._collisions.increment()
                if attempt == self._max_attempts:
                    raise LoadAborted(
                        self._table, f"commit failed after {attempt} attempts: {e}"
                    ) from e
                logger.warning(
                    "Tx error in table %s (%s), retrying [%d/%d]",
                    self._table,
                    e,
                    attempt,
                    self._max_attempts,
                )
                self._sleep(self._backoff)
            else:
                break

        self.total += len(self._statements)
        self._statements = []

    def _discard(self, tx: Transaction | None) -> None:
        if tx is None:
            return
        try:
            tx.rollback()
        except StoreError as e:
            logger.debug("Rollback failed in table %s: %s", self._table, e)
