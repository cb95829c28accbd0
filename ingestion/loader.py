"""Load F1 CSV tables into the store, sequentially or one worker per table."""

import csv
import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from contextlib import closing
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterator

from f1loader.service import DatabaseService, Session
from f1loader.types import Record
from ingestion.batch import DEFAULT_BATCH_SIZE, CollisionCounter, TxBatch
from ingestion.errors import CsvReadError, LoadCancelled, LoadError
from ingestion.render import (
    DEFAULT_TIMESTAMP_CAST,
    insert_statement,
    render_values,
    repair_text,
)
from ingestion.schema import TableSchema

logger = logging.getLogger(__name__)


class TableState(Enum):
    IDLE = "idle"
    SCHEMA_PENDING = "schema_pending"
    STREAMING = "streaming"
    DRAINING = "draining"
    DONE = "done"
    ABORTED = "aborted"


@dataclass
class TableResult:
    name: str
    state: TableState
    rows: int = 0


@dataclass
class LoadReport:
    tables: list[TableResult] = field(default_factory=list)
    collisions: int = 0

    @property
    def rows(self) -> int:
        return sum(t.rows for t in self.tables)


def read_csv(path: str | Path, table: str) -> Iterator[Record]:
    """Yield the header, then every data record of a CSV file.

    Blank lines are skipped. Each run of undecodable bytes becomes one U+FFFD. A record whose
    width differs from the header raises CsvReadError.
    """
    try:
        f = open(path, newline="", encoding="utf-8-sig", errors="surrogateescape")
    except OSError as e:
        raise CsvReadError(table, f"unable to open file {path}: {e}") from e

    with f:
        reader = csv.reader(f)
        try:
            header = next(reader, None)
            if header is None:
                raise CsvReadError(table, f"{path} has no header row")
            yield [repair_text(value) for value in header]

            for record in reader:
                if not record:
                    continue
                if len(record) != len(header):
                    raise CsvReadError(
                        table,
                        f"{path} line {reader.line_num}: expected {len(header)} "
                        f"fields, got {len(record)}",
                    )
                yield [repair_text(value) for value in record]
        except csv.Error as e:
            raise CsvReadError(table, f"{path} line {reader.line_num}: {e}") from e


class TableLoader:
    """Streams one table's CSV file into the store through a TxBatch.

    State moves IDLE -> SCHEMA_PENDING (when creating the schema) ->
    STREAMING -> DRAINING -> DONE. Any LoadError leaves it ABORTED.
    """

    def __init__(
        self,
        session: Session,
        schema: TableSchema,
        csv_dir: str | Path,
        collisions: CollisionCounter,
        batch_size: int = DEFAULT_BATCH_SIZE,
        create_schema: bool = True,
        timestamp_cast: str = DEFAULT_TIMESTAMP_CAST,
        stop: threading.Event | None = None,
    ):
        self.schema = schema
        self.path = Path(csv_dir) / schema.filename
        self.create_schema = create_schema
        self.timestamp_cast = timestamp_cast
        self.stop = stop
        self.batch = TxBatch(session, schema.name, collisions, batch_size)
        self.state = TableState.IDLE
        self.rows = 0

    def _enter(self, state: TableState) -> None:
        logger.debug("Table %s: %s -> %s", self.schema.name, self.state.value, state.value)
        self.state = state

    def run(self) -> TableResult:
        name = self.schema.name
        try:
            with closing(read_csv(self.path, name)) as records:
                columns = next(records)

                if self.create_schema:
                    self._enter(TableState.SCHEMA_PENDING)
                    for statement in self.schema.create:
                        self.batch.add(statement)
                    self.batch.commit()

                self._enter(TableState.STREAMING)
                for record in records:
                    if self.stop is not None and self.stop.is_set():
                        raise LoadCancelled(name, "stopped after a failure in another table")
                    values = render_values(self.schema, record, self.timestamp_cast)
                    self.batch.add(insert_statement(self.schema, columns, values))
                    self.rows += 1

            self._enter(TableState.DRAINING)
            self.batch.commit()
        except LoadError:
            self._enter(TableState.ABORTED)
            raise

        self._enter(TableState.DONE)
        logger.info("Loaded %d rows into %s", self.rows, name)
        return TableResult(name, self.state, self.rows)


def load_table(
    session: Session,
    schema: TableSchema,
    csv_dir: str | Path,
    collisions: CollisionCounter,
    batch_size: int = DEFAULT_BATCH_SIZE,
    create_schema: bool = True,
    timestamp_cast: str = DEFAULT_TIMESTAMP_CAST,
    stop: threading.Event | None = None,
) -> TableResult:
    """Load ``<csv_dir>/<table>.csv`` into its table on ``session``."""
    loader = TableLoader(
        session,
        schema,
        csv_dir,
        collisions,
        batch_size=batch_size,
        create_schema=create_schema,
        timestamp_cast=timestamp_cast,
        stop=stop,
    )
    return loader.run()


def create_schemas(
    session: Session,
    schemas: tuple[TableSchema, ...],
    collisions: CollisionCounter,
) -> None:
    """Create every table and index, one committed batch per table."""
    for schema in schemas:
        batch = TxBatch(session, schema.name, collisions)
        for statement in schema.create:
            batch.add(statement)
        batch.commit()
        logger.info("Created schema for %s", schema.name)


def _load_worker(
    service: DatabaseService,
    schema: TableSchema,
    csv_dir: str | Path,
    collisions: CollisionCounter,
    batch_size: int,
    create_schema: bool,
    stop: threading.Event,
) -> TableResult:
    with service.open_session() as session:
        return load_table(
            session,
            schema,
            csv_dir,
            collisions,
            batch_size=batch_size,
            create_schema=create_schema,
            timestamp_cast=service.timestamp_cast,
            stop=stop,
        )


def load_tables(
    service: DatabaseService,
    schemas: tuple[TableSchema, ...],
    csv_dir: str | Path,
    batch_size: int = DEFAULT_BATCH_SIZE,
    parallel: bool = False,
    schema_first: bool = False,
    collisions: CollisionCounter | None = None,
) -> LoadReport:
    """Load every table in ``schemas``.

    Sequential mode uses one session and the declared table order. Parallel
    mode runs one worker per table, each on its own session. With
    ``schema_first`` all tables are created up front on a single session
    and the workers only stream data.

    The first fatal failure is raised once every worker has stopped. Pass a
    ``collisions`` counter to read the retry count even when the load fails.
    """
    if collisions is None:
        collisions = CollisionCounter()
    report = LoadReport()

    if schema_first:
        with service.open_session() as session:
            create_schemas(session, schemas, collisions)

    if not parallel:
        with service.open_session() as session:
            for schema in schemas:
                report.tables.append(
                    load_table(
                        session,
                        schema,
                        csv_dir,
                        collisions,
                        batch_size=batch_size,
                        create_schema=not schema_first,
                        timestamp_cast=service.timestamp_cast,
                    )
                )
        report.collisions = collisions.value
        return report

    stop = threading.Event()
    failure: Exception | None = None
    results: dict[str, TableResult] = {}

    with ThreadPoolExecutor(max_workers=max(len(schemas), 1)) as executor:
        futures = {
            executor.submit(
                _load_worker,
                service,
                schema,
                csv_dir,
                collisions,
                batch_size,
                not schema_first,
                stop,
            ): schema
            for schema in schemas
        }
        for future in as_completed(futures):
            schema = futures[future]
            try:
                results[schema.name] = future.result()
            except Exception as e:
                stop.set()
                if failure is None or isinstance(failure, LoadCancelled):
                    failure = e
                logger.error("Load of table %s failed: %s", schema.name, e)

    report.collisions = collisions.value
    if failure is not None:
        raise failure

    report.tables = [results[schema.name] for schema in schemas]
    return report
