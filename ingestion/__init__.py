"""Batched transactional loading of the F1 CSV dataset."""

from ingestion.batch import CollisionCounter, TxBatch
from ingestion.duration import parse_duration
from ingestion.errors import CsvReadError, LoadAborted, LoadCancelled, LoadError
from ingestion.loader import LoadReport, TableResult, TableState, load_table, load_tables
from ingestion.render import render_value, render_values, sanitize
from ingestion.schema import SCHEMAS, ColumnType, TableSchema, select_schemas

__all__ = [
    "SCHEMAS",
    "CollisionCounter",
    "ColumnType",
    "CsvReadError",
    "LoadAborted",
    "LoadCancelled",
    "LoadError",
    "LoadReport",
    "TableResult",
    "TableSchema",
    "TableState",
    "TxBatch",
    "load_table",
    "load_tables",
    "parse_duration",
    "render_value",
    "render_values",
    "sanitize",
    "select_schemas",
]
