"""Render CSV records as SQL literal lists."""

import logging
import math
import re

from f1loader.types import Record
from ingestion.duration import parse_duration
from ingestion.schema import ColumnType, TableSchema

logger = logging.getLogger(__name__)

NULL = "NULL"
QUOTE_SUBSTITUTE = "?"
DEFAULT_TIMESTAMP_CAST = "CAST('{}' AS TIMESTAMP)"

# Plain decimal notation only: no padding, no digit separators.
DECIMAL_RE = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?", re.ASCII)
# Bytes undecodable as UTF-8 surface as lone low surrogates under surrogateescape.
_INVALID_RUN_RE = re.compile("[\udc80-\udcff]+")


def repair_text(text: str) -> str:
    """Replace each run of surrogateescape'd bytes with one U+FFFD."""
    return _INVALID_RUN_RE.sub("\ufffd", text)


def sanitize(text: str | bytes) -> str:
    """Make a field safe to embed in a quoted SQL literal.

    Each run of invalid UTF-8 becomes a single U+FFFD, ``%`` is doubled for
    the pyformat pass applied by the store, and ``'`` is replaced by
    QUOTE_SUBSTITUTE. The quote replacement is lossy.
    """
    if isinstance(text, str):
        text = text.encode("utf-8", errors="surrogatepass")
    text = repair_text(text.decode("utf-8", errors="surrogateescape"))
    return text.replace("%", "%%").replace("'", QUOTE_SUBSTITUTE)


def _parse_number(field: str, position: int, record: Record) -> float:
    if field == "":
        return 0.0
    try:
        if DECIMAL_RE.fullmatch(field) is None:
            raise ValueError(f"invalid syntax {field!r}")
        value = float(field)
        if not math.isfinite(value):
            raise ValueError(f"value out of range {field!r}")
    except ValueError as e:
        logger.warning("FIELDS: %s", record)
        logger.warning("Unable to convert field %s [%d]: %s", field, position, e)
        return -1.0
    return value


def render_value(
    column_type: ColumnType,
    field: str,
    position: int = 0,
    record: Record | None = None,
    timestamp_cast: str = DEFAULT_TIMESTAMP_CAST,
) -> str:
    """Render one field as a SQL literal. Never raises on bad numeric input."""
    if column_type is ColumnType.STRING:
        return f"'{sanitize(field)}'"

    if column_type in (ColumnType.INTEGER, ColumnType.FLOAT):
        if field == NULL:
            return NULL
        value = _parse_number(field, position, record if record is not None else [field])
        if column_type is ColumnType.INTEGER:
            return str(int(value))
        return "%f" % value

    if column_type is ColumnType.TIMESTAMP:
        return timestamp_cast.format(field)

    if column_type is ColumnType.DURATION:
        return "%f" % parse_duration(sanitize(field))

    raise ValueError(f"Unknown column type: {column_type}")


def render_values(
    schema: TableSchema,
    record: Record,
    timestamp_cast: str = DEFAULT_TIMESTAMP_CAST,
) -> str:
    """Render a record as the comma-joined VALUES list for ``schema``.

    The result has exactly one literal per field, in record order.
    """
    return ",".join(
        render_value(schema.column_type(i), field, i, record, timestamp_cast)
        for i, field in enumerate(record)
    )


def insert_statement(schema: TableSchema, columns: list[str], values: str) -> str:
    return f"INSERT INTO {schema.name}({','.join(columns)}) VALUES ({values})"
