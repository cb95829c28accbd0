"""CLI entry point for loading the F1 CSV dataset.

Usage:
    python -m scripts.load_tables --db-url sqlite:///f1.db --csv-dir CSV [--batch-size 256]
        [--parallel [--schema-first]] [--tables circuits races ...]
"""

import argparse
import logging
import os
import sys

from f1loader import StoreError, create_service
from ingestion.batch import DEFAULT_BATCH_SIZE, CollisionCounter
from ingestion.errors import LoadError
from ingestion.loader import load_tables
from ingestion.schema import SCHEMAS, select_schemas

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Load the F1 CSV dataset into a SQL store")
    parser.add_argument(
        "--db-url",
        default=os.environ.get("F1LOAD_DB_URL"),
        help="Database URL (sqlite:/// or postgresql://); defaults to $F1LOAD_DB_URL",
    )
    parser.add_argument("--csv-dir", default="CSV", help="Directory holding <table>.csv files")
    parser.add_argument(
        "--batch-size",
        type=int,
        default=DEFAULT_BATCH_SIZE,
        help="Statements per transaction",
    )
    parser.add_argument(
        "--parallel", action="store_true", help="Load every table in its own worker"
    )
    parser.add_argument(
        "--schema-first",
        action="store_true",
        help="Create all tables before loading any data",
    )
    parser.add_argument(
        "--tables",
        nargs="+",
        metavar="NAME",
        choices=[schema.name for schema in SCHEMAS],
        help="Load only these tables (declared order is kept)",
    )
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.db_url:
        parser.error("--db-url is required when F1LOAD_DB_URL is not set")
    if args.batch_size < 1:
        parser.error("--batch-size must be positive")
    try:
        service = create_service(args.db_url)
    except ValueError as e:
        parser.error(str(e))

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    collisions = CollisionCounter()
    try:
        report = load_tables(
            service,
            select_schemas(args.tables),
            args.csv_dir,
            batch_size=args.batch_size,
            parallel=args.parallel,
            schema_first=args.schema_first,
            collisions=collisions,
        )
        logger.info("Done. %d rows loaded into %d tables.", report.rows, len(report.tables))
    except (LoadError, StoreError) as e:
        logger.error("Load failed: %s", e)
        return 1
    finally:
        logger.info("Collisions: %d", collisions.value)
    return 0


if __name__ == "__main__":
    sys.exit(main())
