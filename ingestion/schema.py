"""F1 dataset table schemas."""

from dataclasses import dataclass, field
from enum import Enum


class ColumnType(Enum):
    STRING = "string"
    INTEGER = "integer"
    TIMESTAMP = "timestamp"
    FLOAT = "float"
    DURATION = "duration"


INT = ColumnType.INTEGER
TS = ColumnType.TIMESTAMP
FLT = ColumnType.FLOAT
DUR = ColumnType.DURATION


@dataclass(frozen=True)
class TableSchema:
    """Creation statements and column casts for one table.

    ``casts`` maps a CSV column position to its type. Positions not listed
    are strings.
    """

    name: str
    create: tuple[str, ...]
    casts: dict[int, ColumnType] = field(default_factory=dict)

    @property
    def filename(self) -> str:
        return f"{self.name}.csv"

    def column_type(self, position: int) -> ColumnType:
        return self.casts.get(position, ColumnType.STRING)


CIRCUITS = TableSchema(
    "circuits",
    (
        "CREATE TABLE circuits(circuitId INTEGER, circuitRef VARCHAR, name VARCHAR, "
        "location VARCHAR, country VARCHAR, lat FLOAT, lng FLOAT, alt INTEGER, "
        "url VARCHAR, PRIMARY KEY (circuitId))",
    ),
    {0: INT, 5: FLT, 6: FLT, 7: INT},
)

CONSTRUCTORS = TableSchema(
    "constructors",
    (
        "CREATE TABLE constructors(constructorId INTEGER, constructorRef VARCHAR, "
        "name VARCHAR, nationality VARCHAR, url VARCHAR, PRIMARY KEY (constructorId))",
    ),
    {0: INT},
)

CONSTRUCTOR_RESULTS = TableSchema(
    "constructorResults",
    (
        "CREATE TABLE constructorResults(constructorResultsId INTEGER, raceId INTEGER, "
        "constructorId INTEGER, points FLOAT, status VARCHAR, "
        "PRIMARY KEY (constructorResultsId))",
    ),
    {0: INT, 1: INT, 2: INT, 3: FLT},
)

CONSTRUCTOR_STANDINGS = TableSchema(
    "constructorStandings",
    (
        "CREATE TABLE constructorStandings(constructorStandingsId INTEGER, raceId INTEGER, "
        "constructorId INTEGER, points FLOAT, position INTEGER, positionText VARCHAR, "
        "wins INTEGER, PRIMARY KEY (constructorStandingsId))",
    ),
    {0: INT, 1: INT, 2: INT, 3: FLT, 4: INT, 6: INT},
)

DRIVER_STANDINGS = TableSchema(
    "driverStandings",
    (
        "CREATE TABLE driverStandings(driverStandingsId INTEGER, raceId INTEGER, "
        "driverId INTEGER, points FLOAT, position INTEGER, positionText VARCHAR, "
        "wins INTEGER, PRIMARY KEY (driverStandingsId))",
    ),
    {0: INT, 1: INT, 2: INT, 3: FLT, 4: INT, 6: INT},
)

LAP_TIMES = TableSchema(
    "lapTimes",
    (
        "CREATE TABLE lapTimes(raceId INTEGER, driverId INTEGER, lap INTEGER, "
        "position INTEGER, time FLOAT, milliseconds INTEGER, "
        "PRIMARY KEY (raceId, driverId, lap))",
    ),
    {0: INT, 1: INT, 2: INT, 3: INT, 4: DUR, 5: INT},
)

PIT_STOPS = TableSchema(
    "pitStops",
    (
        "CREATE TABLE pitStops(raceId INTEGER, driverId INTEGER, stop INTEGER, "
        "lap INTEGER, time VARCHAR, duration FLOAT, milliseconds INTEGER, "
        "PRIMARY KEY (raceId, driverId, stop))",
    ),
    {0: INT, 1: INT, 2: INT, 3: INT, 5: DUR, 6: INT},
)

QUALIFYING = TableSchema(
    "qualifying",
    (
        "CREATE TABLE qualifying(qualifyId INTEGER, raceId INTEGER, driverId INTEGER, "
        "constructorId INTEGER, number INTEGER, position INTEGER, q1 VARCHAR, "
        "q2 VARCHAR, q3 VARCHAR, PRIMARY KEY (qualifyId))",
        "CREATE INDEX idx_qualifying_constructorId ON qualifying(constructorId)",
    ),
    {0: INT, 1: INT, 2: INT, 3: INT, 4: INT, 5: INT},
)

DRIVERS = TableSchema(
    "drivers",
    (
        "CREATE TABLE drivers(driverId INTEGER, driverRef VARCHAR, number INTEGER, "
        "code VARCHAR(3), forename VARCHAR, surname VARCHAR, dob VARCHAR, "
        "nationality VARCHAR, url VARCHAR, PRIMARY KEY (driverId))",
    ),
    {0: INT, 2: INT},
)

RACES = TableSchema(
    "races",
    (
        "CREATE TABLE races(raceId INTEGER, year INTEGER, round INTEGER, "
        "circuitId INTEGER, name VARCHAR, datetime TIMESTAMP, url VARCHAR, "
        "PRIMARY KEY (raceId))",
    ),
    {0: INT, 1: INT, 2: INT, 3: INT, 5: TS},
)

RESULTS = TableSchema(
    "results",
    (
        "CREATE TABLE results(resultId INTEGER, raceId INTEGER, driverId INTEGER, "
        "constructorId INTEGER, number INTEGER, grid INTEGER, position INTEGER, "
        "positionText VARCHAR, positionOrder INTEGER, points FLOAT, laps INTEGER, "
        "time VARCHAR, milliseconds INTEGER, fastestLap INTEGER, rank INTEGER, "
        "fastestLapTime VARCHAR, fastestLapSpeed FLOAT, statusId INTEGER, "
        "PRIMARY KEY (resultId))",
        "CREATE INDEX idx_results_driverId ON results(driverId)",
        "CREATE INDEX idx_results_statusId ON results(statusId)",
    ),
    {
        0: INT, 1: INT, 2: INT, 3: INT, 4: INT, 5: INT, 6: INT,
        8: INT, 9: FLT, 10: INT, 12: INT, 13: INT, 14: INT, 16: FLT, 17: INT,
    },
)

SEASONS = TableSchema(
    "seasons",
    ("CREATE TABLE seasons(year INTEGER, url VARCHAR, PRIMARY KEY (year))",),
    {0: INT},
)

STATUS = TableSchema(
    "status",
    ("CREATE TABLE status(statusId INTEGER, status VARCHAR, PRIMARY KEY (statusId))",),
    {0: INT},
)

# Declared load order.
SCHEMAS: tuple[TableSchema, ...] = (
    CIRCUITS,
    CONSTRUCTORS,
    CONSTRUCTOR_RESULTS,
    CONSTRUCTOR_STANDINGS,
    DRIVER_STANDINGS,
    LAP_TIMES,
    PIT_STOPS,
    QUALIFYING,
    DRIVERS,
    RACES,
    RESULTS,
    SEASONS,
    STATUS,
)


def select_schemas(names: list[str] | None = None) -> tuple[TableSchema, ...]:
    """Return the schemas for ``names`` in declared load order.

    ``None`` selects every table. Unknown names raise KeyError.
    """
    if names is None:
        return SCHEMAS
    known = {schema.name for schema in SCHEMAS}
    unknown = [name for name in names if name not in known]
    if unknown:
        raise KeyError(f"Unknown tables: {', '.join(unknown)}")
    wanted = set(names)
    return tuple(schema for schema in SCHEMAS if schema.name in wanted)
