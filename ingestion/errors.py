"""Fatal load failures."""


class LoadError(Exception):
    """A table could not be loaded. The whole load must stop."""

    def __init__(self, table: str, message: str):
        super().__init__(f"{table}: {message}")
        self.table = table


class LoadAborted(LoadError):
    """Commit retries were exhausted, or the store rejected the batch outright."""


class LoadCancelled(LoadError):
    """The worker stopped because another table failed."""


class CsvReadError(LoadError):
    """The table's CSV source is missing, empty or malformed."""
