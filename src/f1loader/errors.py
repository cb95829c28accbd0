"""Store-level exceptions raised by DatabaseService backends."""


class StoreError(Exception):
    """A driver error translated by a backend.

    ``retryable`` tells callers whether replaying the same work on a fresh
    transaction can succeed.
    """

    def __init__(self, message: str, retryable: bool = False):
        super().__init__(message)
        self.retryable = retryable


class ConflictError(StoreError):
    """The store rejected a transaction because of a concurrent write."""

    def __init__(self, message: str):
        super().__init__(message, retryable=True)
