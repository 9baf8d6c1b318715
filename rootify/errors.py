from __future__ import annotations


class RootifyError(Exception):
    """Base class for every error raised by rootify."""


class StoreError(RootifyError):
    """A persistence operation failed. The sqlite error, if any, is ``__cause__``."""


class StoreUnavailable(StoreError):
    def __init__(self, message: str = "database not initialized"):
        super().__init__(message)


class QueryError(StoreError):
    pass


class WriteError(StoreError):
    pass


class TransactionAborted(WriteError):
    """A bulk import failed on ``key``; nothing from the batch was applied."""

    def __init__(self, key: str, reason: str = ""):
        self.key = key
        msg = f"failed to insert root {key}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)
