"""Error types shared across the catalog layers."""


class CatalogError(Exception):
    """Base class for errors raised by the course catalog."""


class StorageError(CatalogError):
    """A storage operation failed.

    Carries the underlying driver error as ``__cause__``; the message is safe
    to log but is never sent to clients.
    """

    def __init__(self, operation: str, detail: str = ""):
        self.operation = operation
        self.detail = detail
        super().__init__(f"storage operation '{operation}' failed: {detail}")
