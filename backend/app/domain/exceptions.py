"""Domain-specific exceptions — framework-independent."""


class CsvParseError(Exception):
    """Raised when a CSV file cannot be read as tabular text at all."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class StorageError(Exception):
    """Raised when the persistent key-value store cannot be read or written.

    Backend-agnostic — works for the JSON file store and the database store.
    """

    def __init__(self, backend: str, key: str, message: str):
        self.backend = backend
        self.key = key
        self.message = message
        super().__init__(f"[{backend}] key '{key}': {message}")
