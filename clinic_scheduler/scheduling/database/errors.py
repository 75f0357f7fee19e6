"""Errors raised by the persistence layer."""

from pathlib import Path


class RecordParseError(ValueError):
    """Raised when a stored line cannot be decoded into a record."""

    def __init__(self, message: str, source: str | None = None, line_no: int | None = None):
        self.message = message
        self.source = source
        self.line_no = line_no
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.source is None:
            return self.message
        if self.line_no is None:
            return f"{self.source}: {self.message}"
        return f"{self.source}:{self.line_no}: {self.message}"


class RecordFormatError(ValueError):
    """Raised when a record holds a value the line format cannot represent."""
    pass


class StorageError(Exception):
    """Raised when a backing file cannot be written."""

    def __init__(self, path: Path, cause: OSError):
        self.path = path
        self.cause = cause
        super().__init__(f"Could not write {path}: {cause}")
