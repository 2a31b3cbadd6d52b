"""Base error definitions for filesplitter packages."""

from typing import Any, Dict


class FileSplitterError(Exception):
    """Base exception for all filesplitter errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = context


class UnsupportedDigestError(FileSplitterError):
    """Requested digest algorithm is unknown or has no fixed length."""
    pass
