"""Error definitions for multipart checksum computation."""

from typing import Any, Dict


class ChecksumError(Exception):
    """Base exception for all multipart-checksum errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = context


class InvalidUsageError(ChecksumError, ValueError):
    """Caller violated a precondition (empty or inconsistent part plan, bad argument)."""
    pass


class ChecksumReadError(ChecksumError):
    """File could not be opened, inspected or read."""
    pass


class ConfigurationError(ChecksumError):
    """Configuration is invalid or missing."""
    pass
