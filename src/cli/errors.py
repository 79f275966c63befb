"""Typed exception hierarchy for CLI-related errors."""

from src.confluence_client.errors import SyncError


class CLIError(SyncError):
    """Base exception for all CLI-related errors."""
    pass


class OutputDirectoryError(CLIError):
    """Raised when the pull output directory cannot be used."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot write to output directory {path}: {reason}")
        self.path = path
        self.reason = reason
