from typing import Any, Optional


class InvalidOperationFormat(Exception):
    """Raised when an operation descriptor is not a "METHOD PATH" pair."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Invalid method:path pair '{operation}'")


class ObservationLogError(Exception):
    """Raised when an observation log cannot be read."""

    def __init__(self, message: str, file_path: Optional[str] = None, details: Optional[Any] = None):
        self.message = message
        self.file_path = file_path
        self.details = details
        full_message = message
        if file_path:
            full_message += f" [File: {file_path}]"
        if details:
            full_message += f"\nDetails:\n{details}"
        super().__init__(full_message)


class ConfigError(Exception):
    """Raised when the coverage configuration file is invalid."""
    pass
