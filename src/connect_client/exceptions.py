"""Exception classes for client configuration."""

from typing import Optional


class ConfigurationError(Exception):
    """Exception raised when client settings are missing or invalid."""

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self):
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message
