"""
Unified error handling for CrossTag.
"""


class CrossTagError(Exception):
    """Base exception for CrossTag errors."""

    def __init__(self, message: str, suggestion: str | None = None):
        super().__init__(message)
        self.message = message
        self.suggestion = suggestion

    def __str__(self) -> str:
        if self.suggestion:
            return f"{self.message}. {self.suggestion}"
        return self.message


class StoreError(CrossTagError):
    """Entity store read or write failure."""

    pass


class ImportFormatError(CrossTagError):
    """Structurally invalid import file."""

    pass


class BrowserBookmarksUnavailableError(CrossTagError):
    """No browser bookmark tree source is available."""

    pass


class ConfigurationError(CrossTagError):
    """Configuration error."""

    pass
