"""
Exception hierarchy for magbot.

Every failure the sync pipeline can surface is a ``MagbotError`` so that
callers can catch one base class per unit of work (a selector, an item)
and keep going with the rest.

Exception Hierarchy:
    MagbotError (base)
    ├── ConfigError - configuration directory/file cannot be created or read
    ├── ValidationError - unknown magazine, language or format
    ├── ParseError - feed document lacks required structure
    ├── TransportError - HTTP failure or "not found" response body
    └── FilesystemError - directory or file creation failure
"""

from typing import Optional


class MagbotError(Exception):
    """
    Base exception for all magbot errors.

    Attributes:
        message: Human-readable error message
        suggestion: Optional hint for resolving the error
    """

    def __init__(self, message: str, suggestion: Optional[str] = None) -> None:
        self.message = message
        self.suggestion = suggestion
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the full error message with the suggestion, if any."""
        if self.suggestion:
            return f"{self.message} (suggestion: {self.suggestion})"
        return self.message


class ConfigError(MagbotError):
    """Raised when the configuration cannot be created, read or resolved."""


class ValidationError(MagbotError):
    """
    Raised when a magazine code, language code or format is not known.

    Attributes:
        field: Name of the offending field ("code", "language", "format", ...)
        value: The rejected value
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[str] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        self.field = field
        self.value = value
        super().__init__(message, suggestion=suggestion)


class ParseError(MagbotError):
    """Raised when a feed document is missing required structural elements."""


class TransportError(MagbotError):
    """
    Raised when an HTTP request fails.

    Attributes:
        url: The URL that was requested
        status_code: HTTP status code, when a response was received
    """

    def __init__(
        self,
        message: str,
        url: str = "",
        status_code: Optional[int] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        self.url = url
        self.status_code = status_code
        super().__init__(message, suggestion=suggestion)


class FilesystemError(MagbotError):
    """Raised when a directory or file cannot be created or written."""
