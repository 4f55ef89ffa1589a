"""Custom exceptions for fleet_host_filters.

Exceptions shared between the filter reducer, the API client and the CLI.
These exceptions provide semantic error handling for common failure scenarios.
"""
from typing import List, Optional


class HostFilterError(Exception):
    """Base exception for all fleet_host_filters errors.

    All custom exceptions in the project should inherit from this base class.
    """
    pass


class ConfigurationError(HostFilterError):
    """Configuration file or settings error.

    Raised when:
    - Configuration file is missing or invalid
    - Required configuration parameters are missing (base URL, API token)
    - YAML parsing fails
    """
    pass


class ApiConnectionError(HostFilterError):
    """Error connecting to the Fleet API.

    Raised when:
    - Cannot establish connection to the server
    - Network timeout occurs
    - API endpoint is unreachable
    """
    pass


class ApiError(HostFilterError):
    """Error from a Fleet API response.

    Carries the HTTP status code and the ``reason`` strings of the
    ``errors`` array the API returns, so callers can map them to
    friendlier messages.
    """

    def __init__(self, message: str, status_code: Optional[int] = None,
                 reasons: Optional[List[str]] = None, response_data: Optional[dict] = None):
        super().__init__(message)
        self.status_code = status_code
        self.reasons = reasons or []
        self.response_data = response_data or {}

    @property
    def reason(self) -> str:
        """First API error reason, or an empty string."""
        return self.reasons[0] if self.reasons else ""


class InvalidFileTypeError(HostFilterError):
    """Uploaded configuration profile has an unsupported extension."""

    def __init__(self, extension: str):
        super().__init__(f"Invalid file type: {extension}")
        self.extension = extension


class ValidationError(HostFilterError):
    """Data validation error.

    Raised when:
    - A CLI filter change is malformed (e.g. missing ``=``)
    - A location string cannot be parsed
    - Required fields are missing
    """
    pass


__all__ = [
    'HostFilterError',
    'ConfigurationError',
    'ApiConnectionError',
    'ApiError',
    'InvalidFileTypeError',
    'ValidationError',
]
