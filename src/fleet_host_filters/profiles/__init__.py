"""Configuration profile upload helpers."""

from fleet_host_filters.profiles.uploader import parse_file
from fleet_host_filters.profiles.errors import (
    DEFAULT_ERROR_MESSAGE,
    ProfileErrorMessage,
    get_error_message,
    get_error_reason,
)

__all__ = [
    'parse_file',
    'DEFAULT_ERROR_MESSAGE',
    'ProfileErrorMessage',
    'get_error_message',
    'get_error_reason',
]
