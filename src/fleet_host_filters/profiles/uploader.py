"""Configuration profile file parsing."""
from pathlib import PurePath
from typing import Tuple, Union

from fleet_host_filters.utils.exceptions import InvalidFileTypeError

APPLE_PLATFORMS = "macOS, iOS, iPadOS"
WINDOWS_PLATFORM = "Windows"

PLATFORM_BY_EXTENSION = {
    'xml': WINDOWS_PLATFORM,
    'mobileconfig': APPLE_PLATFORMS,
    'json': APPLE_PLATFORMS,
}


def parse_file(file_name: Union[str, PurePath]) -> Tuple[str, str]:
    """Split a profile file name into its display name and target platforms.

    Args:
        file_name: Uploaded file name or path (e.g. 'profile.mobileconfig')

    Returns:
        Tuple of (name without extension, platform string)

    Raises:
        InvalidFileTypeError: If the extension is not a supported profile type
    """
    base_name = PurePath(file_name).name
    parts = base_name.split('.')
    name = '.'.join(parts[:-1])
    extension = parts[-1]

    platform = PLATFORM_BY_EXTENSION.get(extension)
    if platform is None:
        raise InvalidFileTypeError(extension)
    return name, platform
