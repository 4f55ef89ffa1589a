"""Shared utility modules for fleet_host_filters."""

__all__ = [
    'constants',
    'models',
    'filters',
    'bulk_actions',
    'navigation',
    'exceptions',
    'config',
    'logger',
    'core',
]
