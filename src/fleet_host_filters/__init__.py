"""
Fleet Host Filters - hosts list filter state for a device-management console.

This package derives canonical host filters from navigation parameters,
keeps exclusive filters mutually exclusive, checks bulk action eligibility
and queries the hosts API with the resulting filter tuple.
"""

import importlib.metadata

__author__ = "Fleet Host Filters Contributors"
__license__ = "MIT"

try:
    __version__ = importlib.metadata.version("fleet-host-filters")
except importlib.metadata.PackageNotFoundError:
    # Running from a source checkout without an install
    __version__ = "0.0.0+unknown"

__all__ = ['__version__', '__author__', '__license__']
