"""
Shared pytest fixtures and configuration for all tests.

This module provides fixtures for:
- Temporary configuration files
- CLI contexts with a captured Rich console
- Mock Fleet API responses
"""

from io import StringIO
from pathlib import Path
from typing import Any, Dict
from unittest.mock import Mock

import pytest
import yaml
from rich.console import Console

from fleet_host_filters.cli.context import CliContext
from fleet_host_filters.fleetapi.hosts import Hosts
from fleet_host_filters.utils.config import _load_config_defaults


@pytest.fixture
def temp_config_dir(tmp_path: Path) -> Path:
    """Create a temporary config directory."""
    config_dir = tmp_path / "config"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


@pytest.fixture
def minimal_config_data() -> Dict[str, Any]:
    """Minimal configuration data for testing."""
    return {
        "fleet": {
            "base_url": "https://fleet.example.com",
            "api_token": "test_token_12345",
        },
        "logging": {
            "file": "logs/test.log",
            "level": "DEBUG",
        },
    }


@pytest.fixture
def maximal_config_data() -> Dict[str, Any]:
    """Configuration data with every section set."""
    return {
        "fleet": {
            "base_url": "https://fleet.example.com",
            "api_token": "test_token_12345",
            "prefix": "MYFLEET_",
            "timeout": 5,
        },
        "license": {
            "premium": False,
        },
        "server_settings": {
            "scripts_disabled": True,
        },
        "hosts": {
            "page_size": 20,
            "stale_time": 30,
            "max_script_batch_targets": 100,
        },
        "logging": {
            "file": "logs/test.log",
            "level": "WARNING",
        },
    }


def write_config_file(config_dir: Path, config_data: Dict[str, Any], filename: str = "config.yaml") -> Path:
    """Helper function to write configuration data to a YAML file.

    Args:
        config_dir: Directory to write the config file
        config_data: Configuration dictionary
        filename: Name of the config file (default: config.yaml)

    Returns:
        Path to the written config file
    """
    config_path = config_dir / filename
    with open(config_path, 'w') as f:
        yaml.dump(config_data, f, default_flow_style=False, sort_keys=False)
    return config_path


@pytest.fixture
def minimal_config_file(temp_config_dir: Path, minimal_config_data: Dict[str, Any]) -> Path:
    """Create a minimal config file in a temporary directory."""
    return write_config_file(temp_config_dir, minimal_config_data)


@pytest.fixture
def maximal_config_file(temp_config_dir: Path, maximal_config_data: Dict[str, Any]) -> Path:
    """Create a maximal config file in a temporary directory."""
    return write_config_file(temp_config_dir, maximal_config_data)


@pytest.fixture
def mock_env_credentials(monkeypatch) -> Dict[str, str]:
    """Set up mock environment variables for Fleet API credentials.

    Returns:
        Dictionary of credential values set
    """
    credentials = {
        "FLEET_BASE_URL": "https://env.fleet.example.com",
        "FLEET_API_TOKEN": "env_token_67890",
    }

    for key, value in credentials.items():
        monkeypatch.setenv(key, value)

    return credentials


@pytest.fixture
def mock_client():
    """Mock FleetClient returning empty responses."""
    client = Mock()
    client.get.return_value = {'hosts': [], 'count': 0}
    client.post.return_value = {}
    return client


@pytest.fixture
def mock_ctx(mock_client):
    """CLI context with a captured console, default config and a mocked hosts API."""
    return CliContext(
        console=Console(file=StringIO(), force_terminal=False, width=200),
        verbose=False,
        json_output_mode=False,
        config=_load_config_defaults({}),
        hosts_api=Hosts(mock_client, page_size=50, premium_tier=True),
    )
