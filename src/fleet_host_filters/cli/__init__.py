"""CLI module for the host-filters tool."""

from fleet_host_filters.cli.cli_setup import parse_arguments, setup_environment
from fleet_host_filters.cli.context import CliContext
from fleet_host_filters.cli.notifications import FlashNotifier
from fleet_host_filters.cli.operations import run_command
from fleet_host_filters.cli.output_strategies import get_output_strategy

__all__ = [
    'parse_arguments',
    'setup_environment',
    'CliContext',
    'FlashNotifier',
    'run_command',
    'get_output_strategy',
]
