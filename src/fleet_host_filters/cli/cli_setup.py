"""CLI setup and initialization functions."""
import argparse
import os
from typing import List, Optional

from dotenv import load_dotenv
from rich.console import Console

from fleet_host_filters import __version__
from fleet_host_filters.cli.context import CliContext
from fleet_host_filters.fleetapi.client import FleetClient
from fleet_host_filters.fleetapi.hosts import Hosts
from fleet_host_filters.utils.config import read_config_from_yaml
from fleet_host_filters.utils.constants import API_ALL_TEAMS_ID, API_NO_TEAM_ID, MANAGE_HOSTS_PATH, HostStatus
from fleet_host_filters.utils.exceptions import ApiConnectionError, ConfigurationError
from fleet_host_filters.utils.logger import setup_logging

# Commands that only reshape locations or inspect files
OFFLINE_COMMANDS = ('filter', 'profile')


def validate_team(value: str) -> Optional[int]:
    """Validate a team argument: a team id, 'none' (No team) or 'all'.

    Returns:
        Team id, 0 for No team, or None for all teams

    Raises:
        argparse.ArgumentTypeError: If validation fails
    """
    lowered = value.strip().lower()
    if lowered == 'all':
        return API_ALL_TEAMS_ID
    if lowered in ('none', 'no-team'):
        return API_NO_TEAM_ID
    try:
        team_id = int(lowered)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"Invalid team: {value}. Use a team id, 'none' or 'all'"
        )
    if team_id < 0:
        raise argparse.ArgumentTypeError(f"Invalid team id: {value}")
    return team_id


def validate_change(value: str) -> tuple:
    """Validate a KEY=VALUE filter change.

    Raises:
        argparse.ArgumentTypeError: If the change has no '='
    """
    if '=' not in value:
        raise argparse.ArgumentTypeError(f"Invalid filter change: {value}. Expected KEY=VALUE")
    key, _, change_value = value.partition('=')
    key = key.strip()
    if not key:
        raise argparse.ArgumentTypeError(f"Invalid filter change: {value}. Missing key")
    return key, change_value.strip()


def validate_host_ids(value: str) -> List[int]:
    """Validate a comma-separated list of host ids."""
    try:
        return [int(v) for v in value.split(',') if v.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid host ids: {value}. Expected e.g. 1,2,3")


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed arguments namespace
    """
    location_help = f"Hosts page location, e.g. '{MANAGE_HOSTS_PATH}/labels/7?policy_id=3&policy_response=failing'"

    parser = argparse.ArgumentParser(
        description="Fleet Host Filters - resolve hosts page filters, list hosts and run bulk actions",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    # Global arguments - Connection Configuration
    parser.add_argument(
        "-c", "--config",
        default="config/config.yaml",
        help="Path to configuration YAML file (default: config/config.yaml)"
    )
    parser.add_argument(
        "--base-url",
        help="Fleet server URL (overrides config file)"
    )
    parser.add_argument(
        "--api-token",
        help="Fleet API token (overrides config file)"
    )

    # Global arguments - Output Options
    parser.add_argument(
        "--output-format",
        choices=['text', 'json'],
        default='text',
        help="Output format (default: text)"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    subparsers = parser.add_subparsers(dest='command', required=True, help='Available commands')

    # Subcommand: hosts
    hosts_parser = subparsers.add_parser(
        'hosts',
        help='List hosts matching a hosts page location',
        description='Resolve the location into canonical filters and list one page of matching hosts'
    )
    hosts_parser.add_argument('--location', default=MANAGE_HOSTS_PATH, help=location_help)
    hosts_parser.add_argument('--page', type=int, help='Page index (overrides the location)')
    hosts_parser.add_argument('-q', '--query', help='Search text (overrides the location)')
    hosts_parser.add_argument('--sort', help='Sort column, e.g. hostname or last_restarted_at')
    hosts_parser.add_argument('--order', choices=['asc', 'desc'], help='Sort direction')

    # Subcommand: count
    count_parser = subparsers.add_parser(
        'count',
        help='Count hosts matching a hosts page location',
        description='Count hosts matching the canonical filters and report bulk script eligibility'
    )
    count_parser.add_argument('--location', default=MANAGE_HOSTS_PATH, help=location_help)

    # Subcommand: filter
    filter_parser = subparsers.add_parser(
        'filter',
        help='Preview the location produced by a filter change',
        description='Apply one filter change to a hosts page location and print the next location. '
                    'Exclusive filters replace each other; the page index resets.'
    )
    filter_parser.add_argument('--location', default=MANAGE_HOSTS_PATH, help=location_help)
    change_group = filter_parser.add_mutually_exclusive_group()
    change_group.add_argument(
        '--set',
        dest='changes',
        action='append',
        type=validate_change,
        metavar='KEY=VALUE',
        help='Set an exclusive filter param, e.g. --set software_title_id=12 --set software_status=failed'
    )
    change_group.add_argument(
        '-s', '--status',
        choices=[s.value for s in HostStatus] + ['all'],
        help="Select a host status ('all' clears it)"
    )
    change_group.add_argument(
        '--team',
        type=validate_team,
        default=argparse.SUPPRESS,
        help="Switch team: a team id, 'none' or 'all'"
    )
    change_group.add_argument(
        '--label',
        metavar='SLUG',
        help="Select a label by slug, e.g. 'labels/7' or 'online'; selecting the current label deselects it"
    )
    change_group.add_argument('--clear-label', action='store_true', help='Remove the label from the location')
    change_group.add_argument(
        '--clear',
        nargs='+',
        metavar='PARAM',
        help='Remove the given query params'
    )

    # Subcommand: profile
    profile_parser = subparsers.add_parser(
        'profile',
        help='Configuration profile helpers',
        description='Check profile files or explain profile upload errors'
    )
    profile_subparsers = profile_parser.add_subparsers(dest='profile_command', required=True)
    check_parser = profile_subparsers.add_parser('check', help='Show name and platform of profile files')
    check_parser.add_argument('files', nargs='+', help='Profile file names (.mobileconfig, .json, .xml)')
    explain_parser = profile_subparsers.add_parser('explain', help='Show the message for an API error reason')
    explain_parser.add_argument('reason', help='Error reason returned by the API')

    # Subcommand: transfer
    transfer_parser = subparsers.add_parser(
        'transfer',
        help='Transfer hosts to a team',
        description='Transfer the given hosts, or every host matching the location, to a team'
    )
    transfer_parser.add_argument('--location', default=MANAGE_HOSTS_PATH, help=location_help)
    transfer_parser.add_argument('--to-team', required=True, type=validate_team,
                                 help="Destination team id, or 'none' to remove hosts from teams")
    transfer_parser.add_argument('--hosts', type=validate_host_ids,
                                 help='Comma-separated host ids (default: all hosts matching the location)')

    # Subcommand: delete
    delete_parser = subparsers.add_parser(
        'delete',
        help='Delete hosts',
        description='Delete the given hosts, or every host matching the location'
    )
    delete_parser.add_argument('--location', default=MANAGE_HOSTS_PATH, help=location_help)
    delete_parser.add_argument('--hosts', type=validate_host_ids,
                               help='Comma-separated host ids (default: all hosts matching the location)')
    delete_parser.add_argument('--yes', action='store_true', help='Confirm deleting hosts by filter')

    return parser.parse_args(argv)


def load_configuration(args, ctx) -> dict:
    """Load and validate configuration.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    try:
        ctx.log_verbose(f"Loading configuration from {args.config}")
        config = read_config_from_yaml(args.config)
        setup_logging(config, worker_name="host-filters", verbose=ctx.verbose)
        return config
    except OSError as e:
        raise ConfigurationError(f"Failed to load configuration: {e}")


def build_api_credentials(args, config, required: bool = True) -> dict:
    """Build API credentials from arguments, environment and config.

    Priority: CLI arg > ENV var > config file.

    Raises:
        ConfigurationError: If required=True and credentials are missing
    """
    # Load environment variables from .env file if present
    load_dotenv()

    fleet_config = config.get('fleet', {})
    prefix = fleet_config.get('prefix', '')

    apicreds = {}
    for key, flag in (('base_url', '--base-url'), ('api_token', '--api-token')):
        value = getattr(args, key, None) or os.environ.get(prefix + key.upper()) or fleet_config.get(key)
        if value:
            apicreds[key] = value
        elif required:
            raise ConfigurationError(
                f"No {key} provided. Use {flag}, set {prefix}{key.upper()} env var, or configure in YAML"
            )
    return apicreds


def setup_fleet_api(apicreds, config, ctx) -> Hosts:
    """Create the hosts API wrapper.

    Raises:
        ApiConnectionError: If the client cannot be created
    """
    try:
        ctx.log_verbose(f"Connecting to Fleet API at {apicreds['base_url']}...")
        client = FleetClient(
            base_url=apicreds['base_url'],
            api_token=apicreds['api_token'],
            timeout=config.get('fleet', {}).get('timeout', 30),
        )
    except (KeyError, ValueError) as e:
        raise ApiConnectionError(f"Failed to set up Fleet API client: {e}")
    return Hosts(
        client,
        page_size=config.get('hosts', {}).get('page_size'),
        premium_tier=config.get('license', {}).get('premium', True),
    )


def setup_environment(args) -> CliContext:
    """Setup complete environment (config and, for online commands, the API).

    Returns:
        CliContext with all environment setup complete
    """
    ctx = CliContext(
        console=Console(),
        verbose=args.verbose,
        json_output_mode=(args.output_format == 'json')
    )
    ctx.config = load_configuration(args, ctx)

    if args.command in OFFLINE_COMMANDS:
        return ctx

    apicreds = build_api_credentials(args, ctx.config, required=True)
    ctx.hosts_api = setup_fleet_api(apicreds, ctx.config, ctx)
    return ctx
