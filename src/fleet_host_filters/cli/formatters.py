"""Formatters for displaying hosts, filters and bulk action results."""
from typing import Dict, List

from rich.markup import escape
from rich.table import Table

from fleet_host_filters.utils.constants import HostStatus, Style


def format_status_cell(status: str) -> str:
    """Format host status with Rich markup.

    Args:
        status: Host status string

    Returns:
        Formatted string with Rich color markup
    """
    if status == HostStatus.ONLINE.value:
        return f"[{Style.GREEN}]● online[/{Style.GREEN}]"
    elif status == HostStatus.OFFLINE.value:
        return f"[{Style.DIM}]○ offline[/{Style.DIM}]"
    elif status == HostStatus.MISSING.value:
        return f"[{Style.RED}]✗ missing[/{Style.RED}]"
    elif status == HostStatus.NEW.value:
        return f"[{Style.CYAN}]new[/{Style.CYAN}]"
    return f"[{Style.DIM}]{escape(status or '---')}[/{Style.DIM}]"


def format_host_table_row(host: Dict) -> tuple:
    """Format a single host as a table row.

    Returns:
        Tuple of (hostname, status, team, os, ip, last seen)
    """
    return (
        escape(host.get('display_name') or host.get('hostname') or 'Unknown'),
        format_status_cell(host.get('status')),
        escape(host.get('team_name') or 'No team'),
        escape(host.get('os_version') or '---'),
        host.get('primary_ip') or '---',
        host.get('seen_time') or '---',
    )


def build_host_table(hosts: List[Dict], total: int, page: int, page_size: int) -> Table:
    """Build a Rich table of hosts."""
    first = page * page_size + 1 if hosts else 0
    last = page * page_size + len(hosts)
    table = Table(title=f"Hosts {first}-{last} of {total}", show_lines=False)
    table.add_column("Host", style=Style.BOLD)
    table.add_column("Status")
    table.add_column("Team")
    table.add_column("OS")
    table.add_column("IP address")
    table.add_column("Last seen", style=Style.DIM)

    for host in hosts:
        table.add_row(*format_host_table_row(host))
    return table


def print_filters(result: Dict, ctx) -> None:
    """Print the canonical location and the active exclusive filter."""
    ctx.console.print(f"[{Style.BOLD}]Location:[/{Style.BOLD}] {escape(result['location'])}")
    if result.get('exclusive_filter'):
        ctx.console.print(f"[{Style.DIM}]Filter: {result['exclusive_filter']}[/{Style.DIM}]")


def print_eligibility(run_script: Dict, ctx) -> None:
    if run_script['allowed']:
        ctx.console.print(f"Run script: [{Style.GREEN}]✓ available[/{Style.GREEN}]")
    else:
        ctx.console.print(f"Run script: [{Style.YELLOW}]unavailable[/{Style.YELLOW}] ({escape(run_script['reason'])})")


def print_location_change(result: Dict, ctx) -> None:
    """Print the previous and next location of a filter change."""
    ctx.console.print(f"[{Style.DIM}]From:[/{Style.DIM}] {escape(result['previous_location'])}")
    ctx.console.print(f"[{Style.BOLD}]To:[/{Style.BOLD}]   {escape(result['location'])}")
    dimensions = result.get('exclusive_filters') or []
    if dimensions:
        ctx.console.print(f"[{Style.DIM}]Exclusive filter: {', '.join(dimensions)}[/{Style.DIM}]")
    elif not result.get('includes_filter'):
        ctx.console.print(f"[{Style.DIM}]No filters applied[/{Style.DIM}]")


def build_profile_table(profiles: List[Dict]) -> Table:
    """Build a Rich table of checked profile files."""
    table = Table(title="Configuration profiles")
    table.add_column("File")
    table.add_column("Name", style=Style.BOLD)
    table.add_column("Platform")

    for profile in profiles:
        if 'error' in profile:
            table.add_row(escape(profile['file']), "---",
                          f"[{Style.RED}]{escape(profile['error'])}[/{Style.RED}]")
        else:
            table.add_row(escape(profile['file']), escape(profile['name']), profile['platform'])
    return table
