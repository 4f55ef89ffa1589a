"""FleetAPI module for Fleet REST API interactions."""

from fleet_host_filters.fleetapi.client import FleetClient
from fleet_host_filters.fleetapi.hosts import (
    Hosts,
    build_hosts_query_params,
    build_count_query_params,
    build_filter_payload,
)
from fleet_host_filters.fleetapi.query import QueryCache, HostsQuery, PendingRequest

__all__ = [
    # Client
    'FleetClient',
    # Hosts
    'Hosts',
    'build_hosts_query_params',
    'build_count_query_params',
    'build_filter_payload',
    # Query cache
    'QueryCache',
    'HostsQuery',
    'PendingRequest',
]
