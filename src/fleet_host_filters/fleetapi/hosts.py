import logging
from typing import Dict, List, Optional

from fleet_host_filters.utils.constants import (
    API_HOSTS_COUNT_PATH,
    API_HOSTS_DELETE_PATH,
    API_HOSTS_PATH,
    API_HOSTS_TRANSFER_BY_FILTER_PATH,
    API_HOSTS_TRANSFER_PATH,
    API_LABEL_HOSTS_PATH,
    DEFAULT_PAGE_SIZE,
    QueryParam,
)
from fleet_host_filters.utils.exceptions import ValidationError
from fleet_host_filters.utils.filters import get_active_exclusive_filter, to_query_params
from fleet_host_filters.utils.models import FilterState

# Exclusive filters the transfer and delete "by filter" endpoints cannot express
BULK_UNSUPPORTED_FILTERS = ('config_profile', 'script_batch')


def build_hosts_query_params(state: FilterState, page_size: int = DEFAULT_PAGE_SIZE,
                             premium_tier: bool = True, device_mapping: bool = True) -> Dict:
    """Query params for the list hosts endpoint.

    Uses the same exclusive filter priority as the page location, so the
    request never carries two exclusive filters.
    """
    params = to_query_params(state, premium_tier)
    params['per_page'] = page_size
    if device_mapping:
        params['device_mapping'] = 'true'
    return {k: v for k, v in params.items() if v is not None and v != ""}


def build_count_query_params(state: FilterState, premium_tier: bool = True) -> Dict:
    """Query params for the count hosts endpoint (no paging or sorting)."""
    params = to_query_params(state, premium_tier)
    for key in (QueryParam.PAGE, QueryParam.ORDER_KEY, QueryParam.ORDER_DIRECTION):
        params.pop(key, None)
    if state.label_id is not None:
        params['label_id'] = state.label_id
    return {k: v for k, v in params.items() if v is not None and v != ""}


def build_filter_payload(state: FilterState, premium_tier: bool = True) -> Dict:
    """The ``filters`` object for the bulk transfer and delete endpoints.

    Carries the same exclusive filter as the list request, so a bulk action
    targets exactly the hosts the list shows.

    Raises:
        ValidationError: If the active filter has no bulk equivalent
    """
    filters = {
        'query': state.query or None,
        'status': None if state.missing_hosts else state.status,
        'label_id': state.label_id,
        'team_id': state.team_id,
    }
    active = get_active_exclusive_filter(state, premium_tier)
    if active is not None:
        if active.name in BULK_UNSUPPORTED_FILTERS:
            raise ValidationError(
                f"Hosts filtered by {active.name.replace('_', ' ')} can only be selected by id; use --hosts"
            )
        filters.update(active.serialize(state))
    return {k: v for k, v in filters.items() if v is not None and v != ""}


class Hosts:
    """
    Hosts endpoints of the Fleet API.

    Reads are keyed by the full filter state; bulk writes either take
    explicit host ids or the filters of the current state.
    """

    def __init__(self, client, page_size: int = DEFAULT_PAGE_SIZE, premium_tier: bool = True):
        """
        Initialize Hosts instance.

        Args:
            client: FleetClient instance
            page_size: Hosts per page
            premium_tier: Whether premium-only filters are honoured
        """
        self.client = client
        self.page_size = page_size
        self.premium_tier = premium_tier

    def load_hosts(self, state: FilterState) -> Dict:
        """Fetch one page of hosts matching the state.

        Returns:
            API response dict with a 'hosts' list
        """
        path = API_HOSTS_PATH
        if state.label_id is not None:
            path = API_LABEL_HOSTS_PATH.format(label_id=state.label_id)
        params = build_hosts_query_params(state, self.page_size, self.premium_tier)
        response = self.client.get(path, params=params)
        logging.info("Loaded %s hosts (page %s)", len(response.get('hosts', [])), state.page)
        return response

    def count_hosts(self, state: FilterState) -> int:
        """Total number of hosts matching the state."""
        response = self.client.get(API_HOSTS_COUNT_PATH, params=build_count_query_params(state, self.premium_tier))
        return int(response.get('count', 0))

    def transfer_to_team(self, team_id: Optional[int], host_ids: List[int]) -> Dict:
        """Move the given hosts to a team (None removes them from teams)."""
        logging.info("Transferring %s hosts to team %s", len(host_ids), team_id)
        return self.client.post(API_HOSTS_TRANSFER_PATH, payload={'team_id': team_id, 'hosts': host_ids})

    def transfer_to_team_by_filter(self, team_id: Optional[int], state: FilterState) -> Dict:
        """Move every host matching the state to a team."""
        filters = build_filter_payload(state, self.premium_tier)
        logging.info("Transferring hosts matching %s to team %s", filters, team_id)
        return self.client.post(API_HOSTS_TRANSFER_BY_FILTER_PATH,
                                payload={'team_id': team_id, 'filters': filters})

    def destroy_bulk(self, host_ids: List[int]) -> Dict:
        """Delete the given hosts."""
        logging.info("Deleting %s hosts", len(host_ids))
        return self.client.post(API_HOSTS_DELETE_PATH, payload={'ids': host_ids})

    def destroy_by_filter(self, state: FilterState) -> Dict:
        """Delete every host matching the state."""
        filters = build_filter_payload(state, self.premium_tier)
        logging.info("Deleting hosts matching %s", filters)
        return self.client.post(API_HOSTS_DELETE_PATH, payload={'filters': filters})
