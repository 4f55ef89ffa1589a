"""Navigation helpers and the controller that applies filter changes.

The reducer functions in ``filters`` are pure; ``HostFilterController`` is
the single place where a new filter state reaches the router.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Mapping, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit

from . import filters
from .constants import LABEL_SLUG_PREFIX, MANAGE_HOSTS_PATH
from .exceptions import ValidationError
from .models import AppPaths, FilterState, Label, Navigation, TableQuery


@dataclass(frozen=True)
class Location:
    """A parsed hosts page location."""
    path: str
    query_params: Dict[str, str] = field(default_factory=dict)
    route_params: Dict[str, str] = field(default_factory=dict)


def build_query_string(query_params: Optional[Mapping]) -> str:
    """Encode query params, skipping empty values."""
    if not query_params:
        return ""
    items = [(key, str(value)) for key, value in query_params.items()
             if value is not None and value != ""]
    return urlencode(items)


def get_next_location_path(path_prefix: str, route_params: Optional[Mapping] = None,
                           query_params: Optional[Mapping] = None) -> str:
    """Build the next router path from a prefix, label route params and query params."""
    path = path_prefix.rstrip('/') or '/'
    route_params = route_params or {}
    if route_params.get('label_id'):
        path = f"{path}/{LABEL_SLUG_PREFIX}{route_params['label_id']}"
    elif route_params.get('active_label'):
        path = f"{path}/{route_params['active_label']}"

    query_string = build_query_string(query_params)
    return f"{path}?{query_string}" if query_string else path


def navigation_to_path(navigation: Navigation) -> str:
    return get_next_location_path(navigation.path_prefix, navigation.route_params, navigation.query_params)


def state_to_path(state: FilterState, premium_tier: bool = True) -> str:
    """Canonical hosts page path for a state."""
    return get_next_location_path(MANAGE_HOSTS_PATH, state.route_params,
                                  filters.to_query_params(state, premium_tier))


def parse_location(location: str) -> Location:
    """Split a hosts page URL or path into path, query params and route params.

    Raises:
        ValidationError: If the path is not under the hosts page
    """
    parts = urlsplit(location)
    path = parts.path.rstrip('/') or MANAGE_HOSTS_PATH
    if not path.startswith(MANAGE_HOSTS_PATH):
        raise ValidationError(f"Not a hosts page location: {location}")

    route_params = {}
    remainder = path[len(MANAGE_HOSTS_PATH):].strip('/')
    if remainder.startswith(LABEL_SLUG_PREFIX):
        route_params['label_id'] = remainder[len(LABEL_SLUG_PREFIX):]
    elif remainder:
        route_params['active_label'] = remainder

    # Repeated keys: the last one wins, like the router's query object
    query_params = dict(parse_qsl(parts.query, keep_blank_values=True))
    return Location(path=path, query_params=query_params, route_params=route_params)


class Navigator(ABC):
    """Router abstraction the controller navigates through."""

    @abstractmethod
    def replace(self, path: str) -> None:
        """Replace the current location with ``path``."""

    @property
    @abstractmethod
    def current_path(self) -> str:
        """The current location path, including the query string."""


class HistoryNavigator(Navigator):
    """In-memory router keeping the list of visited locations."""

    def __init__(self, initial_path: str = MANAGE_HOSTS_PATH):
        self.history: List[str] = [initial_path]

    def replace(self, path: str) -> None:
        self.history[-1] = path

    @property
    def current_path(self) -> str:
        return self.history[-1]


class HostFilterController:
    """Applies filter changes to a navigator.

    Every handler computes the next navigation with a pure reducer and hands
    it to ``apply``; nothing else touches the router.
    """

    def __init__(self, navigator: Navigator, premium_tier: bool = True, paths: Optional[AppPaths] = None):
        self.navigator = navigator
        self.premium_tier = premium_tier
        self.paths = paths or AppPaths()
        self._table_query: Optional[TableQuery] = None

    @property
    def location(self) -> Location:
        return parse_location(self.navigator.current_path)

    @property
    def state(self) -> FilterState:
        location = self.location
        return filters.parse_filter_state(location.query_params, location.route_params)

    def apply(self, navigation: Navigation) -> str:
        """Replace the current location with the navigation and remember it."""
        path = navigation_to_path(navigation)
        logging.debug("Navigating hosts page to %s", path)
        self.navigator.replace(path)
        location = parse_location(path)
        self.paths = filters.remember_hosts_path(self.paths, path, location.query_params)
        return path

    def change_filter(self, dimension: str, **values) -> str:
        return self.apply(filters.change_filter(self.state, dimension, **values))

    def change_status(self, status: Optional[str]) -> str:
        return self.apply(filters.change_status(self.state, status, self.premium_tier))

    def change_label(self, label: Label) -> str:
        return self.apply(filters.change_label(self.state, label, self.premium_tier))

    def clear_label(self) -> str:
        return self.apply(filters.clear_label(self.state, self.premium_tier))

    def clear_filters(self, omit_params: Iterable[str]) -> str:
        return self.apply(filters.clear_filters(self.state, omit_params, self.premium_tier))

    def change_team(self, team_id: Optional[int]) -> str:
        team_change = filters.change_team(self.state, team_id, self.paths, self.premium_tier)
        path = self.apply(team_change.navigation)
        # apply() may have remembered the new hosts path
        self.paths = replace(team_change.paths, filtered_hosts_path=self.paths.filtered_hosts_path)
        return path

    def on_table_query_change(self, table_query: TableQuery) -> Optional[str]:
        """Handle a table search/sort/page change; None when nothing changed."""
        navigation = filters.reconcile_table_query(
            self.state, table_query, self._table_query, self.premium_tier)
        if navigation is None:
            return None
        self._table_query = table_query
        return self.apply(navigation)
