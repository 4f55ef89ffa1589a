"""Domain models for the hosts filter logic."""
from dataclasses import dataclass, field, fields, replace
from typing import Dict, List, Optional, Tuple, Union

from .constants import (
    DEFAULT_PAGE_INDEX,
    DEFAULT_SORT_DIRECTION,
    DEFAULT_SORT_HEADER,
    LABEL_SLUG_PREFIX,
    HostStatus,
)

QueryValue = Union[str, int, None]
QueryParams = Dict[str, QueryValue]


@dataclass(frozen=True)
class SortOption:
    """A single sort column.

    Attributes:
        key: Column key (e.g. 'hostname')
        direction: 'asc' or 'desc'
    """
    key: str = DEFAULT_SORT_HEADER
    direction: str = DEFAULT_SORT_DIRECTION


@dataclass(frozen=True)
class TableQuery:
    """Query reported by the hosts table whenever search, sort or page changes."""
    search_query: str = ""
    sort_header: Optional[str] = None
    sort_direction: Optional[str] = None
    page_index: int = DEFAULT_PAGE_INDEX


@dataclass(frozen=True)
class Label:
    """A host label as returned by the labels API.

    Builtin labels (type 'all' or 'status') use their name as slug,
    custom labels use ``labels/<id>``.
    """
    id: Optional[int]
    slug: str
    name: str = ""
    type: str = "regular"


@dataclass(frozen=True)
class AppPaths:
    """Last-visited filtered paths of the other console pages.

    The host details page links back to these, so they must not keep a
    stale team in them.
    """
    filtered_hosts_path: str = ""
    filtered_software_path: str = ""
    filtered_queries_path: str = ""
    filtered_policies_path: str = ""


@dataclass(frozen=True)
class Navigation:
    """Result of a filter reduction: where the router should go next."""
    path_prefix: str
    query_params: QueryParams
    route_params: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class FilterState:  # pylint: disable=too-many-instance-attributes
    """Canonical hosts page filter state.

    Field names match the query parameter names. Built fresh from the
    location on every navigation and never mutated in place; use
    ``with_changes`` to derive a new state.
    """
    # Always-compatible dimensions
    team_id: Optional[int] = None
    query: str = ""
    status: Optional[str] = None
    label_id: Optional[int] = None
    active_label: Optional[str] = None

    # Paging and sorting
    page: int = DEFAULT_PAGE_INDEX
    order_key: str = DEFAULT_SORT_HEADER
    order_direction: str = DEFAULT_SORT_DIRECTION

    # Exclusive dimensions
    policy_id: Optional[int] = None
    policy_response: Optional[str] = None
    macos_settings: Optional[str] = None
    software_id: Optional[int] = None
    software_version_id: Optional[int] = None
    software_title_id: Optional[int] = None
    software_status: Optional[str] = None
    mdm_id: Optional[int] = None
    mdm_enrollment_status: Optional[str] = None
    munki_issue_id: Optional[int] = None
    low_disk_space: Optional[int] = None
    os_version_id: Optional[int] = None
    os_name: Optional[str] = None
    os_version: Optional[str] = None
    vulnerability: Optional[str] = None
    os_settings: Optional[str] = None
    os_settings_disk_encryption: Optional[str] = None
    bootstrap_package: Optional[str] = None
    profile_status: Optional[str] = None
    profile_uuid: Optional[str] = None
    script_batch_execution_status: Optional[str] = None
    script_batch_execution_id: Optional[str] = None

    @property
    def missing_hosts(self) -> bool:
        return self.status == HostStatus.MISSING.value

    @property
    def sort_by(self) -> List[SortOption]:
        return [SortOption(self.order_key or DEFAULT_SORT_HEADER,
                           self.order_direction or DEFAULT_SORT_DIRECTION)]

    @property
    def selected_labels(self) -> List[str]:
        """Label slugs selected through the route, custom label first."""
        labels = []
        if self.label_id is not None:
            labels.append(f"{LABEL_SLUG_PREFIX}{self.label_id}")
        if self.active_label:
            labels.append(self.active_label)
        return labels

    @property
    def route_params(self) -> Dict[str, str]:
        params = {}
        if self.label_id is not None:
            params['label_id'] = str(self.label_id)
        if self.active_label:
            params['active_label'] = self.active_label
        return params

    def with_changes(self, **changes) -> 'FilterState':
        """Return a copy of this state with the given fields replaced."""
        return replace(self, **changes)

    def filter_tuple(self, include_paging: bool = True) -> Tuple:
        """Hashable key built from every dimension value.

        Used as the request key for host list and host count queries; the
        count query leaves out paging.
        """
        paging_fields = ('page', 'order_key', 'order_direction')
        return tuple(
            (f.name, getattr(self, f.name))
            for f in fields(self)
            if include_paging or f.name not in paging_fields
        )
