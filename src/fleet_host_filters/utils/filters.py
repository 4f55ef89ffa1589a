"""Filter reconciliation for the hosts list.

Pure business logic for turning navigation parameters into a canonical
FilterState and for producing the next navigation for every filter change.
No UI or network dependencies; the controller applies the results.
"""
from dataclasses import dataclass, fields
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from .constants import (
    ACCEPTABLE_HOST_STATUSES,
    API_ALL_TEAMS_ID,
    DEFAULT_PAGE_INDEX,
    DEFAULT_SORT_DIRECTION,
    DEFAULT_SORT_HEADER,
    MANAGE_HOSTS_PAGE_FILTER_KEYS,
    MANAGE_HOSTS_PAGE_LABEL_INCOMPATIBLE_QUERY_PARAMS,
    MANAGE_HOSTS_PATH,
    SOFTWARE_QUERY_PARAMS,
    VALID_POLICY_RESPONSES,
    VALID_SOFTWARE_STATUSES,
    HostStatus,
    QueryParam,
    ScriptBatchExecutionStatus,
)
from .exceptions import ValidationError
from .models import AppPaths, FilterState, Label, Navigation, QueryParams, TableQuery

# Sorting this column by "most recent first" means ascending timestamps
INVERTED_SORT_HEADERS = ('last_restarted_at',)

_INT_FIELDS = frozenset((
    QueryParam.PAGE,
    QueryParam.TEAM_ID,
    QueryParam.POLICY_ID,
    QueryParam.SOFTWARE_ID,
    QueryParam.SOFTWARE_VERSION_ID,
    QueryParam.SOFTWARE_TITLE_ID,
    QueryParam.MDM_ID,
    QueryParam.MUNKI_ISSUE_ID,
    QueryParam.LOW_DISK_SPACE,
    QueryParam.OS_VERSION_ID,
))


def parse_int(value) -> Optional[int]:
    """Parse an integer query value, returning None when it is not a number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def _parse_str(value) -> Optional[str]:
    if value is None:
        return None
    value = str(value)
    return value or None


def parse_filter_state(query_params: Optional[Mapping] = None,
                       route_params: Optional[Mapping] = None) -> FilterState:
    """Build a FilterState from location query and route parameters.

    Invalid numbers and unknown enum values become absent filters.

    Args:
        query_params: Location query mapping (values are usually strings)
        route_params: Route parameters ('label_id' and/or 'active_label')

    Returns:
        FilterState
    """
    query_params = query_params or {}
    route_params = route_params or {}

    values = {}
    for f in fields(FilterState):
        if f.name in ('label_id', 'active_label'):
            continue
        raw = query_params.get(f.name)
        values[f.name] = parse_int(raw) if f.name in _INT_FIELDS else _parse_str(raw)

    team_id = values['team_id']
    if team_id is not None and team_id < 0:
        team_id = API_ALL_TEAMS_ID

    page = values['page']
    if page is None or page < 0:
        page = DEFAULT_PAGE_INDEX

    status = values['status'] if values['status'] in ACCEPTABLE_HOST_STATUSES else None
    software_status = values['software_status'] if values['software_status'] in VALID_SOFTWARE_STATUSES else None
    policy_response = values['policy_response'] if values['policy_response'] in VALID_POLICY_RESPONSES else None

    script_batch_status = values['script_batch_execution_status']
    if not script_batch_status and values['script_batch_execution_id']:
        script_batch_status = ScriptBatchExecutionStatus.RAN.value

    values.update(
        team_id=team_id,
        page=page,
        query=values['query'] or "",
        status=status,
        software_status=software_status,
        policy_response=policy_response,
        script_batch_execution_status=script_batch_status,
        order_key=values['order_key'] or DEFAULT_SORT_HEADER,
        order_direction=values['order_direction'] or DEFAULT_SORT_DIRECTION,
        label_id=parse_int(route_params.get('label_id')),
        active_label=_parse_str(route_params.get('active_label')),
    )
    return FilterState(**values)


def _present(value) -> bool:
    return value is not None and value != ""


def _serialize_fields(state: FilterState, names: Iterable[str]) -> QueryParams:
    return {name: getattr(state, name) for name in names if _present(getattr(state, name))}


@dataclass(frozen=True)
class ExclusiveFilter:
    """One entry of the exclusive filter priority chain.

    Attributes:
        name: Dimension name used by callers (e.g. 'policy')
        fields: FilterState fields owned by this dimension
        is_active: Predicate deciding whether the dimension applies
        serialize: Builds the query params for the dimension
        premium_only: Only honoured on the premium tier
    """
    name: str
    fields: Tuple[str, ...]
    is_active: Callable[[FilterState], bool]
    serialize: Callable[[FilterState], QueryParams]
    premium_only: bool = False


def _simple(name: str, *field_names: str, premium_only: bool = False) -> ExclusiveFilter:
    return ExclusiveFilter(
        name=name,
        fields=field_names,
        is_active=lambda s: bool(getattr(s, field_names[0])),
        serialize=lambda s: _serialize_fields(s, field_names),
        premium_only=premium_only,
    )


def _serialize_software_title(state: FilterState) -> QueryParams:
    params = _serialize_fields(state, (QueryParam.SOFTWARE_TITLE_ID,))
    # software_status needs the title and a subset of hosts ('No team' or a team)
    if state.software_status and state.team_id is not API_ALL_TEAMS_ID and params:
        params[QueryParam.SOFTWARE_STATUS] = state.software_status
    return params


# Evaluated in order, first match wins. Reordering changes which filter
# survives when a location carries several exclusive dimensions.
EXCLUSIVE_FILTERS: Tuple[ExclusiveFilter, ...] = (
    ExclusiveFilter(
        name='policy',
        fields=(QueryParam.POLICY_ID, QueryParam.POLICY_RESPONSE),
        is_active=lambda s: bool(s.policy_id and s.policy_response),
        serialize=lambda s: _serialize_fields(s, (QueryParam.POLICY_ID, QueryParam.POLICY_RESPONSE)),
    ),
    _simple('macos_settings', QueryParam.MACOS_SETTINGS),
    _simple('software', QueryParam.SOFTWARE_ID),
    _simple('software_version', QueryParam.SOFTWARE_VERSION_ID),
    ExclusiveFilter(
        name='software_title',
        fields=(QueryParam.SOFTWARE_TITLE_ID, QueryParam.SOFTWARE_STATUS),
        is_active=lambda s: bool(s.software_title_id),
        serialize=_serialize_software_title,
    ),
    _simple('mdm', QueryParam.MDM_ID),
    _simple('mdm_enrollment', QueryParam.MDM_ENROLLMENT_STATUS),
    _simple('munki_issue', QueryParam.MUNKI_ISSUE_ID),
    ExclusiveFilter(
        name='missing',
        fields=(),
        is_active=lambda s: s.missing_hosts,
        serialize=lambda s: {QueryParam.STATUS: HostStatus.MISSING.value},
    ),
    _simple('low_disk_space', QueryParam.LOW_DISK_SPACE, premium_only=True),
    ExclusiveFilter(
        name='os_version',
        fields=(QueryParam.OS_VERSION_ID, QueryParam.OS_NAME, QueryParam.OS_VERSION),
        is_active=lambda s: bool(s.os_version_id or (s.os_name and s.os_version)),
        serialize=lambda s: _serialize_fields(
            s, (QueryParam.OS_VERSION_ID, QueryParam.OS_NAME, QueryParam.OS_VERSION)),
    ),
    _simple('vulnerability', QueryParam.VULNERABILITY),
    _simple('os_settings', QueryParam.OS_SETTINGS),
    _simple('disk_encryption', QueryParam.DISK_ENCRYPTION, premium_only=True),
    _simple('bootstrap_package', QueryParam.BOOTSTRAP_PACKAGE, premium_only=True),
    ExclusiveFilter(
        name='config_profile',
        fields=(QueryParam.PROFILE_STATUS, QueryParam.PROFILE_UUID),
        is_active=lambda s: bool(s.profile_status and s.profile_uuid),
        serialize=lambda s: _serialize_fields(s, (QueryParam.PROFILE_STATUS, QueryParam.PROFILE_UUID)),
    ),
    ExclusiveFilter(
        name='script_batch',
        fields=(QueryParam.SCRIPT_BATCH_EXECUTION_STATUS, QueryParam.SCRIPT_BATCH_EXECUTION_ID),
        is_active=lambda s: bool(s.script_batch_execution_status and s.script_batch_execution_id),
        serialize=lambda s: _serialize_fields(
            s, (QueryParam.SCRIPT_BATCH_EXECUTION_STATUS, QueryParam.SCRIPT_BATCH_EXECUTION_ID)),
    ),
)

EXCLUSIVE_FILTERS_BY_NAME: Dict[str, ExclusiveFilter] = {f.name: f for f in EXCLUSIVE_FILTERS}


def get_exclusive_filter(name: str) -> ExclusiveFilter:
    """Look up an exclusive dimension by name or by one of its query params.

    Raises:
        ValidationError: If no dimension matches
    """
    if name in EXCLUSIVE_FILTERS_BY_NAME:
        return EXCLUSIVE_FILTERS_BY_NAME[name]
    for exclusive_filter in EXCLUSIVE_FILTERS:
        if name in exclusive_filter.fields:
            return exclusive_filter
    raise ValidationError(
        f"Unknown filter: {name}. Valid filters are: {', '.join(EXCLUSIVE_FILTERS_BY_NAME)}"
    )


def get_active_exclusive_filter(state: FilterState, premium_tier: bool = True) -> Optional[ExclusiveFilter]:
    """Return the highest priority exclusive dimension that applies to the state."""
    for exclusive_filter in EXCLUSIVE_FILTERS:
        if exclusive_filter.premium_only and not premium_tier:
            continue
        if exclusive_filter.is_active(state):
            return exclusive_filter
    return None


def active_exclusive_dimensions(query_params: Mapping) -> List[str]:
    """Names of the exclusive dimensions present in a query param mapping.

    Other statuses are compatible; only 'missing' counts as a dimension.
    """
    missing = query_params.get(QueryParam.STATUS) == HostStatus.MISSING.value
    return [
        f.name for f in EXCLUSIVE_FILTERS
        if any(_present(query_params.get(name)) for name in f.fields)
        or (missing and f.name == 'missing')
    ]


def to_query_params(state: FilterState, premium_tier: bool = True) -> QueryParams:
    """Serialise a state into canonical location query params.

    Compatible dimensions are always kept; of the exclusive dimensions only
    the first active one in priority order is written.
    """
    params: QueryParams = {}
    if state.query:
        params[QueryParam.QUERY] = state.query
    params[QueryParam.PAGE] = state.page
    params[QueryParam.ORDER_KEY] = state.order_key or DEFAULT_SORT_HEADER
    params[QueryParam.ORDER_DIRECTION] = state.order_direction or DEFAULT_SORT_DIRECTION
    params[QueryParam.TEAM_ID] = state.team_id
    if state.status and not state.missing_hosts:
        params[QueryParam.STATUS] = state.status

    active = get_active_exclusive_filter(state, premium_tier)
    if active is not None:
        params.update(active.serialize(state))
    return params


def _compatible_params(state: FilterState) -> QueryParams:
    params: QueryParams = {
        QueryParam.PAGE: DEFAULT_PAGE_INDEX,
        QueryParam.ORDER_KEY: state.order_key,
        QueryParam.ORDER_DIRECTION: state.order_direction,
        QueryParam.TEAM_ID: state.team_id,
    }
    if state.query:
        params[QueryParam.QUERY] = state.query
    # 'missing' is itself an exclusive filter
    if state.status and not state.missing_hosts:
        params[QueryParam.STATUS] = state.status
    return params


def _navigate(state: FilterState, query_params: QueryParams,
              path_prefix: str = MANAGE_HOSTS_PATH, keep_route: bool = True) -> Navigation:
    return Navigation(
        path_prefix=path_prefix,
        query_params=query_params,
        route_params=state.route_params if keep_route else {},
    )


def change_filter(state: FilterState, dimension: str, **values) -> Navigation:
    """Set one exclusive dimension and drop every other one.

    Values not given keep their current value within the same dimension, so
    changing only 'policy_response' keeps the selected 'policy_id'. The
    page index resets to zero.

    Args:
        state: Current filter state
        dimension: Dimension name ('policy', 'software_title', ...) or one of its params
        **values: New values for the dimension's query params

    Returns:
        Navigation whose params carry exactly this exclusive dimension

    Raises:
        ValidationError: If the dimension is unknown or a value does not belong to it
    """
    exclusive_filter = get_exclusive_filter(dimension)
    if not exclusive_filter.fields:
        raise ValidationError(f"'{exclusive_filter.name}' is selected through the status filter")

    unknown = set(values) - set(exclusive_filter.fields)
    if unknown:
        raise ValidationError(
            f"Invalid value(s) for {exclusive_filter.name}: {', '.join(sorted(unknown))}"
        )

    raw = {name: getattr(state, name) for name in exclusive_filter.fields}
    raw.update(values)
    raw[QueryParam.TEAM_ID] = state.team_id
    changed = parse_filter_state(raw, state.route_params)
    if not exclusive_filter.is_active(changed):
        raise ValidationError(
            f"Incomplete {exclusive_filter.name} filter: set {', '.join(exclusive_filter.fields)}"
        )

    params = _compatible_params(state)
    params.update(exclusive_filter.serialize(changed))
    return _navigate(state, params)


def clear_filters(state: FilterState, omit_params: Iterable[str], premium_tier: bool = True) -> Navigation:
    """Remove the named query params and reset the page index."""
    defaults = {f.name: f.default for f in fields(FilterState)}
    changes = {name: defaults[name] for name in omit_params
               if name in defaults and name not in ('label_id', 'active_label', 'page')}
    changes['page'] = DEFAULT_PAGE_INDEX
    return _navigate(state, to_query_params(state.with_changes(**changes), premium_tier))


def clear_label(state: FilterState, premium_tier: bool = True) -> Navigation:
    """Drop the label route and reset the page index."""
    cleared = state.with_changes(label_id=None, active_label=None, page=DEFAULT_PAGE_INDEX)
    return _navigate(cleared, to_query_params(cleared, premium_tier), keep_route=False)


def change_status(state: FilterState, status: Optional[str], premium_tier: bool = True) -> Navigation:
    """Select a host status ('' or None for all hosts) and reset the page index.

    Selecting 'missing' drops every other exclusive filter.
    """
    status = status if status in ACCEPTABLE_HOST_STATUSES else None
    changes = {'status': status, 'page': DEFAULT_PAGE_INDEX}
    if status == HostStatus.MISSING.value:
        changes.update({name: None for f in EXCLUSIVE_FILTERS for name in f.fields})
    changed = state.with_changes(**changes)
    return _navigate(changed, to_query_params(changed, premium_tier))


def change_label(state: FilterState, label: Label, premium_tier: bool = True) -> Navigation:
    """Select a label, or deselect it when it is already selected.

    Selecting a label drops the params that cannot be combined with labels
    and resets the page index.
    """
    selected = state.selected_labels
    is_deselecting = bool(label.id) and bool(selected) and label.slug == selected[0]

    changes = {'page': DEFAULT_PAGE_INDEX}
    if label.slug:
        for name in MANAGE_HOSTS_PAGE_LABEL_INCOMPATIBLE_QUERY_PARAMS:
            changes[name] = None
    changed = state.with_changes(**changes)

    path_prefix = MANAGE_HOSTS_PATH if is_deselecting else f"{MANAGE_HOSTS_PATH}/{label.slug}"
    return _navigate(changed, to_query_params(changed, premium_tier),
                     path_prefix=path_prefix, keep_route=False)


@dataclass(frozen=True)
class TeamChange:
    """Result of switching teams: where to go and the reset page paths."""
    navigation: Navigation
    paths: AppPaths


def change_team(state: FilterState, team_id: Optional[int], paths: Optional[AppPaths] = None,
                premium_tier: bool = True) -> TeamChange:
    """Switch the selected team.

    The software status filter is removed when selecting all teams, and the
    script batch filters whenever the team actually changes. The software,
    queries and policies paths are always cleared, or the team might switch
    back when navigating from host details.
    """
    paths = paths or AppPaths()
    changes = {'team_id': team_id, 'page': DEFAULT_PAGE_INDEX}
    if team_id is API_ALL_TEAMS_ID:
        changes['software_status'] = None
    if team_id != state.team_id:
        changes['script_batch_execution_status'] = None
        changes['script_batch_execution_id'] = None
    changed = state.with_changes(**changes)

    new_paths = AppPaths(
        filtered_hosts_path=paths.filtered_hosts_path,
        filtered_software_path="",
        filtered_queries_path="",
        filtered_policies_path="",
    )
    return TeamChange(navigation=_navigate(changed, to_query_params(changed, premium_tier)), paths=new_paths)


def resolve_sort(state: FilterState, table_query: TableQuery) -> Tuple[str, str]:
    """Sort key and direction for a table query, falling back to the state's sort."""
    if table_query.sort_header:
        direction = table_query.sort_direction
        if table_query.sort_header in INVERTED_SORT_HEADERS:
            direction = 'desc' if direction == 'asc' else 'asc'
        return table_query.sort_header, direction or DEFAULT_SORT_DIRECTION
    return state.order_key or DEFAULT_SORT_HEADER, state.order_direction or DEFAULT_SORT_DIRECTION


def reconcile_table_query(state: FilterState, table_query: TableQuery,
                          previous: Optional[TableQuery] = None,
                          premium_tier: bool = True) -> Optional[Navigation]:
    """Rebuild the location for a changed table query (search, sort or page).

    Returns None when the table query did not change.
    """
    if previous is not None and previous == table_query:
        return None

    order_key, order_direction = resolve_sort(state, table_query)
    rebuilt = state.with_changes(
        query=table_query.search_query or "",
        page=table_query.page_index,
        order_key=order_key,
        order_direction=order_direction,
    )
    return _navigate(rebuilt, to_query_params(rebuilt, premium_tier))


def includes_filter_query_param(query_params: Mapping) -> bool:
    """Whether the location carries any filter other than the team."""
    return any(
        key != QueryParam.TEAM_ID and key in query_params
        for key in MANAGE_HOSTS_PAGE_FILTER_KEYS
    )


def remember_hosts_path(paths: AppPaths, path: str, query_params: Mapping) -> AppPaths:
    """Record the last visited hosts path, unless it carries software filters."""
    if any(key in query_params for key in SOFTWARE_QUERY_PARAMS):
        return paths
    if paths.filtered_hosts_path == path:
        return paths
    return AppPaths(
        filtered_hosts_path=path,
        filtered_software_path=paths.filtered_software_path,
        filtered_queries_path=paths.filtered_queries_path,
        filtered_policies_path=paths.filtered_policies_path,
    )
