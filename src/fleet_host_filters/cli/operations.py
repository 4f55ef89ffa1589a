"""Operations behind the host-filters subcommands.

Every handler takes the parsed arguments, the CLI context and a flash
notifier, and returns a JSON-serialisable result dict for the output
strategies.
"""
import logging
from typing import Callable, Dict, Optional

from fleet_host_filters.cli.notifications import ERROR, SUCCESS, FlashNotifier
from fleet_host_filters.fleetapi.query import HostsQuery, QueryCache
from fleet_host_filters.profiles import get_error_message, parse_file
from fleet_host_filters.utils.bulk_actions import check_run_script_eligibility
from fleet_host_filters.utils.constants import (
    DEFAULT_SORT_DIRECTION,
    DEFAULT_STALE_TIME_SECONDS,
    LABEL_SLUG_PREFIX,
    MAX_SCRIPT_BATCH_TARGETS,
)
from fleet_host_filters.utils.exceptions import (
    ApiConnectionError,
    ApiError,
    InvalidFileTypeError,
    ValidationError,
)
from fleet_host_filters.utils.filters import (
    active_exclusive_dimensions,
    get_active_exclusive_filter,
    get_exclusive_filter,
    includes_filter_query_param,
    parse_int,
    to_query_params,
)
from fleet_host_filters.utils.models import FilterState, Label, TableQuery
from fleet_host_filters.utils.navigation import HistoryNavigator, HostFilterController, state_to_path

DATA_ERROR_MESSAGE = "Something's gone wrong. Please try again."
TRANSFER_SUCCESS_MESSAGE = "Hosts successfully transferred to team {team_id}."
TRANSFER_REMOVED_MESSAGE = "Hosts successfully removed from teams."
TRANSFER_ERROR_MESSAGE = "Could not transfer hosts. Please try again."
DELETE_SUCCESS_MESSAGE = "Host(s) successfully deleted."
DELETE_ERROR_MESSAGE = "Could not delete host(s). Please try again."


def build_controller(location: str, ctx) -> HostFilterController:
    """Controller positioned at the given hosts page location."""
    return HostFilterController(HistoryNavigator(location), premium_tier=ctx.premium_tier)


def build_hosts_query(ctx) -> HostsQuery:
    """The context's hosts query, created on first use."""
    if ctx.hosts_query is None:
        stale_time = ctx.config.get('hosts', {}).get('stale_time', DEFAULT_STALE_TIME_SECONDS)
        ctx.hosts_query = HostsQuery(ctx.hosts_api, QueryCache(stale_time))
    return ctx.hosts_query


def table_query_from_args(args, state: FilterState) -> Optional[TableQuery]:
    """TableQuery for the --page/--query/--sort/--order overrides, or None without any."""
    if all(getattr(args, name, None) is None for name in ('page', 'query', 'sort', 'order')):
        return None

    sort_header = args.sort or (state.order_key if args.order else None)
    return TableQuery(
        search_query=args.query if args.query is not None else state.query,
        sort_header=sort_header,
        sort_direction=(args.order or DEFAULT_SORT_DIRECTION) if sort_header else None,
        page_index=args.page if args.page is not None else state.page,
    )


def label_from_slug(slug: str) -> Label:
    """Label for a slug given on the command line.

    Raises:
        ValidationError: If a custom label slug has no numeric id
    """
    slug = slug.strip('/')
    if slug.startswith(LABEL_SLUG_PREFIX):
        label_id = parse_int(slug[len(LABEL_SLUG_PREFIX):])
        if label_id is None:
            raise ValidationError(f"Invalid label: {slug}. Expected '{LABEL_SLUG_PREFIX}<id>'")
        return Label(id=label_id, slug=slug)
    return Label(id=None, slug=slug, type='builtin')


def _filters_summary(state: FilterState, premium_tier: bool) -> Dict:
    active = get_active_exclusive_filter(state, premium_tier)
    return {
        'location': state_to_path(state, premium_tier),
        'query_params': to_query_params(state, premium_tier),
        'label_id': state.label_id,
        'active_label': state.active_label,
        'exclusive_filter': active.name if active else None,
    }


def handle_hosts_operation(args, ctx, notifier: FlashNotifier) -> Dict:
    """List one page of hosts for a location."""
    controller = build_controller(args.location, ctx)
    table_query = table_query_from_args(args, controller.state)
    if table_query is not None:
        controller.on_table_query_change(table_query)
    state = controller.state

    result = {'command': 'hosts', 'success': True, **_filters_summary(state, ctx.premium_tier)}
    query = build_hosts_query(ctx)
    ctx.log_verbose(f"Loading hosts for {result['location']}")
    try:
        response = query.load(state)
        total = query.count(state)
    except (ApiError, ApiConnectionError) as e:
        logging.error("Failed to load hosts: %s", e)
        notifier.render_flash(ERROR, DATA_ERROR_MESSAGE)
        result.update(success=False, error=DATA_ERROR_MESSAGE)
        return result

    result.update(
        hosts=response.get('hosts', []),
        total=total,
        page=state.page,
        page_size=ctx.hosts_api.page_size,
    )
    return result


def handle_count_operation(args, ctx, notifier: FlashNotifier) -> Dict:
    """Count hosts for a location and check run-script eligibility on all of them."""
    state = build_controller(args.location, ctx).state
    result = {'command': 'count', 'success': True, **_filters_summary(state, ctx.premium_tier)}

    try:
        total = build_hosts_query(ctx).count(state)
    except (ApiError, ApiConnectionError) as e:
        logging.error("Failed to count hosts: %s", e)
        notifier.render_flash(ERROR, DATA_ERROR_MESSAGE)
        result.update(success=False, error=DATA_ERROR_MESSAGE)
        return result

    eligibility = check_run_script_eligibility(
        state,
        total,
        scripts_disabled=ctx.config.get('server_settings', {}).get('scripts_disabled', False),
        premium_tier=ctx.premium_tier,
        max_targets=ctx.config.get('hosts', {}).get('max_script_batch_targets', MAX_SCRIPT_BATCH_TARGETS),
    )
    result.update(
        count=total,
        run_script={'allowed': eligibility.allowed, 'reason': eligibility.reason},
    )
    return result


def handle_filter_operation(args, ctx, notifier: FlashNotifier) -> Dict:  # pylint: disable=unused-argument
    """Apply one filter change to a location and report the next location."""
    controller = build_controller(args.location, ctx)
    previous = state_to_path(controller.state, ctx.premium_tier)

    if args.changes:
        values = dict(args.changes)
        dimension = get_exclusive_filter(args.changes[0][0]).name
        path = controller.change_filter(dimension, **values)
    elif args.status:
        path = controller.change_status(None if args.status == 'all' else args.status)
    elif hasattr(args, 'team'):
        path = controller.change_team(args.team)
    elif args.label:
        path = controller.change_label(label_from_slug(args.label))
    elif args.clear_label:
        path = controller.clear_label()
    elif args.clear:
        path = controller.clear_filters(args.clear)
    else:
        # No change: canonicalize the location
        path = state_to_path(controller.state, ctx.premium_tier)
        controller.navigator.replace(path)

    query_params = controller.location.query_params
    return {
        'command': 'filter',
        'success': True,
        'previous_location': previous,
        'location': path,
        'query_params': query_params,
        'exclusive_filters': active_exclusive_dimensions(query_params),
        'includes_filter': includes_filter_query_param(query_params),
    }


def handle_profile_operation(args, ctx, notifier: FlashNotifier) -> Dict:  # pylint: disable=unused-argument
    """Check profile files, or explain a profile upload error reason."""
    if args.profile_command == 'explain':
        message = get_error_message(args.reason)
        return {'command': 'profile', 'success': True, 'message': message.to_dict()}

    profiles = []
    for file_name in args.files:
        try:
            name, platform = parse_file(file_name)
        except InvalidFileTypeError as e:
            notifier.render_flash(ERROR, f"{file_name}: {e}")
            profiles.append({'file': file_name, 'error': str(e)})
            continue
        profiles.append({'file': file_name, 'name': name, 'platform': platform})

    return {
        'command': 'profile',
        'success': not any('error' in p for p in profiles),
        'profiles': profiles,
    }


def handle_transfer_operation(args, ctx, notifier: FlashNotifier) -> Dict:
    """Transfer hosts, by id or by the location's filters, to a team.

    Raises:
        ValidationError: If 'all' teams was given as the destination
    """
    if args.to_team is None:
        raise ValidationError("Choose a destination team, or 'none' to remove hosts from teams")
    team_id = args.to_team or None
    state = build_controller(args.location, ctx).state

    result = {'command': 'transfer', 'team_id': team_id, 'hosts': args.hosts}
    try:
        if args.hosts:
            ctx.hosts_api.transfer_to_team(team_id, args.hosts)
        else:
            ctx.hosts_api.transfer_to_team_by_filter(team_id, state)
            result['filters'] = _filters_summary(state, ctx.premium_tier)
    except (ApiError, ApiConnectionError) as e:
        logging.error("Failed to transfer hosts: %s", e)
        notifier.render_flash(ERROR, TRANSFER_ERROR_MESSAGE)
        result['success'] = False
        return result

    build_hosts_query(ctx).refetch()
    if team_id is None:
        notifier.render_flash(SUCCESS, TRANSFER_REMOVED_MESSAGE)
    else:
        notifier.render_flash(SUCCESS, TRANSFER_SUCCESS_MESSAGE.format(team_id=team_id))
    result['success'] = True
    return result


def handle_delete_operation(args, ctx, notifier: FlashNotifier) -> Dict:
    """Delete hosts, by id or by the location's filters.

    Raises:
        ValidationError: If deleting by filter without --yes
    """
    state = build_controller(args.location, ctx).state
    if not args.hosts and not args.yes:
        raise ValidationError("Deleting all hosts matching the location requires --yes")

    result = {'command': 'delete', 'hosts': args.hosts}
    try:
        if args.hosts:
            ctx.hosts_api.destroy_bulk(args.hosts)
        else:
            ctx.hosts_api.destroy_by_filter(state)
            result['filters'] = _filters_summary(state, ctx.premium_tier)
    except (ApiError, ApiConnectionError) as e:
        logging.error("Failed to delete hosts: %s", e)
        notifier.render_flash(ERROR, DELETE_ERROR_MESSAGE)
        result['success'] = False
        return result

    build_hosts_query(ctx).refetch()
    notifier.render_flash(SUCCESS, DELETE_SUCCESS_MESSAGE)
    result['success'] = True
    return result


COMMAND_HANDLERS: Dict[str, Callable] = {
    'hosts': handle_hosts_operation,
    'count': handle_count_operation,
    'filter': handle_filter_operation,
    'profile': handle_profile_operation,
    'transfer': handle_transfer_operation,
    'delete': handle_delete_operation,
}


def run_command(args, ctx) -> Dict:
    """Run the handler for ``args.command`` and attach the flashes it raised."""
    try:
        handler = COMMAND_HANDLERS[args.command]
    except KeyError:
        raise ValidationError(f"Unknown command '{args.command}'")

    notifier = FlashNotifier(ctx)
    result = handler(args, ctx, notifier)
    result['flashes'] = notifier.to_list()
    return result
