"""Eligibility rules for bulk actions on all hosts matching the current filters."""
from dataclasses import dataclass
from typing import Optional

from .constants import API_ALL_TEAMS_ID, MAX_SCRIPT_BATCH_TARGETS
from .models import FilterState

SCRIPTS_DISABLED_REASON = "Running scripts is disabled in organization settings."
SELECT_TEAM_REASON = "Select a team to run a script"
UNSUPPORTED_FILTERS_REASON = "Choose different filters to run a script"
TOO_MANY_TARGETS_REASON = "Target at most {max_targets:,} hosts to run a script"

# Only team, query, label and status may be combined with a script run by filter
RUN_SCRIPT_UNSUPPORTED_FIELDS = (
    'os_settings_disk_encryption',
    'policy_id',
    'policy_response',
    'macos_settings',
    'software_id',
    'software_title_id',
    'software_version_id',
    'software_status',
    'os_name',
    'os_version_id',
    'os_version',
    'bootstrap_package',
    'mdm_id',
    'mdm_enrollment_status',
    'munki_issue_id',
    'low_disk_space',
    'os_settings',
    'vulnerability',
    'script_batch_execution_id',
    'script_batch_execution_status',
    'profile_status',
    'profile_uuid',
)


@dataclass(frozen=True)
class BulkEligibility:
    """Whether a bulk action is allowed, and why not when it is disallowed."""
    allowed: bool
    reason: Optional[str] = None


def run_script_batch_filter_not_supported(state: FilterState) -> bool:
    """Whether the state carries a filter a script run by filter cannot target.

    The 'missing' status counts as unsupported, other statuses do not.
    """
    if state.missing_hosts:
        return True
    return any(getattr(state, name) for name in RUN_SCRIPT_UNSUPPORTED_FIELDS)


def check_run_script_eligibility(
    state: FilterState,
    hosts_count: Optional[int],
    scripts_disabled: bool = False,
    premium_tier: bool = True,
    all_matching_selected: bool = True,
    max_targets: int = MAX_SCRIPT_BATCH_TARGETS,
) -> BulkEligibility:
    """Decide whether "run script" is available for the current selection.

    Checks run in order: scripts disabled, all teams selected on premium,
    then (only when every matching host is selected) unsupported filters
    and the matched host count. A missing count blocks until it is known.

    Args:
        state: Current filter state
        hosts_count: Total hosts matching the filters, None while loading
        scripts_disabled: Scripts are administratively disabled
        premium_tier: Premium license is active
        all_matching_selected: The action targets all matching hosts
        max_targets: Ceiling on hosts targeted by one run

    Returns:
        BulkEligibility with the first blocking reason
    """
    if scripts_disabled:
        return BulkEligibility(False, SCRIPTS_DISABLED_REASON)
    if state.team_id is API_ALL_TEAMS_ID and premium_tier:
        return BulkEligibility(False, SELECT_TEAM_REASON)
    if all_matching_selected:
        if run_script_batch_filter_not_supported(state):
            return BulkEligibility(False, UNSUPPORTED_FILTERS_REASON)
        if not hosts_count or hosts_count > max_targets:
            return BulkEligibility(False, TOO_MANY_TARGETS_REASON.format(max_targets=max_targets))
    return BulkEligibility(True)
