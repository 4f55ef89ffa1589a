"""Shared constants for the hosts filter application.

Constants used across the reducer, API client and CLI modules.
"""
from enum import Enum


# Paging and sorting defaults
DEFAULT_SORT_HEADER = 'hostname'
DEFAULT_SORT_DIRECTION = 'asc'
DEFAULT_PAGE_SIZE = 50
DEFAULT_PAGE_INDEX = 0
DEFAULT_STALE_TIME_SECONDS = 10

# Bulk script runs are capped at this many target hosts
MAX_SCRIPT_BATCH_TARGETS = 5000

# Team ids as the API understands them: None means all teams, 0 means "No team"
API_ALL_TEAMS_ID = None
API_NO_TEAM_ID = 0

# Router paths
MANAGE_HOSTS_PATH = '/hosts/manage'
LABEL_SLUG_PREFIX = 'labels/'

# Hosts API endpoints
API_HOSTS_PATH = '/api/latest/fleet/hosts'
API_HOSTS_COUNT_PATH = '/api/latest/fleet/hosts/count'
API_LABEL_HOSTS_PATH = '/api/latest/fleet/labels/{label_id}/hosts'
API_HOSTS_TRANSFER_PATH = '/api/latest/fleet/hosts/transfer'
API_HOSTS_TRANSFER_BY_FILTER_PATH = '/api/latest/fleet/hosts/transfer/filter'
API_HOSTS_DELETE_PATH = '/api/latest/fleet/hosts/delete'


# Rich styles (used by CLI formatters and output strategies)
class Style:  # pylint: disable=too-few-public-methods
    """Rich markup style constants."""
    GREEN = "green"
    RED = "red"
    YELLOW = "yellow"
    DIM = "dim"
    CYAN = "cyan"
    BOLD = "bold"


class QueryParam:  # pylint: disable=too-few-public-methods
    """Hosts page query parameter names."""
    PAGE = 'page'
    QUERY = 'query'
    ORDER_KEY = 'order_key'
    ORDER_DIRECTION = 'order_direction'
    TEAM_ID = 'team_id'
    STATUS = 'status'
    POLICY_ID = 'policy_id'
    POLICY_RESPONSE = 'policy_response'
    MACOS_SETTINGS = 'macos_settings'
    SOFTWARE_ID = 'software_id'
    SOFTWARE_VERSION_ID = 'software_version_id'
    SOFTWARE_TITLE_ID = 'software_title_id'
    SOFTWARE_STATUS = 'software_status'
    MDM_ID = 'mdm_id'
    MDM_ENROLLMENT_STATUS = 'mdm_enrollment_status'
    MUNKI_ISSUE_ID = 'munki_issue_id'
    LOW_DISK_SPACE = 'low_disk_space'
    OS_VERSION_ID = 'os_version_id'
    OS_NAME = 'os_name'
    OS_VERSION = 'os_version'
    VULNERABILITY = 'vulnerability'
    OS_SETTINGS = 'os_settings'
    DISK_ENCRYPTION = 'os_settings_disk_encryption'
    BOOTSTRAP_PACKAGE = 'bootstrap_package'
    PROFILE_STATUS = 'profile_status'
    PROFILE_UUID = 'profile_uuid'
    SCRIPT_BATCH_EXECUTION_STATUS = 'script_batch_execution_status'
    SCRIPT_BATCH_EXECUTION_ID = 'script_batch_execution_id'


class HostStatus(Enum):
    """Host status filter values."""
    NEW = "new"
    ONLINE = "online"
    OFFLINE = "offline"
    MISSING = "missing"


class PolicyResponse(Enum):
    """Policy response filter values."""
    PASSING = "passing"
    FAILING = "failing"


class SoftwareAggregateStatus(Enum):
    """Software install status filter values."""
    INSTALLED = "installed"
    PENDING = "pending"
    FAILED = "failed"


class ScriptBatchExecutionStatus(Enum):
    """Script batch execution status filter values."""
    RAN = "ran"
    PENDING = "pending"
    ERRORED = "errored"
    INCOMPATIBLE = "incompatible"
    CANCELED = "canceled"


ACCEPTABLE_HOST_STATUSES = frozenset(s.value for s in HostStatus)
VALID_SOFTWARE_STATUSES = frozenset(s.value for s in SoftwareAggregateStatus)
VALID_POLICY_RESPONSES = frozenset(r.value for r in PolicyResponse)

# Every query key the hosts page treats as a filter
MANAGE_HOSTS_PAGE_FILTER_KEYS = (
    QueryParam.QUERY,
    QueryParam.TEAM_ID,
    QueryParam.STATUS,
    QueryParam.POLICY_ID,
    QueryParam.POLICY_RESPONSE,
    QueryParam.MACOS_SETTINGS,
    QueryParam.SOFTWARE_ID,
    QueryParam.SOFTWARE_VERSION_ID,
    QueryParam.SOFTWARE_TITLE_ID,
    QueryParam.SOFTWARE_STATUS,
    QueryParam.MDM_ID,
    QueryParam.MDM_ENROLLMENT_STATUS,
    QueryParam.MUNKI_ISSUE_ID,
    QueryParam.LOW_DISK_SPACE,
    QueryParam.OS_VERSION_ID,
    QueryParam.OS_NAME,
    QueryParam.OS_VERSION,
    QueryParam.VULNERABILITY,
    QueryParam.OS_SETTINGS,
    QueryParam.DISK_ENCRYPTION,
    QueryParam.BOOTSTRAP_PACKAGE,
    QueryParam.PROFILE_STATUS,
    QueryParam.PROFILE_UUID,
    QueryParam.SCRIPT_BATCH_EXECUTION_STATUS,
    QueryParam.SCRIPT_BATCH_EXECUTION_ID,
)

# Dropped from the location when a label is selected
MANAGE_HOSTS_PAGE_LABEL_INCOMPATIBLE_QUERY_PARAMS = (
    QueryParam.POLICY_ID,
    QueryParam.POLICY_RESPONSE,
    QueryParam.SOFTWARE_ID,
    QueryParam.SOFTWARE_VERSION_ID,
    QueryParam.SOFTWARE_TITLE_ID,
    QueryParam.SOFTWARE_STATUS,
)

# Query keys that stop the hosts path from being remembered as "last visited"
SOFTWARE_QUERY_PARAMS = (
    QueryParam.SOFTWARE_ID,
    QueryParam.SOFTWARE_VERSION_ID,
    QueryParam.SOFTWARE_TITLE_ID,
    QueryParam.SOFTWARE_STATUS,
)
