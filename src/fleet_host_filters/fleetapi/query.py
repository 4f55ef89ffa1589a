"""Keyed query cache for read-only host requests.

Requests are de-duplicated by key (the full filter tuple). A result is kept
for ``stale_time`` seconds. When a newer request for the same scope is
started before an older one resolves, the older result is still cached but
no longer applied.
"""
import itertools
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, Optional, Tuple

from fleet_host_filters.utils.constants import DEFAULT_STALE_TIME_SECONDS
from fleet_host_filters.utils.core import epoch_now, is_stale
from fleet_host_filters.utils.models import FilterState


@dataclass
class CacheEntry:
    data: Any
    fetched_at: float


@dataclass(frozen=True)
class PendingRequest:
    """Handle for a request that has been started but not yet resolved."""
    scope: str
    key: Hashable
    request_id: int


class QueryCache:
    """Cache of query results per (scope, key) with latest-request tracking."""

    def __init__(self, stale_time: float = DEFAULT_STALE_TIME_SECONDS):
        self.stale_time = stale_time
        self._entries: Dict[Tuple[str, Hashable], CacheEntry] = {}
        self._latest: Dict[str, PendingRequest] = {}
        self._applied: Dict[str, Any] = {}
        self._ids = itertools.count(1)

    def is_fresh(self, scope: str, key: Hashable) -> bool:
        """Whether a result younger than the stale time is cached; stale entries are evicted."""
        entry = self._entries.get((scope, key))
        if entry is None:
            return False
        if is_stale(entry.fetched_at, self.stale_time):
            del self._entries[(scope, key)]
            return False
        return True

    def begin(self, scope: str, key: Hashable) -> PendingRequest:
        """Start a request; it supersedes any unresolved request of the scope."""
        pending = PendingRequest(scope, key, next(self._ids))
        self._latest[scope] = pending
        return pending

    def resolve(self, pending: PendingRequest, data: Any) -> bool:
        """Store a result and apply it if its request is still the latest.

        Returns:
            True when the result was applied, False when it was superseded
        """
        self._entries[(pending.scope, pending.key)] = CacheEntry(data, epoch_now())
        if self._latest.get(pending.scope) != pending:
            logging.debug("Discarding superseded %s result for request %s", pending.scope, pending.request_id)
            return False
        self._applied[pending.scope] = data
        return True

    def fetch(self, scope: str, key: Hashable, fetcher: Callable[[], Any]) -> Any:
        """Return a fresh cached result for the key, or fetch and apply a new one.

        Errors from ``fetcher`` propagate; nothing is retried.
        """
        pending = self.begin(scope, key)
        if self.is_fresh(scope, key):
            logging.debug("Using cached %s result", scope)
            data = self._entries[(scope, key)].data
            self._applied[scope] = data
            return data
        data = fetcher()
        self.resolve(pending, data)
        return data

    def current(self, scope: str) -> Optional[Any]:
        """The result most recently applied for the scope."""
        return self._applied.get(scope)

    def invalidate(self, scope: Optional[str] = None) -> None:
        """Drop cached results so the next fetch goes to the API."""
        if scope is None:
            self._entries.clear()
            return
        for entry_key in [k for k in self._entries if k[0] == scope]:
            del self._entries[entry_key]


class HostsQuery:
    """List and count queries for the hosts page, cached by filter tuple."""

    HOSTS_SCOPE = 'hosts'
    COUNT_SCOPE = 'hosts_count'

    def __init__(self, hosts_api, cache: Optional[QueryCache] = None):
        self.hosts_api = hosts_api
        self.cache = cache or QueryCache()

    def load(self, state: FilterState) -> Dict:
        return self.cache.fetch(self.HOSTS_SCOPE, state.filter_tuple(),
                                lambda: self.hosts_api.load_hosts(state))

    def count(self, state: FilterState) -> int:
        return self.cache.fetch(self.COUNT_SCOPE, state.filter_tuple(include_paging=False),
                                lambda: self.hosts_api.count_hosts(state))

    def refetch(self) -> None:
        """Invalidate both queries, e.g. after a bulk transfer or delete."""
        self.cache.invalidate(self.HOSTS_SCOPE)
        self.cache.invalidate(self.COUNT_SCOPE)
