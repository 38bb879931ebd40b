"""
Query cache and optimistic overlays

Entries are keyed by QueryKey. Reads go through fetch_query, which serves
fresh data from memory, shares one in-flight fetch per key and retries
according to a per-query policy. Mutations speculate through overlays:
each overlay records a snapshot of the entry before it was applied, and
overlays on one key form a stack so that the most recent mutation decides
the final state.
"""

import asyncio
import copy
import itertools
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Hashable, List, Mapping, Optional, Tuple

from .errors import ApiError, NetworkError, ReauthenticationRequired

logger = logging.getLogger(__name__)

Fetcher = Callable[[], Awaitable[Any]]
RetryPolicy = Callable[[int, ApiError], bool]


def _canonical(value: Any) -> Hashable:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return tuple(_canonical(item) for item in value)
    if isinstance(value, dict):
        return tuple(sorted((str(k), _canonical(v)) for k, v in value.items()))
    if isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


@dataclass(frozen=True)
class QueryKey:
    kind: str
    params: Tuple[Tuple[str, Hashable], ...] = ()

    @classmethod
    def of(cls, kind: str, params: Optional[Mapping[str, Any]] = None) -> "QueryKey":
        """Build a key; empty values are dropped and parameter order is irrelevant."""
        items = []
        for name, value in (params or {}).items():
            if value is None or value == "":
                continue
            items.append((str(name), _canonical(value)))
        return cls(kind, tuple(sorted(items)))

    def param(self, name: str, default: Any = None) -> Any:
        return dict(self.params).get(name, default)


def retry_policy(max_failures: int, never: Tuple[int, ...] = ()) -> RetryPolicy:
    """
    Retry while fewer than max_failures attempts have failed, except for the
    listed statuses. A session that must be re-established is never retried.
    """

    def should_retry(failures: int, error: ApiError) -> bool:
        if isinstance(error, ReauthenticationRequired):
            return False
        if error.status in never:
            return False
        return failures < max_failures

    return should_retry


NO_RETRY: RetryPolicy = retry_policy(0)


def _retrieve_exception(task: asyncio.Task) -> None:
    # A fetch may finish with nobody awaiting it (detached, or its observer moved on)
    if not task.cancelled():
        task.exception()


@dataclass
class Overlay:
    token: int
    key: QueryKey
    snapshot: Any
    committed: bool = False


@dataclass
class CacheEntry:
    data: Any = None
    fetched_at: Optional[float] = None
    invalidated: bool = False
    overlays: List[Overlay] = field(default_factory=list)
    fetch_task: Optional[asyncio.Task] = None
    # Bumped whenever the entry is written or detached outside a fetch,
    # so a fetch started earlier knows its result is outdated.
    generation: int = 0

    def is_fresh(self, stale_time: float, now: float) -> bool:
        if self.fetched_at is None or self.invalidated:
            return False
        return now - self.fetched_at < stale_time


class QueryCache:
    def __init__(self, retry_delay: float = 1.0, clock: Callable[[], float] = time.monotonic):
        self.retry_delay = retry_delay
        self.clock = clock
        self._entries: Dict[QueryKey, CacheEntry] = {}
        self._overlays: Dict[int, Overlay] = {}
        self._tokens = itertools.count(1)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def fetch_query(
        self,
        key: QueryKey,
        fetcher: Fetcher,
        stale_time: float = 0.0,
        enabled: bool = True,
        retry: Optional[RetryPolicy] = None,
    ) -> Any:
        """
        Return data for key, fetching it if missing or stale.

        Business Rules:
        - enabled=False skips the query entirely and returns None
        - Fresh data (younger than stale_time, not invalidated) is served
          without touching the network
        - Concurrent callers for one key share a single fetch
        - A fetch that completes after the entry was written or detached, or
          while overlays are pending, leaves the entry untouched; callers
          then receive the entry's current data
        - A fetch whose entry was evicted meanwhile hands its result to the
          callers already waiting but does not repopulate the cache

        Raises:
            ApiError: the fetch failed and the retry policy gave up
            NetworkError: the shared fetch was stopped by close()
        """
        if not enabled:
            return None

        entry = self._entries.get(key)
        if entry is None:
            entry = self._entries[key] = CacheEntry()
        elif entry.is_fresh(stale_time, self.clock()):
            return entry.data

        if entry.fetch_task is None or entry.fetch_task.done():
            entry.fetch_task = asyncio.create_task(self._run_fetch(key, entry, fetcher, retry))
            entry.fetch_task.add_done_callback(_retrieve_exception)
        task = entry.fetch_task
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if not task.cancelled() or (current is not None and current.cancelling()):
                raise
            raise NetworkError(f"Query {key.kind} was stopped before a response arrived")

    async def _run_fetch(
        self, key: QueryKey, entry: CacheEntry, fetcher: Fetcher, retry: Optional[RetryPolicy]
    ) -> Any:
        generation = entry.generation
        failures = 0
        while True:
            try:
                data = await fetcher()
                break
            except ApiError as e:
                failures += 1
                if retry is None or not retry(failures, e):
                    raise
                delay = self.retry_delay * (2 ** (failures - 1))
                logger.info(
                    f"Query {key.kind} failed ({e.status}), retry {failures} in {delay:.2f}s"
                )
                await asyncio.sleep(delay)

        if self._entries.get(key) is not entry:
            logger.debug(f"Not caching result for evicted {key}")
            return data
        if entry.generation != generation or entry.overlays:
            logger.debug(f"Discarding outdated result for {key}")
            return entry.data

        entry.data = data
        entry.fetched_at = self.clock()
        entry.invalidated = False
        return data

    def get_query_data(self, key: QueryKey) -> Any:
        entry = self._entries.get(key)
        return entry.data if entry is not None else None

    def set_query_data(self, key: QueryKey, data: Any) -> None:
        entry = self._entries.setdefault(key, CacheEntry())
        entry.data = data
        entry.fetched_at = self.clock()
        entry.invalidated = False
        entry.generation += 1

    def keys(self, kind: str) -> List[QueryKey]:
        return [key for key in self._entries if key.kind == kind]

    def is_invalidated(self, key: QueryKey) -> bool:
        entry = self._entries.get(key)
        return entry is None or entry.invalidated

    # ------------------------------------------------------------------
    # Invalidation and eviction
    # ------------------------------------------------------------------

    def invalidate(self, kind: str) -> None:
        """Mark every entry of a kind stale; the next read refetches."""
        for key in self.keys(kind):
            self._entries[key].invalidated = True

    def invalidate_key(self, key: QueryKey) -> None:
        entry = self._entries.get(key)
        if entry is not None:
            entry.invalidated = True

    def cancel_query(self, key: QueryKey) -> None:
        """
        Detach the in-flight fetch so its result is not stored.

        The fetch itself keeps running for the callers already awaiting it;
        the next read starts a new one.
        """
        entry = self._entries.get(key)
        if entry is None:
            return
        entry.generation += 1
        entry.fetch_task = None

    def remove(self, key: QueryKey) -> None:
        """Evict an entry. Pending overlays on it are dropped as well."""
        self.cancel_query(key)
        entry = self._entries.pop(key, None)
        if entry is not None:
            for overlay in entry.overlays:
                self._overlays.pop(overlay.token, None)

    def clear(self) -> None:
        for key in list(self._entries):
            self.remove(key)

    def close(self) -> None:
        """Stop every in-flight fetch and drop all entries. Used at shutdown."""
        for entry in self._entries.values():
            if entry.fetch_task is not None and not entry.fetch_task.done():
                entry.fetch_task.cancel()
        self.clear()

    # ------------------------------------------------------------------
    # Optimistic overlays
    # ------------------------------------------------------------------

    def apply_overlay(self, key: QueryKey, update: Callable[[Any], Any]) -> int:
        """
        Speculatively replace the entry's data with update(data).

        update receives a private copy and may return a new value or the
        mutated copy. Returns a token for commit() / rollback().
        """
        entry = self._entries.setdefault(key, CacheEntry())
        snapshot = copy.deepcopy(entry.data)
        entry.data = update(copy.deepcopy(entry.data))
        entry.generation += 1

        overlay = Overlay(token=next(self._tokens), key=key, snapshot=snapshot)
        entry.overlays.append(overlay)
        self._overlays[overlay.token] = overlay
        return overlay.token

    def commit(self, token: int) -> None:
        """
        Keep the overlay's effect. Unknown or evicted tokens are ignored.

        A committed overlay stays on the stack while older overlays are
        still pending, so that their rollback cannot undo its effect.
        """
        overlay = self._overlays.pop(token, None)
        if overlay is None:
            return
        overlay.committed = True
        entry = self._entries.get(overlay.key)
        if entry is not None:
            self._trim(entry)

    def _trim(self, entry: CacheEntry) -> None:
        while entry.overlays and entry.overlays[0].committed:
            entry.overlays.pop(0)

    def rollback(self, token: int) -> None:
        """
        Undo the overlay.

        Business Rules:
        - The most recent overlay restores its snapshot exactly
        - A superseded overlay hands its snapshot to the overlay above it,
          so newer optimistic state stays visible and a later rollback of
          that overlay returns to the state before both
        """
        overlay = self._overlays.pop(token, None)
        if overlay is None:
            return
        entry = self._entries.get(overlay.key)
        if entry is None:
            return

        index = entry.overlays.index(overlay)
        del entry.overlays[index]
        if index == len(entry.overlays):
            entry.data = overlay.snapshot
            entry.generation += 1
            logger.debug(f"Rolled back {overlay.key}")
        else:
            entry.overlays[index].snapshot = overlay.snapshot
            logger.debug(f"Rolled back superseded overlay on {overlay.key}")
        self._trim(entry)

    def pending_overlays(self, key: QueryKey) -> int:
        entry = self._entries.get(key)
        return len(entry.overlays) if entry is not None else 0


class MutationTransaction:
    """Overlays applied on behalf of one mutation, settled together."""

    def __init__(self, cache: QueryCache):
        self.cache = cache
        self._tokens: List[int] = []

    def apply(self, key: QueryKey, update: Callable[[Any], Any]) -> None:
        """Overlay key; keys with no cached data are left alone."""
        if self.cache.get_query_data(key) is None:
            return
        self._tokens.append(self.cache.apply_overlay(key, update))

    def commit(self) -> None:
        for token in self._tokens:
            self.cache.commit(token)
        self._tokens.clear()

    def rollback(self) -> None:
        for token in reversed(self._tokens):
            self.cache.rollback(token)
        self._tokens.clear()


class QueryObserver:
    """
    A view that follows one query whose parameters change over time.

    Only the result for the most recently requested parameters is kept;
    an older request still in flight is cancelled, and until the new
    result arrives the observer keeps exposing the previous data.
    """

    def __init__(self, query: Callable[[Any], Awaitable[Any]]):
        self._query = query
        self._task: Optional[asyncio.Task] = None
        self.params: Any = None
        self.data: Any = None
        self.error: Optional[ApiError] = None

    @property
    def is_fetching(self) -> bool:
        return self._task is not None and not self._task.done()

    async def set_params(self, params: Any) -> Any:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        task = asyncio.create_task(self._load(params))
        self._task = task
        try:
            return await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if self._task is task or (current is not None and current.cancelling()):
                raise
            return self.data

    async def _load(self, params: Any) -> Any:
        try:
            data = await self._query(params)
        except ApiError as e:
            self.error = e
            raise
        self.params = params
        self.data = data
        self.error = None
        return data
