# rooms_web/query_client.py
"""
Client-side fetch cache for the rooms pages.

A ``QueryClient`` is created once per web application instance (see
``rooms_web.main``) and closed on shutdown. It keeps one ``QueryState`` per
query key, runs fetches as asyncio tasks, shares an in-flight fetch between
callers of the same key, and ignores results from fetches that a newer
``refetch`` superseded.
"""

import asyncio
from collections import OrderedDict
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Hashable, Optional

from common.logging_config import get_logger
from rooms_service.schemas import RoomErrorKind

logger = get_logger(__name__)

QueryFn = Callable[[], Awaitable[Any]]

DEFAULT_MAX_ENTRIES = 100


class QueryStatus(str, Enum):
    LOADING = "loading"
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class QueryState:
    """
    Snapshot of one query.

    ``data`` survives a refetch while it is LOADING and is replaced once the
    fetch settles; a FAILURE carries no data.
    """
    status: QueryStatus = QueryStatus.LOADING
    data: Any = None
    error: Optional[str] = None
    error_kind: Optional[RoomErrorKind] = None
    fetch_count: int = 0
    updated_at: Optional[datetime] = None


class QueryClientClosed(RuntimeError):
    """Raised when a fetch is requested from a closed QueryClient."""


@dataclass
class _Query:
    fn: QueryFn
    error_message: Optional[str]
    state: QueryState
    task: Optional["asyncio.Task[None]"] = None
    generation: int = 0


class QueryClient:
    """
    Keyed cache of fetch results with an explicit lifecycle.

    Fetch functions return a result object exposing ``ok``, ``data``,
    ``error`` and ``error_kind`` (``RoomListResult`` / ``RoomResult``).

    At most ``max_entries`` queries are kept. When a new key pushes the
    cache over that limit, the least recently fetched settled queries are
    dropped; queries with a fetch in flight are never dropped.
    """

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self._queries: "OrderedDict[Hashable, _Query]" = OrderedDict()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def __aenter__(self) -> "QueryClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def fetch(
        self,
        key: Hashable,
        fn: QueryFn,
        error_message: Optional[str] = None,
    ) -> "asyncio.Task[None]":
        """
        Start fetching ``key`` unless a fetch for it is already in flight.

        Parameters
        ----------
        key : Hashable
            Query key, e.g. ``("rooms",)`` or ``("room", room_id)``.
        fn : QueryFn
            Coroutine function producing the result.
        error_message : Optional[str]
            Message recorded when ``fn`` raises instead of returning a result.

        Returns
        -------
        asyncio.Task
            The task that settles the query.
        """
        self._ensure_open()
        query = self._queries.get(key)
        if query is None:
            query = _Query(fn=fn, error_message=error_message, state=QueryState())
            self._queries[key] = query
            self._evict(keep=key)
        else:
            self._queries.move_to_end(key)
            query.fn = fn
            query.error_message = error_message

        if query.task is not None and not query.task.done():
            return query.task
        return self._start(key, query)

    def refetch(self, key: Hashable) -> "asyncio.Task[None]":
        """
        Re-issue the last fetch registered for ``key``.

        Always starts a new fetch; the newest fetch decides the final state.

        Raises
        ------
        KeyError
            If ``key`` was never fetched.
        """
        self._ensure_open()
        query = self._queries.get(key)
        if query is None:
            raise KeyError(key)
        self._queries.move_to_end(key)
        return self._start(key, query)

    def get_state(self, key: Hashable) -> Optional[QueryState]:
        query = self._queries.get(key)
        return query.state if query is not None else None

    async def wait(self, key: Hashable, timeout: Optional[float] = None) -> QueryState:
        """
        Wait until the current fetch for ``key`` settles or ``timeout`` elapses.

        A refetch issued while waiting is followed. The fetch keeps running
        after a timeout. If the query is evicted while waiting, its last
        known state is returned.

        Returns
        -------
        QueryState
            The state at the time waiting stopped.
        """
        loop = asyncio.get_running_loop()
        deadline = None if timeout is None else loop.time() + timeout
        query = self._queries.get(key)
        if query is None:
            raise KeyError(key)
        while True:
            query = self._queries.get(key, query)
            task = query.task
            if task is None or task.done():
                return query.state
            remaining = None if deadline is None else deadline - loop.time()
            if remaining is not None and remaining <= 0:
                return query.state
            await asyncio.wait({task}, timeout=remaining)

    async def close(self) -> None:
        """Cancel in-flight fetches and drop all cached state."""
        if self._closed:
            return
        self._closed = True
        pending = [q.task for q in self._queries.values() if q.task is not None and not q.task.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        self._queries.clear()
        logger.debug("query_client_closed", cancelled=len(pending))

    def _ensure_open(self) -> None:
        if self._closed:
            raise QueryClientClosed("QueryClient is closed")

    def _evict(self, keep: Hashable) -> None:
        excess = len(self._queries) - self.max_entries
        if excess <= 0:
            return
        stale = [
            key
            for key, query in self._queries.items()
            if key != keep and (query.task is None or query.task.done())
        ][:excess]
        for key in stale:
            del self._queries[key]
        logger.debug("queries_evicted", count=len(stale), size=len(self._queries))

    def _start(self, key: Hashable, query: _Query) -> "asyncio.Task[None]":
        query.generation += 1
        query.state = replace(
            query.state,
            status=QueryStatus.LOADING,
            fetch_count=query.state.fetch_count + 1,
        )
        query.task = asyncio.create_task(self._run(key, query, query.generation))
        return query.task

    async def _run(self, key: Hashable, query: _Query, generation: int) -> None:
        try:
            result = await query.fn()
        except Exception as exc:
            logger.warning("query_raised", key=repr(key), error=repr(exc))
            settled = self._failure(
                query.state,
                query.error_message or str(exc) or type(exc).__name__,
                RoomErrorKind.STORE_UNAVAILABLE,
            )
        else:
            if result.ok:
                settled = replace(
                    query.state,
                    status=QueryStatus.SUCCESS,
                    data=result.data,
                    error=None,
                    error_kind=None,
                    updated_at=datetime.now(timezone.utc),
                )
            else:
                settled = self._failure(query.state, result.error, result.error_kind)

        if generation != query.generation:
            # superseded by a newer fetch
            logger.debug("query_result_dropped", key=repr(key), generation=generation)
            return
        query.state = settled

    @staticmethod
    def _failure(
        state: QueryState,
        error: str,
        error_kind: Optional[RoomErrorKind],
    ) -> QueryState:
        return replace(
            state,
            status=QueryStatus.FAILURE,
            data=None,
            error=error,
            error_kind=error_kind,
            updated_at=datetime.now(timezone.utc),
        )
