"""
cygaz/core/refresh.py
═══════════════════════════════════════════════════════════════════════════════
Refresh coordinator, the only writer of the snapshot store.

  1. At most ONE refresh in flight per petroleum type (store flag, test-and-set)
  2. Different types refresh fully in parallel
  3. Fetch bounded by TIMEOUT → a timeout is just another failed attempt
  4. Failed fetch → store untouched, last good snapshot stays authoritative
  5. No retries here: the next scheduler tick or a manual PATCH retries
═══════════════════════════════════════════════════════════════════════════════
"""

import asyncio
import enum
import logging
from typing import Awaitable, Callable, Optional

from cygaz.core.cache import SnapshotStore, now_ms
from cygaz.core.errors import FetchError
from cygaz.core.models import PetroleumType, PriceSnapshot, StationRecord

log = logging.getLogger("refresh")

Fetcher = Callable[[PetroleumType], Awaitable[list[StationRecord]]]


class RefreshOutcome(str, enum.Enum):
    REFRESHED       = "refreshed"
    FAILED          = "failed"
    ACCEPTED        = "accepted"
    ALREADY_RUNNING = "already_running"


class RefreshCoordinator:
    def __init__(self, store: SnapshotStore, fetcher: Fetcher, timeout_s: float):
        self.store      = store
        self._fetch     = fetcher
        self._timeout_s = timeout_s
        self._tasks: set[asyncio.Task] = set()
        self._unstarted: set[asyncio.Task] = set()

    async def refresh(self, key: PetroleumType) -> RefreshOutcome:
        """Run one refresh attempt to completion. Never raises for fetch failures."""
        key = PetroleumType(key)
        if not self.store.try_begin_refresh(key):
            log.info(f"{key.name}: refresh already running — skipped")
            return RefreshOutcome.ALREADY_RUNNING
        return await self._run(key)

    def spawn(self, key: PetroleumType) -> Optional[asyncio.Task]:
        """
        Fire-and-forget refresh. The in-progress flag is claimed before this
        returns, so the caller knows right away whether a task was started.
        Returns None when a refresh for ``key`` is already running.
        """
        key = PetroleumType(key)
        if not self.store.try_begin_refresh(key):
            return None
        try:
            task = asyncio.get_running_loop().create_task(self._run(key))
        except RuntimeError:
            self.store.end_refresh(key)
            raise
        self._tasks.add(task)
        self._unstarted.add(task)
        task.add_done_callback(lambda t: self._on_done(key, t))
        return task

    def _on_done(self, key: PetroleumType, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        # Cancelled before its first step: _run's finally never executed.
        if task in self._unstarted:
            self._unstarted.discard(task)
            self.store.end_refresh(key)

    async def _run(self, key: PetroleumType) -> RefreshOutcome:
        self._unstarted.discard(asyncio.current_task())
        try:
            log.debug(f"{key.name}: refreshing prices")
            try:
                stations = await asyncio.wait_for(self._fetch(key), timeout=self._timeout_s)
            except asyncio.TimeoutError:
                return self._fail(key, f"timed out after {self._timeout_s:g}s")
            except FetchError as ex:
                return self._fail(key, f"{type(ex).__name__}: {ex}")
            except Exception as ex:
                log.exception(f"{key.name}: unexpected fetcher error")
                return self._fail(key, f"{type(ex).__name__}: {ex}")

            if stations is None:
                return self._fail(key, "fetcher returned no station list")

            previous = self.store.get(key)
            updated_at = now_ms()
            if previous is not None and previous.updated_at > updated_at:
                # wall clock stepped back; never serve an older timestamp
                updated_at = previous.updated_at
            snapshot = PriceSnapshot(
                updated_at=updated_at,
                petroleum_type=key,
                stations=tuple(stations),
            )
            self.store.put(key, snapshot)
            log.info(f"{key.name}: {len(snapshot.stations)} station prices cached")
            return RefreshOutcome.REFRESHED
        finally:
            self.store.end_refresh(key)

    def _fail(self, key: PetroleumType, reason: str) -> RefreshOutcome:
        log.error(f"{key.name}: refresh failed ({reason}) — keeping last snapshot")
        self.store.record_failure(key, reason)
        return RefreshOutcome.FAILED

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def wait_idle(self) -> None:
        """Wait for every spawned refresh to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def shutdown(self) -> None:
        """Abandon in-flight refreshes; their results are never written."""
        tasks = list(self._tasks)
        for t in tasks:
            t.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            log.info(f"Cancelled {len(tasks)} in-flight refresh(es)")
