"""
cygaz/core/scheduler.py
═══════════════════════════════════════════════════════════════════════════════
Fixed-interval background scheduler:

  1. ONE loop per instance (guarded by _running flag)
  2. Each tick fans out one refresh per petroleum type, without waiting
  3. Type still refreshing from an earlier tick → skipped, never queued
  4. Failed refresh → coordinator keeps last valid snapshot
  5. Warm-up tick on start so the cache fills before the first interval
  6. stop() ends the loop between ticks; in-flight fetches are left to the
     coordinator's shutdown()
═══════════════════════════════════════════════════════════════════════════════
"""

import asyncio
import logging
from typing import Optional

from cygaz.core.models import PetroleumType
from cygaz.core.refresh import RefreshCoordinator

log = logging.getLogger("scheduler")


class Scheduler:
    def __init__(self, coordinator: RefreshCoordinator, interval_s: float, warm_up: bool = True):
        self.coordinator = coordinator
        self.interval_s  = interval_s
        self.warm_up     = warm_up
        self.ticks       = 0
        self._running    = False
        self._stop       = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    def tick(self) -> list[asyncio.Task]:
        """Spawn a refresh for every type. Returns the tasks actually started."""
        self.ticks += 1
        started, skipped = [], []
        for key in PetroleumType:
            task = self.coordinator.spawn(key)
            if task is None:
                skipped.append(key.name)
            else:
                started.append(task)
        if skipped:
            log.warning(f"Tick {self.ticks}: still refreshing {skipped} — skipped")
        log.info(f"Tick {self.ticks}: {len(started)} refresh(es) started")
        return started

    def _safe_tick(self) -> None:
        try:
            self.tick()
        except Exception as ex:
            log.error(f"Tick error (continuing): {ex}")

    async def run(self) -> None:
        """
        Runs until stop(). Never starts a second loop on the same instance.
        """
        if self._running:
            log.warning("Scheduler already running — ignoring duplicate start")
            return
        self._running = True
        self._stop.clear()
        log.info(f"Scheduler started (every {self.interval_s:g}s)")
        try:
            if self.warm_up:
                log.info("Warming up cache")
                self._safe_tick()
            while not self._stop.is_set():
                try:
                    await asyncio.wait_for(self._stop.wait(), timeout=self.interval_s)
                except asyncio.TimeoutError:
                    self._safe_tick()
        finally:
            self._running = False
            log.info("Scheduler stopped")

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self.run())
        return self._task

    async def stop(self) -> None:
        self._stop.set()
        if self._task is not None:
            await self._task
            self._task = None

    @property
    def running(self) -> bool:
        return self._running
