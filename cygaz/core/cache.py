"""
cygaz/core/cache.py
═══════════════════════════════════════════════════════════════════════════
Per-key snapshot store.
  • One slot per PetroleumType, created up front, never added or removed
  • Each slot has its own threading lock → keys never block each other
  • Only the refresh coordinator calls put() / the refresh flag methods
  • Routers call get() → immutable snapshot, never a partial one
  • Failed refreshes never call put() → stale data stays valid
═══════════════════════════════════════════════════════════════════════════
"""

import threading
import time
from typing import Optional

from cygaz.core.models import PetroleumType, PriceSnapshot


def now_ms() -> int:
    return int(time.time() * 1000)


class _Slot:
    __slots__ = ("lock", "snapshot", "last_attempt", "last_error", "refreshing")

    def __init__(self):
        self.lock = threading.Lock()
        self.snapshot: Optional[PriceSnapshot] = None
        self.last_attempt: Optional[int] = None
        self.last_error: Optional[str] = None
        self.refreshing = False


class SnapshotStore:
    def __init__(self):
        self._slots: dict[PetroleumType, _Slot] = {pt: _Slot() for pt in PetroleumType}

    def _slot(self, key: PetroleumType) -> _Slot:
        return self._slots[PetroleumType(key)]

    def get(self, key: PetroleumType) -> Optional[PriceSnapshot]:
        """Current snapshot, or None if the key has never been fetched."""
        slot = self._slot(key)
        with slot.lock:
            return slot.snapshot

    def put(self, key: PetroleumType, snapshot: PriceSnapshot) -> None:
        """Atomically replace the snapshot. Called by the refresh coordinator only."""
        slot = self._slot(key)
        with slot.lock:
            slot.snapshot = snapshot
            slot.last_error = None

    def try_begin_refresh(self, key: PetroleumType) -> bool:
        """Test-and-set the in-progress flag. False → a refresh is already running."""
        slot = self._slot(key)
        with slot.lock:
            if slot.refreshing:
                return False
            slot.refreshing = True
            slot.last_attempt = now_ms()
            return True

    def end_refresh(self, key: PetroleumType) -> None:
        slot = self._slot(key)
        with slot.lock:
            slot.refreshing = False

    def is_refreshing(self, key: PetroleumType) -> bool:
        slot = self._slot(key)
        with slot.lock:
            return slot.refreshing

    def record_failure(self, key: PetroleumType, error: str) -> None:
        slot = self._slot(key)
        with slot.lock:
            slot.last_error = error

    def summary(self) -> dict:
        """Metadata only, safe to expose in /health."""
        now = now_ms()
        out = {}
        for key, slot in self._slots.items():
            with slot.lock:
                snap = slot.snapshot
                out[key.name.lower()] = {
                    "petroleum_type": int(key),
                    "ready":          snap is not None,
                    "age_s":          round((now - snap.updated_at) / 1000, 1) if snap else None,
                    "stations":       len(snap.stations) if snap else 0,
                    "refreshing":     slot.refreshing,
                    "last_attempt":   slot.last_attempt,
                    "last_error":     slot.last_error,
                }
        return out
