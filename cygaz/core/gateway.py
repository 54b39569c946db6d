"""
cygaz/core/gateway.py
Read/refresh contract used by the routers.
  • get_prices()    → snapshot straight from the store, or ColdCache
  • force_refresh() → ACCEPTED / ALREADY_RUNNING, never waits for the fetch
"""

import logging
from typing import Union

from cygaz.core.cache import SnapshotStore
from cygaz.core.models import ColdCache, PetroleumType, PriceSnapshot
from cygaz.core.refresh import RefreshCoordinator, RefreshOutcome

log = logging.getLogger("gateway")


class PriceGateway:
    def __init__(self, store: SnapshotStore, coordinator: RefreshCoordinator, retry_after_s: int):
        self.store         = store
        self.coordinator   = coordinator
        self.retry_after_s = retry_after_s

    def get_prices(self, key: PetroleumType) -> Union[PriceSnapshot, ColdCache]:
        key = PetroleumType(key)
        snapshot = self.store.get(key)
        if snapshot is not None:
            return snapshot
        # Cold: kick a fetch (unless one is already running) and tell the caller to come back.
        if self.coordinator.spawn(key) is not None:
            log.info(f"{key.name}: cold read — refresh started")
        return ColdCache(petroleum_type=key, retry_after_s=self.retry_after_s, refreshing=True)

    def force_refresh(self, key: PetroleumType) -> RefreshOutcome:
        key = PetroleumType(key)
        if self.coordinator.spawn(key) is None:
            log.info(f"{key.name}: manual refresh ignored — already running")
            return RefreshOutcome.ALREADY_RUNNING
        log.info(f"{key.name}: manual refresh accepted")
        return RefreshOutcome.ACCEPTED
