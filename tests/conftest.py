"""Shared fixtures: repo root on sys.path, station factory and a scriptable fetcher.

The fetcher stands in for the e-form scraper so the cache can be exercised
without network access. Per petroleum type it can return a station list,
raise an exception, or block on an ``asyncio.Event`` until the test releases it.
"""

from __future__ import annotations

import asyncio
import sys
from decimal import Decimal
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
root_str = str(ROOT)
if root_str not in sys.path:
    sys.path.insert(0, root_str)

from cygaz.core.cache import SnapshotStore  # noqa: E402
from cygaz.core.models import District, PetroleumType, StationRecord  # noqa: E402
from cygaz.core.refresh import RefreshCoordinator  # noqa: E402


def make_station(brand: str = "Brand_1", price: str = "1.000", **kw) -> StationRecord:
    fields = dict(
        brand=brand,
        company="Company_1",
        address="Makariou 1",
        latitude="35.1856",
        longitude="33.3823",
        area="Strovolos",
        price=Decimal(price),
        offline=False,
        district=District("Nicosia", "Λευκωσία"),
    )
    fields.update(kw)
    return StationRecord(**fields)


class FakeFetcher:
    def __init__(self):
        self.results: dict = {}
        self.gates: dict[PetroleumType, asyncio.Event] = {}
        self.delay = 0.0
        self.calls: list[PetroleumType] = []

    def hold(self, key: PetroleumType) -> asyncio.Event:
        gate = asyncio.Event()
        self.gates[key] = gate
        return gate

    async def __call__(self, key: PetroleumType):
        self.calls.append(key)
        if self.delay:
            await asyncio.sleep(self.delay)
        gate = self.gates.get(key)
        if gate is not None:
            await gate.wait()
        result = self.results.get(key, [])
        if isinstance(result, BaseException):
            raise result
        return list(result)


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def store() -> SnapshotStore:
    return SnapshotStore()


@pytest.fixture
def coordinator(store, fetcher) -> RefreshCoordinator:
    return RefreshCoordinator(store, fetcher, timeout_s=5.0)
