"""End-to-end tests of the HTTP surface, driven in-process through httpx."""

import httpx
import pytest

from cygaz.core.config import VERSION
from cygaz.core.errors import FetchError
from cygaz.core.models import PetroleumType
from cygaz.main import create_app

from conftest import make_station


@pytest.fixture
def app(fetcher):
    return create_app(fetcher=fetcher, start_scheduler=False, retry_after_s=3)


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    await app.state.coordinator.shutdown()


async def test_version_is_plain_text(client) -> None:
    r = await client.get("/version")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/plain")
    assert r.text == VERSION


async def test_cold_cache_answers_202_with_retry_hint(client) -> None:
    r = await client.get("/prices/4")
    assert r.status_code == 202
    assert r.headers["retry-after"] == "3"
    body = r.json()
    assert body["status"] == "warming_up"
    assert body["petroleum_type"] == 4


async def test_scheduler_tick_then_read(app, client, fetcher) -> None:
    fetcher.results[PetroleumType.DIESEL_AUTO] = [make_station("Brand_1", "1.000")]
    app.state.scheduler.tick()
    await app.state.coordinator.wait_idle()

    r = await client.get("/prices/4")
    assert r.status_code == 200
    body = r.json()
    assert body["petroleum_type"] == 4
    assert isinstance(body["updated_at"], int)
    assert body["updated_at_str"]
    station = body["stations"][0]
    assert station["brand"] == "Brand_1"
    assert station["price"] == 1.0
    assert station["latitude"] == "35.1856"
    assert station["longitude"] == "33.3823"
    assert station["offline"] is False
    assert station["district"] == {"name": "Nicosia", "name_el": "Λευκωσία"}


async def test_double_patch_before_fetch_returns(client, fetcher, app) -> None:
    gate = fetcher.hold(PetroleumType.UNLEAD_95)

    first = await client.patch("/prices/1/refresh")
    second = await client.patch("/prices/1/refresh")

    assert first.status_code == 202
    assert first.json() == {"status": "accepted", "petroleum_type": 1}
    assert second.status_code == 200
    assert second.json() == {"status": "already_running", "petroleum_type": 1}

    gate.set()
    await app.state.coordinator.wait_idle()
    assert fetcher.calls == [PetroleumType.UNLEAD_95]


async def test_failed_refresh_still_serves_stale_snapshot(client, fetcher, app) -> None:
    key = PetroleumType.UNLEAD_98
    fetcher.results[key] = [make_station("Brand_2", "1.459")]
    await client.patch("/prices/2/refresh")
    await app.state.coordinator.wait_idle()
    before = (await client.get("/prices/2")).json()

    fetcher.results[key] = FetchError("HTTP 500")
    await client.patch("/prices/2/refresh")
    await app.state.coordinator.wait_idle()

    r = await client.get("/prices/2")
    assert r.status_code == 200
    assert r.json() == before


async def test_repeated_reads_are_identical(client, fetcher, app) -> None:
    fetcher.results[PetroleumType.KEROSENE] = [make_station("A"), make_station("B", "0.990")]
    await client.patch("/prices/5/refresh")
    await app.state.coordinator.wait_idle()

    first = await client.get("/prices/5")
    second = await client.get("/prices/5")
    assert first.content == second.content
    assert [s["brand"] for s in first.json()["stations"]] == ["A", "B"]


@pytest.mark.parametrize("segment", ["0", "6", "-1", "abc", "1.5", "01", "٣"])
async def test_invalid_petroleum_type_is_404(client, segment) -> None:
    assert (await client.get(f"/prices/{segment}")).status_code == 404
    assert (await client.patch(f"/prices/{segment}/refresh")).status_code == 404


async def test_type_index(client) -> None:
    r = await client.get("/prices")
    assert r.status_code == 200
    assert [t["id"] for t in r.json()] == [1, 2, 3, 4, 5]


async def test_health_reports_warming_up_then_healthy(client, app) -> None:
    r = await client.get("/health")
    assert r.json()["status"] == "warming_up"

    await client.patch("/prices/3/refresh")
    await app.state.coordinator.wait_idle()

    body = (await client.get("/health")).json()
    assert body["status"] == "healthy"
    assert body["prices"]["diesel_heat"]["ready"] is True
    assert body["prices"]["unlead_95"]["ready"] is False
