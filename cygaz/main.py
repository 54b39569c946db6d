"""
cygaz/main.py : Cyprus fuel prices API
Startup: builds the snapshot store, warms the cache, launches the scheduler.
Price reads are cache-only; the only upstream calls come from the scheduler,
cold reads and PATCH /prices/{type}/refresh.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from cygaz.core.cache import SnapshotStore
from cygaz.core.config import (
    CORS_ORIGINS,
    LOG_LEVEL,
    REFRESH_INTERVAL_S,
    RETRY_AFTER_S,
    TIMEOUT_S,
    VERSION,
    WARM_UP,
)
from cygaz.core.gateway import PriceGateway
from cygaz.core.refresh import Fetcher, RefreshCoordinator
from cygaz.core.scheduler import Scheduler
from cygaz.routers import prices
from cygaz.scrapers.petroleum import fetch_prices

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logging.getLogger("httpx").setLevel(logging.WARNING)
log = logging.getLogger("main")


def create_app(
    fetcher: Optional[Fetcher] = None,
    start_scheduler: bool = True,
    interval_s: float = REFRESH_INTERVAL_S,
    timeout_s: float = TIMEOUT_S,
    retry_after_s: int = RETRY_AFTER_S,
    warm_up: bool = WARM_UP,
) -> FastAPI:
    store       = SnapshotStore()
    coordinator = RefreshCoordinator(store, fetcher or fetch_prices, timeout_s)
    gateway     = PriceGateway(store, coordinator, retry_after_s)
    scheduler   = Scheduler(coordinator, interval_s, warm_up=warm_up)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log.info(f"🚀 cygaz {VERSION} starting...")
        if start_scheduler:
            scheduler.start()
        yield
        log.info("🛑 Shutting down...")
        await scheduler.stop()
        await coordinator.shutdown()

    app = FastAPI(
        title="cygaz",
        description=(
            "Cyprus fuel prices, scraped from the Ministry of Energy petroleum "
            "prices e-form and served from an in-memory cache."
        ),
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.store       = store
    app.state.coordinator = coordinator
    app.state.gateway     = gateway
    app.state.scheduler   = scheduler

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_methods=["GET", "PATCH"],
        allow_headers=["*"],
    )

    app.include_router(prices.router)

    @app.get("/version", response_class=PlainTextResponse, tags=["meta"])
    async def version():
        return VERSION

    @app.get("/health", tags=["meta"])
    async def health():
        """Per-type cache age, station count and last refresh error."""
        summary = store.summary()
        warm = any(v["ready"] for v in summary.values())
        return {
            "status":            "healthy" if warm else "warming_up",
            "version":           VERSION,
            "scheduler_running": scheduler.running,
            "scheduler_ticks":   scheduler.ticks,
            "refresh_in_flight": coordinator.in_flight,
            "prices":            summary,
        }

    return app


app = create_app()
