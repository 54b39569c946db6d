"""
cygaz/routers/prices.py
Endpoints:
  GET   /prices                          → the five petroleum types
  GET   /prices/{petroleum_type}         → cached snapshot (200) or warming up (202)
  PATCH /prices/{petroleum_type}/refresh → start a refresh, don't wait for it

Reads come from the in-memory store only. A cold key answers 202 with a
Retry-After hint while the first fetch runs in the background.
"""

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse

from cygaz.core.errors import InvalidPetroleumType
from cygaz.core.gateway import PriceGateway
from cygaz.core.models import ColdCache, PetroleumType
from cygaz.core.refresh import RefreshOutcome

router = APIRouter(prefix="/prices", tags=["prices"])


def _gateway(request: Request) -> PriceGateway:
    return request.app.state.gateway


def _petroleum_type(raw: str) -> PetroleumType:
    try:
        return PetroleumType.parse(raw)
    except InvalidPetroleumType as ex:
        raise HTTPException(404, detail=str(ex))


@router.get("")
async def list_types():
    return [
        {"id": int(pt), "name": pt.label, "path": f"/prices/{int(pt)}"}
        for pt in PetroleumType
    ]


@router.get("/{petroleum_type}")
async def get_prices(petroleum_type: str, request: Request):
    key    = _petroleum_type(petroleum_type)
    result = _gateway(request).get_prices(key)
    if isinstance(result, ColdCache):
        return JSONResponse(
            status_code=202,
            headers={"Retry-After": str(result.retry_after_s)},
            content={
                "status":         "warming_up",
                "petroleum_type": int(key),
                "refreshing":     result.refreshing,
                "retry_after":    result.retry_after_s,
            },
        )
    return result.to_dict()


@router.patch("/{petroleum_type}/refresh")
async def refresh_prices(petroleum_type: str, request: Request):
    key     = _petroleum_type(petroleum_type)
    outcome = _gateway(request).force_refresh(key)
    status  = 202 if outcome is RefreshOutcome.ACCEPTED else 200
    return JSONResponse(
        status_code=status,
        content={"status": outcome.value, "petroleum_type": int(key)},
    )
