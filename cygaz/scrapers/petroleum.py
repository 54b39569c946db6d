"""
cygaz/scrapers/petroleum.py
═══════════════════════════════════════════════════════════════════════════════
Ministry of Energy "Petroleum Prices" e-form scraper.

Two requests per petroleum type, on one cookie session:
  GET  PetroleumPrices  → read __RequestVerificationToken from the form
  POST PetroleumPrices  → form: token, StationCityEnum=All, PetroleumType=<id>,
                          StationDistrict="" → HTML table of every station

Table #petroleumPriceDetailsFootable, one <tr> per station:
  brand (td.isOffLine when the station has no current price) | company |
  address (<a href="...?coordinates=lat,lon">) | area | price

Raises FetchError for transport/HTTP problems and ParseError when the page
no longer has the expected shape. Coordinates are kept as the upstream
strings; only the price is parsed.
═══════════════════════════════════════════════════════════════════════════════
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Optional

import httpx
from bs4 import BeautifulSoup

from cygaz.core.config import (
    OFFLINE_CLASS,
    PETROLEUM_PRICES_ENDPOINT,
    PRICES_SELECTOR,
    TOKEN_FIELD,
    TOKEN_SELECTOR,
)
from cygaz.core.errors import FetchError, ParseError
from cygaz.core.http_client import new_session
from cygaz.core.models import PetroleumType, StationRecord, resolve_district

log = logging.getLogger("petroleum")

_CELLS_PER_ROW = 5


# ── Parsing ───────────────────────────────────────────────────────────────────

def extract_token(html: str) -> str:
    soup = BeautifulSoup(html, "html.parser")
    el = soup.select_one(TOKEN_SELECTOR)
    token = el.get("value") if el else None
    if not token:
        raise ParseError(f"{TOKEN_FIELD} not found on form page")
    return token


def _split_coordinates(raw: str) -> tuple[str, str]:
    parts = [p.strip() for p in raw.split(",")]
    if len(parts) == 1:
        parts = raw.split()
    if len(parts) != 2 or not all(parts):
        raise ParseError(f"Unrecognised coordinates {raw!r}")
    return parts[0], parts[1]


def _parse_address(cell, base_url: str) -> tuple[str, str, str]:
    a = cell.find("a")
    if a is None or not a.get("href"):
        raise ParseError("Address cell without map link")
    url = httpx.URL(base_url).join(a["href"])
    coordinates = url.params.get("coordinates")
    if coordinates is None:
        raise ParseError(f"Map link without coordinates: {a['href']!r}")
    lat, lon = _split_coordinates(coordinates)
    return a.get_text(strip=True), lat, lon


def _parse_price(text: str) -> Decimal:
    try:
        value = Decimal(text.strip().replace(",", "."))
    except InvalidOperation:
        raise ParseError(f"Unparsable price {text!r}") from None
    # Decimal happily parses "NaN" and "Infinity"; neither is a price.
    if not value.is_finite():
        raise ParseError(f"Unparsable price {text!r}")
    return value


def parse_stations(html: str, base_url: str = PETROLEUM_PRICES_ENDPOINT) -> list[StationRecord]:
    """Station rows in page order. Empty tbody → empty list; missing table → ParseError."""
    soup = BeautifulSoup(html, "html.parser")
    table = soup.select_one(PRICES_SELECTOR)
    if table is None:
        raise ParseError(f"Prices table {PRICES_SELECTOR} not found")

    stations = []
    for tr in table.select("tbody tr"):
        tds = tr.find_all("td", recursive=False)
        if len(tds) <= 1:
            # "no results" placeholder row spans the whole table
            continue
        if len(tds) < _CELLS_PER_ROW:
            raise ParseError(f"Expected {_CELLS_PER_ROW} cells per row, got {len(tds)}")

        brand, company, address, area, price = tds[:_CELLS_PER_ROW]
        address_txt, lat, lon = _parse_address(address, base_url)
        area_txt = area.get_text(strip=True)
        stations.append(StationRecord(
            brand=brand.get_text(strip=True),
            company=company.get_text(strip=True),
            address=address_txt,
            latitude=lat,
            longitude=lon,
            area=area_txt,
            price=_parse_price(price.get_text()),
            offline=OFFLINE_CLASS in (brand.get("class") or []),
            district=resolve_district(area_txt, address_txt),
        ))
    return stations


# ── Fetch ─────────────────────────────────────────────────────────────────────

async def fetch_prices(
    petroleum_type: PetroleumType,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> list[StationRecord]:
    """Fetch and parse every station price for one petroleum type."""
    petroleum_type = PetroleumType(petroleum_type)
    async with new_session(transport=transport) as client:
        try:
            r = await client.get(PETROLEUM_PRICES_ENDPOINT)
            r.raise_for_status()
            token = extract_token(r.text)

            form = {
                TOKEN_FIELD:               token,
                "Entity.StationCityEnum":  "All",
                "Entity.PetroleumType":    str(int(petroleum_type)),
                "Entity.StationDistrict":  "",
            }
            r = await client.post(PETROLEUM_PRICES_ENDPOINT, data=form)
            r.raise_for_status()
        except httpx.HTTPStatusError as ex:
            raise FetchError(f"HTTP {ex.response.status_code} from {ex.request.url}") from ex
        except httpx.HTTPError as ex:
            raise FetchError(f"{type(ex).__name__}: {ex}") from ex

    stations = parse_stations(r.text, base_url=str(r.url))
    log.debug(f"{petroleum_type.name}: parsed {len(stations)} stations")
    return stations
