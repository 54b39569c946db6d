"""
cygaz/core/models.py
Typed shapes shared by the scraper, the cache and the routers.
Everything here is immutable: a snapshot is replaced, never edited.
"""

import unicodedata
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import IntEnum
from typing import Optional

from cygaz.core.config import CYPRUS_TZ
from cygaz.core.errors import InvalidPetroleumType


class PetroleumType(IntEnum):
    UNLEAD_95   = 1
    UNLEAD_98   = 2
    DIESEL_HEAT = 3
    DIESEL_AUTO = 4
    KEROSENE    = 5

    @property
    def label(self) -> str:
        return _LABELS[self]

    @classmethod
    def parse(cls, raw) -> "PetroleumType":
        """Path segment → member. Anything but "1".."5" raises InvalidPetroleumType."""
        text = str(raw).strip()
        if not (text.isascii() and text.isdigit()) or text.startswith("0"):
            raise InvalidPetroleumType(raw)
        try:
            return cls(int(text))
        except ValueError:
            raise InvalidPetroleumType(raw) from None


_LABELS = {
    PetroleumType.UNLEAD_95:   "Unleaded 95",
    PetroleumType.UNLEAD_98:   "Unleaded 98",
    PetroleumType.DIESEL_HEAT: "Heating Diesel",
    PetroleumType.DIESEL_AUTO: "Automotive Diesel",
    PetroleumType.KEROSENE:    "Kerosene",
}


# ── Districts ─────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class District:
    name: str
    name_el: str

    def to_dict(self) -> dict:
        return {"name": self.name, "name_el": self.name_el}


DISTRICTS: tuple[District, ...] = (
    District("Famagusta", "Αμμόχωστος"),
    District("Larnaca",   "Λάρνακα"),
    District("Limassol",  "Λεμεσός"),
    District("Nicosia",   "Λευκωσία"),
    District("Paphos",    "Πάφος"),
)
UNKNOWN_DISTRICT = District("Unknown", "Αγνωστο")


def _fold(text: str) -> str:
    # Greek upstream text is inconsistently accented ("ΛΕΥΚΩΣΙΑ" vs "Λευκωσία")
    decomposed = unicodedata.normalize("NFD", text or "")
    return "".join(c for c in decomposed if not unicodedata.combining(c)).casefold()


def resolve_district(*texts: Optional[str]) -> District:
    """First district whose English or Greek name occurs in any of ``texts``."""
    folded = [_fold(t) for t in texts if t]
    for district in DISTRICTS:
        needles = (_fold(district.name), _fold(district.name_el))
        if any(n in hay for hay in folded for n in needles):
            return district
    return UNKNOWN_DISTRICT


# ── Stations & snapshots ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class StationRecord:
    brand: str
    company: str
    address: str
    latitude: str
    longitude: str
    area: str
    price: Decimal
    offline: bool = False
    district: District = UNKNOWN_DISTRICT

    def to_dict(self) -> dict:
        return {
            "brand":     self.brand,
            "offline":   self.offline,
            "company":   self.company,
            "address":   self.address,
            "latitude":  self.latitude,
            "longitude": self.longitude,
            "area":      self.area,
            "price":     float(self.price),
            "district":  self.district.to_dict(),
        }


def format_updated_at(updated_at_ms: int) -> str:
    dt = datetime.fromtimestamp(updated_at_ms / 1000, tz=timezone.utc).astimezone(CYPRUS_TZ)
    return dt.strftime("%Y-%m-%d %H:%M:%S %Z")


@dataclass(frozen=True)
class PriceSnapshot:
    updated_at: int
    petroleum_type: PetroleumType
    stations: tuple[StationRecord, ...] = field(default_factory=tuple)

    def __post_init__(self):
        # Callers may hand in a list; freeze it so readers can never mutate it.
        if not isinstance(self.stations, tuple):
            object.__setattr__(self, "stations", tuple(self.stations))

    def to_dict(self) -> dict:
        return {
            "updated_at":     self.updated_at,
            "updated_at_str": format_updated_at(self.updated_at),
            "petroleum_type": int(self.petroleum_type),
            "stations":       [s.to_dict() for s in self.stations],
        }


@dataclass(frozen=True)
class ColdCache:
    """No successful fetch yet for this key; the caller should retry shortly."""
    petroleum_type: PetroleumType
    retry_after_s: int
    refreshing: bool = True
