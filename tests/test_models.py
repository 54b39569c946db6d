"""Tests for petroleum types, district resolution and JSON shapes."""

from decimal import Decimal

import pytest

from cygaz.core.errors import InvalidPetroleumType
from cygaz.core.models import (
    PetroleumType,
    PriceSnapshot,
    UNKNOWN_DISTRICT,
    format_updated_at,
    resolve_district,
)

from conftest import make_station


def test_petroleum_type_ids_are_stable() -> None:
    assert [int(pt) for pt in PetroleumType] == [1, 2, 3, 4, 5]
    assert PetroleumType.DIESEL_AUTO.label == "Automotive Diesel"


@pytest.mark.parametrize("raw,expected", [
    ("1", PetroleumType.UNLEAD_95),
    (" 5 ", PetroleumType.KEROSENE),
    (3, PetroleumType.DIESEL_HEAT),
])
def test_parse_valid(raw, expected) -> None:
    assert PetroleumType.parse(raw) is expected


@pytest.mark.parametrize("raw", ["0", "6", "", "x", "-2", "2.0", "01", "٣", "³"])
def test_parse_invalid(raw) -> None:
    with pytest.raises(InvalidPetroleumType):
        PetroleumType.parse(raw)


@pytest.mark.parametrize("text,district", [
    ("Larnaca", "Larnaca"),
    ("ΠΑΦΟΣ", "Paphos"),
    ("Αμμοχωστος - Παραλίμνι", "Famagusta"),
    ("limassol marina", "Limassol"),
])
def test_resolve_district(text, district) -> None:
    assert resolve_district(text).name == district


def test_resolve_district_falls_back_to_unknown() -> None:
    assert resolve_district("Troodos", None, "") is UNKNOWN_DISTRICT


def test_station_json_keeps_coordinates_as_strings() -> None:
    d = make_station("Brand_1", "1.000", latitude="35.18560000", longitude="33.38230").to_dict()
    assert d["latitude"] == "35.18560000"
    assert d["longitude"] == "33.38230"
    assert d["price"] == 1.0
    assert set(d) == {
        "brand", "offline", "company", "address", "latitude",
        "longitude", "area", "price", "district",
    }


def test_snapshot_json() -> None:
    # 2024-07-01T00:00:00Z → 03:00 summer time in Cyprus
    snap = PriceSnapshot(1719792000000, PetroleumType.UNLEAD_98, [make_station(price="1.459")])
    d = snap.to_dict()
    assert d["updated_at"] == 1719792000000
    assert d["updated_at_str"] == format_updated_at(1719792000000) == "2024-07-01 03:00:00 EEST"
    assert d["petroleum_type"] == 2
    assert d["stations"][0]["price"] == float(Decimal("1.459"))
