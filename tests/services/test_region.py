from __future__ import annotations

import pytest

from iotconfig.services.region import Region, UnsupportedRegionError


@pytest.mark.parametrize("region", list(Region))
def test_every_region_maps_both_ways(region):
    wire = region.to_wire()
    assert wire == wire.upper()
    assert Region.from_wire(wire) is region


def test_wire_names_are_unique():
    assert len({r.to_wire() for r in Region}) == len(Region)


@pytest.mark.parametrize("text, expected", [("us915", Region.US915), ("AS923_1B", Region.AS923_1B), ("Eu868", Region.EU868)])
def test_parse_accepts_both_spellings(text, expected):
    assert Region.parse(text) is expected


def test_unknown_wire_region_is_rejected():
    with pytest.raises(UnsupportedRegionError):
        Region.from_wire("XX123")
    with pytest.raises(ValueError):
        Region.parse("mars")
