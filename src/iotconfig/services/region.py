"""LoRaWAN regions and their names on the config service wire."""
from __future__ import annotations

from enum import Enum
from types import MappingProxyType

from .errors import IotConfigError

__all__ = ["Region", "UnsupportedRegionError"]


class UnsupportedRegionError(IotConfigError, ValueError):
    """Raised when the wire carries a region this client does not know."""


class _StrEnum(str, Enum):
    def __str__(self) -> str:  # pragma: no cover - convenience for logging only
        return str(self.value)


class Region(_StrEnum):
    US915 = "us915"
    EU868 = "eu868"
    EU433 = "eu433"
    CN470 = "cn470"
    CN779 = "cn779"
    AU915 = "au915"
    AS923_1 = "as923_1"
    AS923_1B = "as923_1b"
    AS923_2 = "as923_2"
    AS923_3 = "as923_3"
    AS923_4 = "as923_4"
    KR920 = "kr920"
    IN865 = "in865"
    CD900_1A = "cd900_1a"

    def to_wire(self) -> str:
        return _TO_WIRE[self]

    @classmethod
    def from_wire(cls, value: str) -> "Region":
        try:
            return _FROM_WIRE[value]
        except KeyError:
            raise UnsupportedRegionError(f"unsupported region: {value}") from None

    @classmethod
    def parse(cls, value: str) -> "Region":
        """Accept either the CLI spelling (``as923_1``) or the wire spelling (``AS923_1``)."""
        try:
            return cls(value.lower())
        except ValueError:
            return cls.from_wire(value)


_TO_WIRE = MappingProxyType(
    {
        Region.US915: "US915",
        Region.EU868: "EU868",
        Region.EU433: "EU433",
        Region.CN470: "CN470",
        Region.CN779: "CN779",
        Region.AU915: "AU915",
        Region.AS923_1: "AS923_1",
        Region.AS923_1B: "AS923_1B",
        Region.AS923_2: "AS923_2",
        Region.AS923_3: "AS923_3",
        Region.AS923_4: "AS923_4",
        Region.KR920: "KR920",
        Region.IN865: "IN865",
        Region.CD900_1A: "CD900_1A",
    }
)
_FROM_WIRE = MappingProxyType({wire: region for region, wire in _TO_WIRE.items()})

_unmapped = set(Region) - set(_TO_WIRE)
if _unmapped or len(_FROM_WIRE) != len(_TO_WIRE):
    raise RuntimeError(f"region wire mapping is incomplete: {sorted(r.value for r in _unmapped)}")
