"""Signed request messages of the config service API.

Every message carries its payload, a millisecond ``timestamp`` taken when the
message is built, and a ``signature`` that starts out empty and is filled in by
:func:`iotconfig.services.crypto.signing.sign_in_place` right before sending.
"""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..crypto.keypair import PublicKey
from ..crypto.signing import current_timestamp
from ..devaddr import DevaddrRange
from ..hex_field import HexDevAddr, HexNetID
from ..models import Eui, SessionKeyFilter
from ..region import Region
from ..region_params import RegionParams
from ..route import Route

__all__ = [
    "Action",
    "SignedRequest",
    "OrgCreateHeliumReq",
    "OrgCreateRoamerReq",
    "RouteListReq",
    "RouteGetReq",
    "RouteCreateReq",
    "RouteDeleteReq",
    "RouteUpdateReq",
    "RouteGetDevaddrRangesReq",
    "RouteUpdateDevaddrRangesReq",
    "RouteDeleteDevaddrRangesReq",
    "RouteGetEuisReq",
    "RouteUpdateEuisReq",
    "RouteDeleteEuisReq",
    "SessionKeyFilterListReq",
    "SessionKeyFilterGetReq",
    "SessionKeyFilterUpdateReq",
    "GatewayLoadRegionReq",
]


class Action(str, Enum):
    ADD = "add"
    REMOVE = "remove"

    def to_wire(self) -> str:
        return self.value.upper()


class SignedRequest:
    """Wire mapping shared by all signed requests: every dataclass field, by name."""

    __slots__ = ()

    def to_wire(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in dataclasses.fields(self)}


@dataclass(slots=True)
class OrgCreateHeliumReq(SignedRequest):
    owner: PublicKey
    payer: PublicKey
    devaddrs: int
    delegate_keys: list[PublicKey] = field(default_factory=list)
    timestamp: int = field(default_factory=current_timestamp)
    signature: bytes = b""


@dataclass(slots=True)
class OrgCreateRoamerReq(SignedRequest):
    owner: PublicKey
    payer: PublicKey
    net_id: HexNetID
    delegate_keys: list[PublicKey] = field(default_factory=list)
    timestamp: int = field(default_factory=current_timestamp)
    signature: bytes = b""


@dataclass(slots=True)
class RouteListReq(SignedRequest):
    oui: int
    timestamp: int = field(default_factory=current_timestamp)
    signature: bytes = b""


@dataclass(slots=True)
class RouteGetReq(SignedRequest):
    id: str
    timestamp: int = field(default_factory=current_timestamp)
    signature: bytes = b""


@dataclass(slots=True)
class RouteCreateReq(SignedRequest):
    oui: int
    route: Route
    timestamp: int = field(default_factory=current_timestamp)
    signature: bytes = b""


@dataclass(slots=True)
class RouteDeleteReq(SignedRequest):
    id: str
    timestamp: int = field(default_factory=current_timestamp)
    signature: bytes = b""


@dataclass(slots=True)
class RouteUpdateReq(SignedRequest):
    route: Route
    timestamp: int = field(default_factory=current_timestamp)
    signature: bytes = b""


@dataclass(slots=True)
class RouteGetDevaddrRangesReq(SignedRequest):
    route_id: str
    timestamp: int = field(default_factory=current_timestamp)
    signature: bytes = b""


@dataclass(slots=True)
class RouteUpdateDevaddrRangesReq(SignedRequest):
    action: Action
    devaddr_range: DevaddrRange
    timestamp: int = field(default_factory=current_timestamp)
    signature: bytes = b""


@dataclass(slots=True)
class RouteDeleteDevaddrRangesReq(SignedRequest):
    route_id: str
    timestamp: int = field(default_factory=current_timestamp)
    signature: bytes = b""


@dataclass(slots=True)
class RouteGetEuisReq(SignedRequest):
    route_id: str
    timestamp: int = field(default_factory=current_timestamp)
    signature: bytes = b""


@dataclass(slots=True)
class RouteUpdateEuisReq(SignedRequest):
    action: Action
    eui_pair: Eui
    timestamp: int = field(default_factory=current_timestamp)
    signature: bytes = b""


@dataclass(slots=True)
class RouteDeleteEuisReq(SignedRequest):
    route_id: str
    timestamp: int = field(default_factory=current_timestamp)
    signature: bytes = b""


@dataclass(slots=True)
class SessionKeyFilterListReq(SignedRequest):
    oui: int
    timestamp: int = field(default_factory=current_timestamp)
    signature: bytes = b""


@dataclass(slots=True)
class SessionKeyFilterGetReq(SignedRequest):
    oui: int
    devaddr: HexDevAddr
    timestamp: int = field(default_factory=current_timestamp)
    signature: bytes = b""


@dataclass(slots=True)
class SessionKeyFilterUpdateReq(SignedRequest):
    action: Action
    filter: SessionKeyFilter
    timestamp: int = field(default_factory=current_timestamp)
    signature: bytes = b""


@dataclass(slots=True)
class GatewayLoadRegionReq(SignedRequest):
    region: Region
    params: RegionParams
    hex_indexes: bytes = b""
    timestamp: int = field(default_factory=current_timestamp)
    signature: bytes = b""