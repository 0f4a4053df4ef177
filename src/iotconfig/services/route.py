"""Routes: where a LoRaWAN network's packets are delivered and how many copies are bought."""
from __future__ import annotations

from typing import Annotated, Any, Literal, Mapping, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, PlainSerializer, PlainValidator

from .errors import RouteUpdateError
from .hex_field import HexNetID
from .region import Region

__all__ = [
    "GwmpMap",
    "PacketRouter",
    "Gwmp",
    "Http",
    "Protocol",
    "Server",
    "Route",
]


def _net_id(value: Any) -> HexNetID:
    if isinstance(value, HexNetID):
        return value
    if isinstance(value, str):
        return HexNetID.parse(value)
    return HexNetID(int(value))


NetIdField = Annotated[
    HexNetID,
    PlainValidator(_net_id),
    PlainSerializer(lambda v: v.format(), return_type=str),
]
RegionField = Annotated[
    Region,
    BeforeValidator(lambda v: v if isinstance(v, Region) else Region.parse(str(v))),
    PlainSerializer(lambda v: v.value, return_type=str),
]


class GwmpMap(BaseModel):
    region: RegionField
    port: int

    def to_wire(self) -> dict[str, Any]:
        return {"region": self.region.to_wire(), "port": self.port}


class PacketRouter(BaseModel):
    type: Literal["packet_router"] = "packet_router"

    def to_wire(self) -> dict[str, Any]:
        return {"packet_router": {}}


class Gwmp(BaseModel):
    type: Literal["gwmp"] = "gwmp"
    mapping: list[GwmpMap] = Field(default_factory=list)

    def to_wire(self) -> dict[str, Any]:
        return {"gwmp": {"mapping": [m.to_wire() for m in self.mapping]}}


class Http(BaseModel):
    type: Literal["http_roaming"] = "http_roaming"
    flow_type: Literal["sync", "async"] = "async"
    dedupe_timeout: int = 250
    path: str = ""
    auth_header: Optional[str] = None

    def to_wire(self) -> dict[str, Any]:
        return {
            "http_roaming": {
                "flow_type": self.flow_type,
                "dedupe_timeout": self.dedupe_timeout,
                "path": self.path,
                "auth_header": self.auth_header or "",
            }
        }


Protocol = Annotated[Union[PacketRouter, Gwmp, Http], Field(discriminator="type")]


def _protocol_from_wire(data: Mapping[str, Any]) -> Union[PacketRouter, Gwmp, Http]:
    if "gwmp" in data:
        mapping = (data["gwmp"] or {}).get("mapping") or []
        return Gwmp(mapping=[GwmpMap(region=Region.from_wire(m["region"]), port=m["port"]) for m in mapping])
    if "http_roaming" in data:
        http = dict(data["http_roaming"] or {})
        http["auth_header"] = http.get("auth_header") or None
        return Http(**http)
    return PacketRouter()


class Server(BaseModel):
    host: str = ""
    port: int = 0
    protocol: Protocol = Field(default_factory=PacketRouter)

    def to_wire(self) -> dict[str, Any]:
        return {"host": self.host, "port": self.port, "protocol": self.protocol.to_wire()}

    @classmethod
    def from_wire(cls, data: Mapping[str, Any]) -> "Server":
        return cls(
            host=data.get("host", ""),
            port=int(data.get("port", 0)),
            protocol=_protocol_from_wire(data.get("protocol") or {}),
        )


class Route(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True, validate_assignment=True)

    id: str = ""
    net_id: NetIdField
    oui: int
    server: Server = Field(default_factory=Server)
    max_copies: int = 5
    active: bool = True
    locked: bool = False

    @classmethod
    def new(cls, net_id: HexNetID, oui: int, max_copies: int) -> "Route":
        return cls(net_id=net_id, oui=oui, max_copies=max_copies)

    @classmethod
    def from_wire(cls, data: Mapping[str, Any]) -> "Route":
        return cls(
            id=data.get("id", ""),
            net_id=int(data.get("net_id", 0)),
            oui=int(data.get("oui", 0)),
            server=Server.from_wire(data.get("server") or {}),
            max_copies=int(data.get("max_copies", 0)),
            active=bool(data.get("active", False)),
            locked=bool(data.get("locked", False)),
        )

    def to_wire(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "net_id": int(self.net_id),
            "oui": self.oui,
            "server": self.server.to_wire(),
            "max_copies": self.max_copies,
            "active": self.active,
            "locked": self.locked,
        }

    def as_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")

    # mutators ----------------------------------------------------------------
    def set_max_copies(self, max_copies: int) -> None:
        self.max_copies = max_copies

    def set_server(self, host: str, port: int) -> None:
        self.server = Server(host=host, port=port, protocol=self.server.protocol)

    def set_http(self, path: str, dedupe_timeout: int = 250, auth_header: str | None = None, flow_type: str = "async") -> None:
        http = Http(flow_type=flow_type, dedupe_timeout=dedupe_timeout, path=path, auth_header=auth_header)
        self.server = Server(host=self.server.host, port=self.server.port, protocol=http)

    def set_packet_router(self) -> None:
        self.server = Server(host=self.server.host, port=self.server.port, protocol=PacketRouter())

    def gwmp_add_mapping(self, region: Region, port: int) -> None:
        """Switch to GWMP if needed and map ``region`` to ``port``, replacing any previous port."""
        current = self.server.protocol
        mapping = [m for m in current.mapping if m.region != region] if isinstance(current, Gwmp) else []
        mapping.append(GwmpMap(region=region, port=port))
        self.server = Server(host=self.server.host, port=self.server.port, protocol=Gwmp(mapping=mapping))

    def gwmp_remove_mapping(self, region: Region) -> None:
        current = self.server.protocol
        if not isinstance(current, Gwmp):
            raise RouteUpdateError(f"route {self.id} does not use the gwmp protocol")
        mapping = [m for m in current.mapping if m.region != region]
        self.server = Server(host=self.server.host, port=self.server.port, protocol=Gwmp(mapping=mapping))

    def activate(self) -> None:
        self.active = True

    def deactivate(self) -> None:
        self.active = False
