"""Domain records exchanged with the config service."""
from __future__ import annotations

import base64
from dataclasses import dataclass, field
from typing import Any, Mapping

from .crypto.keypair import PublicKey
from .devaddr import DevaddrConstraint
from .hex_field import HexDevAddr, HexEui, HexNetID

__all__ = ["Eui", "SessionKeyFilter", "Org", "OrgList", "OrgResponse"]


@dataclass(frozen=True, slots=True)
class Eui:
    """AppEUI/DevEUI pair routed by a route."""

    route_id: str
    app_eui: HexEui
    dev_eui: HexEui

    @classmethod
    def new(cls, route_id: str, app_eui: HexEui | int | str, dev_eui: HexEui | int | str) -> "Eui":
        return cls(route_id=route_id, app_eui=_as(HexEui, app_eui), dev_eui=_as(HexEui, dev_eui))

    @classmethod
    def from_wire(cls, data: Mapping[str, Any]) -> "Eui":
        return cls.new(str(data.get("route_id", "")), int(data["app_eui"]), int(data["dev_eui"]))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Eui":
        return cls.new(str(data["route_id"]), str(data["app_eui"]), str(data["dev_eui"]))

    def to_wire(self) -> dict[str, Any]:
        return {"route_id": self.route_id, "app_eui": int(self.app_eui), "dev_eui": int(self.dev_eui)}

    def as_dict(self) -> dict[str, Any]:
        return {"route_id": self.route_id, "app_eui": str(self.app_eui), "dev_eui": str(self.dev_eui)}

    def __str__(self) -> str:
        return f"{self.route_id}:app_eui={self.app_eui},dev_eui={self.dev_eui}"


@dataclass(frozen=True, slots=True)
class SessionKeyFilter:
    """Session key accepted for a DevAddr under an organization."""

    oui: int
    devaddr: HexDevAddr
    session_key: str

    @classmethod
    def new(cls, oui: int, devaddr: HexDevAddr | int | str, session_key: str) -> "SessionKeyFilter":
        return cls(oui=int(oui), devaddr=_as(HexDevAddr, devaddr), session_key=session_key)

    @classmethod
    def from_wire(cls, data: Mapping[str, Any]) -> "SessionKeyFilter":
        raw = base64.b64decode(data.get("session_key") or "")
        return cls.new(int(data["oui"]), int(data["devaddr"]), raw.decode("utf-8"))

    def to_wire(self) -> dict[str, Any]:
        return {"oui": self.oui, "devaddr": int(self.devaddr), "session_key": self.session_key.encode("utf-8")}

    def as_dict(self) -> dict[str, Any]:
        return {"oui": self.oui, "devaddr": str(self.devaddr), "session_key": self.session_key}

    def __str__(self) -> str:
        return f"oui={self.oui},devaddr={self.devaddr},session_key={self.session_key}"


@dataclass(slots=True)
class Org:
    oui: int
    owner: PublicKey
    payer: PublicKey
    delegate_keys: list[PublicKey] = field(default_factory=list)
    locked: bool = False

    @classmethod
    def from_wire(cls, data: Mapping[str, Any]) -> "Org":
        return cls(
            oui=int(data["oui"]),
            owner=PublicKey.from_b58(data["owner"]),
            payer=PublicKey.from_b58(data["payer"]),
            delegate_keys=[PublicKey.from_b58(text) for text in data.get("delegate_keys") or []],
            locked=bool(data.get("locked", False)),
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "oui": self.oui,
            "owner": str(self.owner),
            "payer": str(self.payer),
            "delegate_keys": [str(key) for key in self.delegate_keys],
            "locked": self.locked,
        }


@dataclass(slots=True)
class OrgList:
    orgs: list[Org] = field(default_factory=list)

    @classmethod
    def from_wire(cls, data: Mapping[str, Any]) -> "OrgList":
        return cls(orgs=[Org.from_wire(item) for item in data.get("orgs") or []])

    def as_dict(self) -> dict[str, Any]:
        return {"orgs": [org.as_dict() for org in self.orgs]}


@dataclass(slots=True)
class OrgResponse:
    org: Org
    net_id: HexNetID
    devaddr_constraints: list[DevaddrConstraint] = field(default_factory=list)

    @classmethod
    def from_wire(cls, data: Mapping[str, Any]) -> "OrgResponse":
        org = data.get("org")
        if not org:
            raise ValueError("no org returned by the config service")
        return cls(
            org=Org.from_wire(org),
            net_id=HexNetID(int(data.get("net_id", 0))),
            devaddr_constraints=[DevaddrConstraint.from_wire(item) for item in data.get("devaddr_constraints") or []],
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "org": self.org.as_dict(),
            "net_id": str(self.net_id),
            "devaddr_constraints": [c.as_dict() for c in self.devaddr_constraints],
        }


def _as(kind, value):
    if isinstance(value, kind):
        return value
    if isinstance(value, str):
        return kind.parse(value)
    return kind(value)
