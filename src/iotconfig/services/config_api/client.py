"""Command clients for the config service: orgs, routes, EUIs, DevAddrs, filters, gateways.

Every mutating or owner-scoped call builds a request, signs it with the caller's
keypair and sends it.  Batch updates sign each element on its own (each with a
fresh timestamp) and stream the signed requests in the caller's order.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, Generic, Iterable, Mapping, Sequence, TypeVar

import httpx

from ..crypto.keypair import PublicKey
from ..crypto.signing import HasSignatureField, Signer, sign_batch, sign_in_place
from ..devaddr import DevaddrRange
from ..errors import BatchSigningError, IotConfigError, KeyMaterialError, TransportError
from ..hex_field import HexDevAddr, HexNetID
from ..models import Eui, OrgList, OrgResponse, SessionKeyFilter
from ..region import Region
from ..region_params import RegionParams
from ..route import Route
from . import requests as req
from .transport import ConfigServiceTransport

__all__ = [
    "BatchUpdateResult",
    "OrgClient",
    "RouteClient",
    "DevaddrClient",
    "EuiClient",
    "SkfClient",
    "GatewayClient",
]

_log = logging.getLogger("iotconfig.config_api.client")

T = TypeVar("T")
R = TypeVar("R")


@dataclass(slots=True)
class BatchUpdateResult(Generic[T]):
    """Server answer for a batch together with what was sent and what could not be signed."""

    response: Any
    sent: list[T] = field(default_factory=list)
    failed: list[tuple[T, IotConfigError]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


def _decode(what: str, fn: Callable[[Any], R], data: Any) -> R:
    try:
        return fn(data)
    except (KeyError, TypeError, ValueError, KeyMaterialError) as exc:
        raise TransportError(f"malformed {what} in config service response: {exc}", payload=data) from exc


class _ServiceClient:
    SERVICE: ClassVar[str] = ""

    def __init__(self, transport: ConfigServiceTransport) -> None:
        self._transport = transport

    @classmethod
    def connect(cls, host: str, *, timeout: float = 15.0, transport: httpx.BaseTransport | None = None):
        return cls(ConfigServiceTransport(base_url=host, timeout=timeout, transport=transport))

    def _unary(self, method: str, message: HasSignatureField | Mapping[str, Any]) -> Any:
        return self._transport.call(self.SERVICE, method, message)

    def _signed(self, method: str, message: HasSignatureField, keypair: Signer) -> Any:
        return self._unary(method, sign_in_place(message, keypair))

    def _signed_stream(self, method: str, message: HasSignatureField, keypair: Signer, convert: Callable[[Any], R]) -> list[R]:
        sign_in_place(message, keypair)
        items = [_decode(f"{self.SERVICE}.{method} element", convert, item) for item in self._transport.call_stream(self.SERVICE, method, message)]
        _log.debug("%s.%s returned %d elements", self.SERVICE, method, len(items))
        return items

    def _update_batch(
        self,
        method: str,
        items: Iterable[T],
        build: Callable[[T, int], HasSignatureField],
        keypair: Signer,
        allow_partial: bool,
    ) -> BatchUpdateResult[T]:
        result = sign_batch(items, build, keypair)
        if result.failed:
            if not allow_partial:
                raise BatchSigningError(result)
            _log.warning(
                "%s.%s: sending %d of %d elements, %d could not be signed",
                self.SERVICE,
                method,
                len(result.succeeded),
                result.total,
                len(result.failed),
            )
        sent = [item for item, _ in result.succeeded]
        if not sent:
            return BatchUpdateResult(response={}, sent=[], failed=list(result.failed))
        response = self._transport.call_client_stream(self.SERVICE, method, result.messages)
        return BatchUpdateResult(response=response, sent=sent, failed=list(result.failed))


class OrgClient(_ServiceClient):
    SERVICE = "org"

    def list(self) -> OrgList:
        return _decode("org list", OrgList.from_wire, self._unary("list", {}))

    def get(self, oui: int) -> OrgResponse:
        return _decode("org", OrgResponse.from_wire, self._unary("get", {"oui": oui}))

    def create_helium(
        self,
        owner: PublicKey,
        payer: PublicKey,
        devaddr_count: int,
        keypair: Signer,
        delegate_keys: Sequence[PublicKey] = (),
    ) -> OrgResponse:
        request = req.OrgCreateHeliumReq(owner=owner, payer=payer, devaddrs=devaddr_count, delegate_keys=list(delegate_keys))
        return _decode("org", OrgResponse.from_wire, self._signed("create_helium", request, keypair))

    def create_roamer(
        self,
        owner: PublicKey,
        payer: PublicKey,
        net_id: HexNetID,
        keypair: Signer,
        delegate_keys: Sequence[PublicKey] = (),
    ) -> OrgResponse:
        request = req.OrgCreateRoamerReq(owner=owner, payer=payer, net_id=net_id, delegate_keys=list(delegate_keys))
        return _decode("org", OrgResponse.from_wire, self._signed("create_roamer", request, keypair))


class RouteClient(_ServiceClient):
    SERVICE = "route"

    # routes ------------------------------------------------------------------
    def list(self, oui: int, keypair: Signer) -> list[Route]:
        data = self._signed("list", req.RouteListReq(oui=oui), keypair)
        return _decode("route list", lambda d: [Route.from_wire(r) for r in d.get("routes") or []], data)

    def get(self, route_id: str, keypair: Signer) -> Route:
        return _decode("route", Route.from_wire, self._signed("get", req.RouteGetReq(id=route_id), keypair))

    def create_route(self, route: Route, keypair: Signer) -> Route:
        request = req.RouteCreateReq(oui=route.oui, route=route)
        return _decode("route", Route.from_wire, self._signed("create", request, keypair))

    def delete(self, route_id: str, keypair: Signer) -> Route:
        return _decode("route", Route.from_wire, self._signed("delete", req.RouteDeleteReq(id=route_id), keypair))

    def push(self, route: Route, keypair: Signer) -> Route:
        return _decode("route", Route.from_wire, self._signed("update", req.RouteUpdateReq(route=route), keypair))

    # devaddr ranges ----------------------------------------------------------
    def get_devaddrs(self, route_id: str, keypair: Signer) -> list[DevaddrRange]:
        request = req.RouteGetDevaddrRangesReq(route_id=route_id)
        return self._signed_stream("get_devaddr_ranges", request, keypair, DevaddrRange.from_wire)

    def add_devaddrs(self, devaddrs: Iterable[DevaddrRange], keypair: Signer, *, allow_partial: bool = False) -> BatchUpdateResult[DevaddrRange]:
        return self._update_devaddrs(req.Action.ADD, devaddrs, keypair, allow_partial)

    def remove_devaddrs(self, devaddrs: Iterable[DevaddrRange], keypair: Signer, *, allow_partial: bool = False) -> BatchUpdateResult[DevaddrRange]:
        return self._update_devaddrs(req.Action.REMOVE, devaddrs, keypair, allow_partial)

    def _update_devaddrs(self, action: req.Action, devaddrs: Iterable[DevaddrRange], keypair: Signer, allow_partial: bool) -> BatchUpdateResult[DevaddrRange]:
        def build(devaddr: DevaddrRange, timestamp: int) -> req.RouteUpdateDevaddrRangesReq:
            return req.RouteUpdateDevaddrRangesReq(action=action, devaddr_range=devaddr, timestamp=timestamp)

        return self._update_batch("update_devaddr_ranges", devaddrs, build, keypair, allow_partial)

    def delete_devaddrs(self, route_id: str, keypair: Signer) -> None:
        self._signed("delete_devaddr_ranges", req.RouteDeleteDevaddrRangesReq(route_id=route_id), keypair)

    # eui pairs ---------------------------------------------------------------
    def get_euis(self, route_id: str, keypair: Signer) -> list[Eui]:
        return self._signed_stream("get_euis", req.RouteGetEuisReq(route_id=route_id), keypair, Eui.from_wire)

    def add_euis(self, euis: Iterable[Eui], keypair: Signer, *, allow_partial: bool = False) -> BatchUpdateResult[Eui]:
        return self._update_euis(req.Action.ADD, euis, keypair, allow_partial)

    def remove_euis(self, euis: Iterable[Eui], keypair: Signer, *, allow_partial: bool = False) -> BatchUpdateResult[Eui]:
        return self._update_euis(req.Action.REMOVE, euis, keypair, allow_partial)

    def _update_euis(self, action: req.Action, euis: Iterable[Eui], keypair: Signer, allow_partial: bool) -> BatchUpdateResult[Eui]:
        def build(pair: Eui, timestamp: int) -> req.RouteUpdateEuisReq:
            return req.RouteUpdateEuisReq(action=action, eui_pair=pair, timestamp=timestamp)

        return self._update_batch("update_euis", euis, build, keypair, allow_partial)

    def delete_euis(self, route_id: str, keypair: Signer) -> None:
        self._signed("delete_euis", req.RouteDeleteEuisReq(route_id=route_id), keypair)


DevaddrClient = RouteClient
EuiClient = RouteClient


class SkfClient(_ServiceClient):
    SERVICE = "session_key_filter"

    def list_filters(self, oui: int, keypair: Signer) -> list[SessionKeyFilter]:
        return self._signed_stream("list", req.SessionKeyFilterListReq(oui=oui), keypair, SessionKeyFilter.from_wire)

    def get_filters(self, oui: int, devaddr: HexDevAddr, keypair: Signer) -> list[SessionKeyFilter]:
        request = req.SessionKeyFilterGetReq(oui=oui, devaddr=devaddr)
        return self._signed_stream("get", request, keypair, SessionKeyFilter.from_wire)

    def add_filters(self, filters: Iterable[SessionKeyFilter], keypair: Signer, *, allow_partial: bool = False) -> BatchUpdateResult[SessionKeyFilter]:
        return self._update_filters(req.Action.ADD, filters, keypair, allow_partial)

    def remove_filters(self, filters: Iterable[SessionKeyFilter], keypair: Signer, *, allow_partial: bool = False) -> BatchUpdateResult[SessionKeyFilter]:
        return self._update_filters(req.Action.REMOVE, filters, keypair, allow_partial)

    def _update_filters(self, action: req.Action, filters: Iterable[SessionKeyFilter], keypair: Signer, allow_partial: bool) -> BatchUpdateResult[SessionKeyFilter]:
        def build(skf: SessionKeyFilter, timestamp: int) -> req.SessionKeyFilterUpdateReq:
            return req.SessionKeyFilterUpdateReq(action=action, filter=skf, timestamp=timestamp)

        return self._update_batch("update", filters, build, keypair, allow_partial)


class GatewayClient(_ServiceClient):
    SERVICE = "gateway"

    def load_region(self, region: Region, params: RegionParams, indexes: bytes, keypair: Signer) -> Any:
        request = req.GatewayLoadRegionReq(region=region, params=params, hex_indexes=bytes(indexes))
        return self._signed("load_region", request, keypair)
