from __future__ import annotations

import pytest

from iotconfig.services.errors import RouteUpdateError
from iotconfig.services.hex_field import HexNetID
from iotconfig.services.region import Region
from iotconfig.services.route import Gwmp, Http, PacketRouter, Route


def _wire_route() -> dict:
    return {
        "id": "11111111-2222-3333-4444-555555555555",
        "net_id": 0xC00053,
        "oui": 4,
        "server": {
            "host": "lns.example.org",
            "port": 1700,
            "protocol": {"gwmp": {"mapping": [{"region": "US915", "port": 1701}]}},
        },
        "max_copies": 3,
        "active": True,
        "locked": False,
    }


@pytest.fixture()
def route() -> Route:
    return Route.from_wire(_wire_route())


def test_new_route_defaults():
    route = Route.new(HexNetID(0xC00053), 4, 5)
    assert route.id == ""
    assert route.active
    assert not route.locked
    assert isinstance(route.server.protocol, PacketRouter)


def test_from_wire_and_back(route):
    assert route.net_id == HexNetID(0xC00053)
    assert isinstance(route.server.protocol, Gwmp)
    assert route.server.protocol.mapping[0].region is Region.US915
    assert route.to_wire() == _wire_route()


def test_as_dict_uses_hex_and_region_names(route):
    data = route.as_dict()
    assert data["net_id"] == "C00053"
    assert data["server"]["protocol"] == {"type": "gwmp", "mapping": [{"region": "us915", "port": 1701}]}


def test_json_round_trip(route):
    restored = Route.model_validate_json(route.model_dump_json())
    assert restored == route


def test_net_id_accepts_text_and_rejects_bad_width():
    assert Route(net_id="00003C", oui=1).net_id == HexNetID(0x3C)
    with pytest.raises(ValueError):
        Route(net_id="3C", oui=1)


def test_set_max_copies_and_activation(route):
    route.set_max_copies(9)
    route.deactivate()
    assert route.max_copies == 9
    assert not route.active
    route.activate()
    assert route.active


def test_set_server_keeps_protocol(route):
    route.set_server("new.example.org", 9000)
    assert (route.server.host, route.server.port) == ("new.example.org", 9000)
    assert isinstance(route.server.protocol, Gwmp)


def test_set_http(route):
    route.set_http("/roaming", auth_header="Bearer abc")
    protocol = route.server.protocol
    assert isinstance(protocol, Http)
    assert protocol.dedupe_timeout == 250
    assert protocol.flow_type == "async"
    assert route.to_wire()["server"]["protocol"] == {
        "http_roaming": {"flow_type": "async", "dedupe_timeout": 250, "path": "/roaming", "auth_header": "Bearer abc"}
    }


def test_gwmp_mapping_replaces_existing_region(route):
    route.gwmp_add_mapping(Region.US915, 1800)
    route.gwmp_add_mapping(Region.EU868, 1801)
    mapping = {(m.region, m.port) for m in route.server.protocol.mapping}
    assert mapping == {(Region.US915, 1800), (Region.EU868, 1801)}

    route.gwmp_remove_mapping(Region.US915)
    assert [m.region for m in route.server.protocol.mapping] == [Region.EU868]


def test_gwmp_add_switches_protocol():
    route = Route.new(HexNetID(1), 1, 1)
    route.gwmp_add_mapping(Region.AU915, 1700)
    assert isinstance(route.server.protocol, Gwmp)


def test_gwmp_remove_requires_gwmp():
    route = Route.new(HexNetID(1), 1, 1)
    with pytest.raises(RouteUpdateError):
        route.gwmp_remove_mapping(Region.US915)


def test_packet_router(route):
    route.set_packet_router()
    assert route.to_wire()["server"]["protocol"] == {"packet_router": {}}
