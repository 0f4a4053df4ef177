from __future__ import annotations

import base64

import pytest

from iotconfig.services.crypto.keypair import Keypair
from iotconfig.services.errors import FormatError, KeyMaterialError
from iotconfig.services.hex_field import HexEui
from iotconfig.services.models import Eui, Org, OrgResponse, SessionKeyFilter


def test_eui_pair_views():
    pair = Eui.new("route-1", "00000000000000aa", 0xBB)
    assert pair.app_eui == HexEui(0xAA)
    assert pair.to_wire() == {"route_id": "route-1", "app_eui": 0xAA, "dev_eui": 0xBB}
    assert pair.as_dict() == {"route_id": "route-1", "app_eui": "00000000000000AA", "dev_eui": "00000000000000BB"}
    assert Eui.from_wire(pair.to_wire()) == pair
    assert Eui.from_dict(pair.as_dict()) == pair


def test_eui_rejects_short_text():
    with pytest.raises(FormatError):
        Eui.new("route-1", "aa", "bb")


def test_session_key_filter_wire_form():
    skf = SessionKeyFilter.new(4, "48000001", "a1b2")
    wire = skf.to_wire()
    assert wire["session_key"] == b"a1b2"
    decoded = SessionKeyFilter.from_wire({"oui": 4, "devaddr": 0x48000001, "session_key": base64.b64encode(b"a1b2").decode()})
    assert decoded == skf


def test_org_response_from_wire():
    owner = Keypair.generate().public_key
    payer = Keypair.generate().public_key
    data = {
        "org": {
            "oui": 4,
            "owner": owner.to_b58(),
            "payer": payer.to_b58(),
            "delegate_keys": [owner.to_b58()],
            "locked": False,
        },
        "net_id": 0xC00053,
        "devaddr_constraints": [{"start_addr": 0x48000000, "end_addr": 0x480000FF}],
    }

    response = OrgResponse.from_wire(data)

    assert response.org.owner == owner
    assert response.org.delegate_keys == [owner]
    assert response.as_dict()["net_id"] == "C00053"
    assert response.as_dict()["devaddr_constraints"] == [{"start_addr": "48000000", "end_addr": "480000FF"}]


def test_org_with_undecodable_delegate_key_is_rejected():
    owner = Keypair.generate().public_key
    data = {"oui": 4, "owner": owner.to_b58(), "payer": owner.to_b58(), "delegate_keys": [owner.to_b58(), "garbage"]}
    with pytest.raises(KeyMaterialError) as excinfo:
        Org.from_wire(data)
    assert "garbage" in str(excinfo.value)


def test_org_response_requires_org():
    with pytest.raises(ValueError):
        OrgResponse.from_wire({"net_id": 1})
