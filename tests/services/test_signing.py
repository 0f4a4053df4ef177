from __future__ import annotations

import base64
import dataclasses
import itertools
import json

import pytest

from iotconfig.services.config_api.requests import (
    Action,
    RouteGetReq,
    RouteUpdateDevaddrRangesReq,
    SessionKeyFilterUpdateReq,
)
from iotconfig.services.crypto.keypair import Keypair
from iotconfig.services.crypto.signing import (
    HasSignatureField,
    canonical_bytes,
    encode,
    sign,
    sign_batch,
    sign_in_place,
    verify,
)
from iotconfig.services.devaddr import DevaddrRange
from iotconfig.services.errors import InvalidRangeError, SigningError
from iotconfig.services.models import SessionKeyFilter


@pytest.fixture(scope="module")
def keypair():
    return Keypair.generate()


def _update(start: int = 0x48000000, end: int = 0x480000FF, timestamp: int = 1_700_000_000_000) -> RouteUpdateDevaddrRangesReq:
    return RouteUpdateDevaddrRangesReq(
        action=Action.ADD,
        devaddr_range=DevaddrRange.new("route-1", start, end),
        timestamp=timestamp,
    )


class _BrokenSigner:
    def sign(self, data: bytes) -> bytes:
        raise RuntimeError("hsm unavailable")


def test_requests_satisfy_signature_protocol():
    assert isinstance(_update(), HasSignatureField)
    assert isinstance(RouteGetReq(id="r"), HasSignatureField)


def test_request_timestamp_defaults_to_now():
    first = RouteGetReq(id="r")
    assert first.timestamp > 1_600_000_000_000
    assert first.signature == b""


def test_wire_encoding_shape():
    body = json.loads(encode(_update()))
    assert body == {
        "action": "ADD",
        "devaddr_range": {"route_id": "route-1", "start_addr": 0x48000000, "end_addr": 0x480000FF},
        "signature": "",
        "timestamp": 1_700_000_000_000,
    }


def test_encoding_is_compact_and_sorted():
    raw = encode(_update())
    assert b" " not in raw
    assert raw.index(b'"action"') < raw.index(b'"devaddr_range"') < raw.index(b'"signature"') < raw.index(b'"timestamp"')


def test_signing_is_deterministic(keypair):
    assert sign(_update(), keypair) == sign(_update(), keypair)


def test_signature_depends_on_timestamp(keypair):
    assert sign(_update(timestamp=1), keypair) != sign(_update(timestamp=2), keypair)


def test_signature_depends_on_payload(keypair):
    assert sign(_update(end=0x480000FF), keypair) != sign(_update(end=0x480000FE), keypair)
    removed = dataclasses.replace(_update(), action=Action.REMOVE)
    assert sign(removed, keypair) != sign(_update(), keypair)


def test_signature_field_is_excluded_from_signed_bytes(keypair):
    message = _update()
    before = canonical_bytes(message)
    sign_in_place(message, keypair)
    assert message.signature
    assert canonical_bytes(message) == before


def test_zeroed_reencoding_matches_signed_bytes(keypair):
    message = sign_in_place(_update(), keypair)
    zeroed = dataclasses.replace(message, signature=b"")
    assert encode(zeroed) == canonical_bytes(message)
    assert keypair.public_key.verify(message.signature, encode(zeroed))
    assert verify(message, keypair.public_key)


def test_signature_travels_as_base64(keypair):
    message = sign_in_place(_update(), keypair)
    body = json.loads(encode(message))
    assert base64.b64decode(body["signature"]) == message.signature


def test_tampering_breaks_verification(keypair):
    message = sign_in_place(_update(), keypair)
    tampered = dataclasses.replace(message, timestamp=message.timestamp + 1)
    assert not verify(tampered, keypair.public_key)


def test_unsigned_message_does_not_verify(keypair):
    assert not verify(_update(), keypair.public_key)


def test_bytes_payload_fields_are_base64(keypair):
    skf = SessionKeyFilter.new(7, "48000001", "key")
    message = SessionKeyFilterUpdateReq(action=Action.ADD, filter=skf, timestamp=5)
    body = json.loads(encode(message))
    assert body["filter"] == {"oui": 7, "devaddr": 0x48000001, "session_key": base64.b64encode(b"key").decode()}
    assert verify(sign_in_place(message, keypair), keypair.public_key)


def test_signer_failure_is_wrapped():
    with pytest.raises(SigningError) as excinfo:
        sign(_update(), _BrokenSigner())
    assert "hsm unavailable" in str(excinfo.value)


def test_sign_batch_gives_each_element_its_own_timestamp(keypair):
    clock = itertools.count(100)
    items = [(0, 9), (10, 19), (20, 29)]

    result = sign_batch(items, lambda item, ts: _update(*item, timestamp=ts), keypair, clock=lambda: next(clock))

    assert result.ok
    assert [item for item, _ in result.succeeded] == items
    assert [m.timestamp for m in result.messages] == [100, 101, 102]
    assert all(verify(m, keypair.public_key) for m in result.messages)


def test_sign_batch_reports_failed_elements(keypair):
    items = [(0, 9), (19, 10), (20, 29)]

    result = sign_batch(items, lambda item, ts: _update(*item, timestamp=ts), keypair)

    assert not result.ok
    assert result.total == 3
    assert [item for item, _ in result.succeeded] == [(0, 9), (20, 29)]
    assert len(result.failed) == 1
    failed_item, error = result.failed[0]
    assert failed_item == (19, 10)
    assert isinstance(error, InvalidRangeError)
    report = result.report()
    assert [row["signed"] for row in report] == [True, False, True]
    assert report[1]["input"] == "(19, 10)"
    assert "error" in report[1] and "error" not in report[0]


def test_sign_batch_report_follows_input_order(keypair):
    items = [(19, 10), (0, 9), (30, 20)]

    result = sign_batch(items, lambda item, ts: _update(*item, timestamp=ts), keypair)

    assert [row["input"] for row in result.report()] == [str(item) for item in items]
    assert [row["signed"] for row in result.report()] == [False, True, False]
    assert [item for item, _ in result.outcomes] == items


def test_sign_batch_collects_signer_failures():
    result = sign_batch([(0, 1)], lambda item, ts: _update(*item, timestamp=ts), _BrokenSigner())
    assert not result.succeeded
    assert isinstance(result.failed[0][1], SigningError)
