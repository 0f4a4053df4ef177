from __future__ import annotations

import pytest

from iotconfig.services.errors import FormatError
from iotconfig.services.hex_field import (
    HexDevAddr,
    HexEui,
    HexNetID,
    validate_devaddr,
    validate_eui,
    validate_net_id,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        (HexDevAddr(0), "00000000"),
        (HexDevAddr(0x48000001), "48000001"),
        (HexDevAddr(0xFFFFFFFF), "FFFFFFFF"),
        (HexEui(0xABC), "0000000000000ABC"),
        (HexNetID(0xC00053), "C00053"),
        (HexNetID(1), "000001"),
    ],
)
def test_format_is_fixed_width_uppercase(value, expected):
    assert value.format() == expected
    assert str(value) == expected


@pytest.mark.parametrize(
    "kind, text",
    [
        (HexDevAddr, "00000000"),
        (HexDevAddr, "48000001"),
        (HexDevAddr, "DEADBEEF"),
        (HexDevAddr, "FFFFFFFF"),
        (HexEui, "0000000000000000"),
        (HexEui, "70B3D57ED0000001"),
        (HexEui, "FFFFFFFFFFFFFFFF"),
        (HexNetID, "000000"),
        (HexNetID, "C00053"),
        (HexNetID, "FFFFFF"),
    ],
)
def test_canonical_text_round_trips(kind, text):
    assert kind.parse(text).format() == text


@pytest.mark.parametrize(
    "kind, value",
    [
        (HexDevAddr, 0),
        (HexDevAddr, 0xFFFFFFFF),
        (HexEui, 1),
        (HexEui, 0xFFFFFFFFFFFFFFFF),
        (HexNetID, 0x3C),
        (HexNetID, 0xFFFFFF),
    ],
)
def test_values_round_trip_through_text(kind, value):
    field = kind(value)
    assert kind.parse(field.format()) == field
    assert len(field.format()) == kind.WIDTH


@pytest.mark.parametrize("kind", [HexEui, HexNetID])
def test_values_past_width_are_rejected(kind):
    with pytest.raises(FormatError):
        kind(kind.limit())


def test_parse_accepts_lowercase():
    assert HexDevAddr.parse("deadbeef") == HexDevAddr(0xDEADBEEF)
    assert HexEui.parse("00000000000000ab").value == 0xAB


@pytest.mark.parametrize(
    "text",
    [
        "",
        "1234567",  # too short, no implicit padding
        "123456789",  # too long
        "0x123456",  # prefix is not a hex digit
        "G0000000",
        "1234 678",
    ],
)
def test_parse_is_strict(text):
    with pytest.raises(FormatError):
        HexDevAddr.parse(text)


def test_format_error_is_value_error():
    with pytest.raises(ValueError):
        HexNetID.parse("C0005")


@pytest.mark.parametrize("value", [-1, 1 << 32, True, "48000001", 1.0])
def test_out_of_range_or_non_int_values_are_rejected(value):
    with pytest.raises(FormatError):
        HexDevAddr(value)


def test_integer_views_and_ordering():
    low, high = HexDevAddr(1), HexDevAddr(2)
    assert low < high
    assert int(high) == 2
    assert [10, 20, 30][HexDevAddr(1)] == 20
    assert repr(low) == "HexDevAddr(00000001)"


def test_validate_helpers_pad_short_input():
    assert validate_devaddr("1").format() == "00000001"
    assert validate_devaddr(" 48000001 ").format() == "48000001"
    assert validate_net_id("53").format() == "000053"
    assert validate_eui("abc").format() == "0000000000000ABC"


def test_validate_helpers_still_reject_bad_input():
    with pytest.raises(FormatError):
        validate_devaddr("")
    with pytest.raises(FormatError):
        validate_devaddr("123456789")
    with pytest.raises(FormatError):
        validate_eui("zz")
