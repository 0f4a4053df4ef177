from __future__ import annotations

import random

import pytest

from iotconfig.services.devaddr import DevaddrConstraint, DevaddrRange, SubnetBlock, decompose_range
from iotconfig.services.errors import InvalidRangeError
from iotconfig.services.hex_field import HexDevAddr


def _blocks(start: int, end: int) -> list[tuple[str, int]]:
    return [(block.base.format(), block.prefix_bits) for block in decompose_range(start, end)]


def _assert_exact_cover(start: int, end: int, blocks: list[SubnetBlock]) -> None:
    assert blocks, "a non-empty range always yields at least one block"
    assert int(blocks[0].first) == start
    assert int(blocks[-1].last) == end
    for prev, nxt in zip(blocks, blocks[1:]):
        # contiguous and ordered: no gaps, no overlap
        assert int(nxt.first) == int(prev.last) + 1
    for block in blocks:
        assert int(block.base) % block.size == 0
        assert 0 <= block.prefix_bits <= 32
    assert len(blocks) < 64


def test_single_zero_address():
    assert _blocks(0, 0) == [("00000000", 32)]


def test_whole_address_space():
    assert _blocks(0, 0xFFFFFFFF) == [("00000000", 0)]


def test_odd_start_cannot_merge_with_next_address():
    assert _blocks(1, 2) == [("00000001", 32), ("00000002", 32)]


def test_aligned_range_is_one_block():
    assert _blocks(0x48000000, 0x4800FFFF) == [("48000000", 16)]


def test_range_split_on_alignment():
    assert _blocks(0x10, 0x2F) == [("00000010", 28), ("00000020", 28)]


def test_last_address():
    assert _blocks(0xFFFFFFFF, 0xFFFFFFFF) == [("FFFFFFFF", 32)]


def test_worst_case_block_count():
    blocks = decompose_range(1, 0xFFFFFFFE)
    assert len(blocks) == 62
    _assert_exact_cover(1, 0xFFFFFFFE, blocks)


@pytest.mark.parametrize(
    "start, end",
    [
        (0, 0),
        (0, 0xFFFFFFFF),
        (1, 2),
        (7, 7),
        (0x48000005, 0x48001234),
        (0x48000000, 0x480003FF),
        (0x7FFFFFFF, 0x80000000),
        (0xFFFFFF00, 0xFFFFFFFF),
    ],
)
def test_decomposition_covers_range_exactly(start, end):
    _assert_exact_cover(start, end, decompose_range(start, end))


def test_decomposition_random_ranges():
    rng = random.Random(20231)
    for _ in range(200):
        a, b = rng.randrange(1 << 32), rng.randrange(1 << 32)
        start, end = min(a, b), max(a, b)
        _assert_exact_cover(start, end, decompose_range(start, end))


def test_decomposition_accepts_hex_fields():
    assert decompose_range(HexDevAddr(4), HexDevAddr(7)) == [SubnetBlock(base=HexDevAddr(4), prefix_bits=30)]


def test_decomposition_rejects_reversed_range():
    with pytest.raises(InvalidRangeError):
        decompose_range(0x22334455, 0x11223344)


def test_range_with_end_before_start_is_rejected():
    with pytest.raises(InvalidRangeError) as excinfo:
        DevaddrRange.new("route-1", 0x22334455, 0x11223344)
    assert "22334455" in str(excinfo.value)
    assert "11223344" in str(excinfo.value)
    with pytest.raises(InvalidRangeError):
        DevaddrConstraint.new("22334455", "11223344")


def test_single_address_range_is_allowed():
    rng = DevaddrRange.new("route-1", "48000001", "48000001")
    assert rng.length() == 1
    assert [str(b) for b in rng.to_subnet()] == ["48000001/32"]


def test_subnet_block_rejects_misaligned_base():
    with pytest.raises(ValueError):
        SubnetBlock(base=HexDevAddr(1), prefix_bits=31)
    with pytest.raises(ValueError):
        SubnetBlock(base=HexDevAddr(0), prefix_bits=33)


def test_subnet_block_shape():
    block = SubnetBlock(base=HexDevAddr(0x48000000), prefix_bits=24)
    assert block.size == 256
    assert block.last.format() == "480000FF"
    assert block.as_dict() == {"base": "48000000", "prefix_bits": 24}


def test_range_views():
    rng = DevaddrRange.new("route-1", "48000000", "480000ff")
    assert rng.length() == 256
    assert rng.contains(0x48000010)
    assert not rng.contains(HexDevAddr(0x48000100))
    assert rng.to_wire() == {"route_id": "route-1", "start_addr": 0x48000000, "end_addr": 0x480000FF}
    assert rng.as_dict() == {"route_id": "route-1", "start_addr": "48000000", "end_addr": "480000FF"}
    assert str(rng) == "route-1:48000000-480000FF"
    assert rng.constraint() == DevaddrConstraint.new(0x48000000, 0x480000FF)


def test_range_from_wire_and_dict():
    wire = DevaddrRange.from_wire({"route_id": "r", "start_addr": 16, "end_addr": 31})
    assert wire == DevaddrRange.from_dict({"route_id": "r", "start_addr": "00000010", "end_addr": "0000001F"})


def test_length_of_full_address_space():
    assert DevaddrRange.new("route-1", 0, 0xFFFFFFFF).length() == 2**32
    assert DevaddrConstraint.new("00000000", "FFFFFFFF").length() == 1 << 32
