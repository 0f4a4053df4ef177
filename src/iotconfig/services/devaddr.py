"""DevAddr ranges and their decomposition into aligned subnet blocks."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from .errors import InvalidRangeError
from .hex_field import HexDevAddr

__all__ = [
    "ADDRESS_BITS",
    "DevaddrRange",
    "DevaddrConstraint",
    "SubnetBlock",
    "decompose_range",
]

ADDRESS_BITS = 32
_ADDRESS_SPACE = 1 << ADDRESS_BITS


def _as_devaddr(value: HexDevAddr | int | str) -> HexDevAddr:
    if isinstance(value, HexDevAddr):
        return value
    if isinstance(value, str):
        return HexDevAddr.parse(value)
    return HexDevAddr(value)


@dataclass(frozen=True, slots=True)
class SubnetBlock:
    """Power-of-two aligned block ``[base, base + size - 1]``."""

    base: HexDevAddr
    prefix_bits: int

    def __post_init__(self) -> None:
        if not 0 <= self.prefix_bits <= ADDRESS_BITS:
            raise ValueError(f"prefix_bits must be within 0..{ADDRESS_BITS}, got {self.prefix_bits}")
        if int(self.base) % self.size:
            raise ValueError(f"base {self.base} is not aligned to a /{self.prefix_bits} block")

    @property
    def size(self) -> int:
        return 1 << (ADDRESS_BITS - self.prefix_bits)

    @property
    def first(self) -> HexDevAddr:
        return self.base

    @property
    def last(self) -> HexDevAddr:
        return HexDevAddr(int(self.base) + self.size - 1)

    def as_dict(self) -> dict[str, Any]:
        return {"base": self.base.format(), "prefix_bits": self.prefix_bits}

    def __str__(self) -> str:
        return f"{self.base}/{self.prefix_bits}"


def _largest_power_of_two_at_most(value: int) -> int:
    return 1 << (value.bit_length() - 1)


def _alignment_bits(cursor: int) -> int:
    if cursor == 0:
        return ADDRESS_BITS
    return (cursor & -cursor).bit_length() - 1


def decompose_range(start: HexDevAddr | int, end: HexDevAddr | int) -> list[SubnetBlock]:
    """Cover ``[start, end]`` with the fewest aligned blocks, left to right.

    Each emitted block is the largest one that is both aligned at the cursor and
    fits in what is left of the range.  The result is ordered, disjoint and its
    union is exactly the input range; there are always fewer than 64 blocks.
    """

    first, last = int(start), int(end)
    if last < first:
        raise InvalidRangeError(_as_devaddr(first), _as_devaddr(last))

    blocks: list[SubnetBlock] = []
    cursor = first
    while cursor <= last:
        by_alignment = 1 << _alignment_bits(cursor)
        by_remaining = _largest_power_of_two_at_most(last - cursor + 1)
        block_size = min(by_alignment, by_remaining)
        prefix_bits = ADDRESS_BITS - (block_size.bit_length() - 1)
        blocks.append(SubnetBlock(base=HexDevAddr(cursor), prefix_bits=prefix_bits))
        cursor += block_size
    return blocks


@dataclass(frozen=True, slots=True)
class DevaddrConstraint:
    """Unscoped inclusive DevAddr range, as handed out to an organization."""

    start_addr: HexDevAddr
    end_addr: HexDevAddr

    def __post_init__(self) -> None:
        if self.end_addr < self.start_addr:
            raise InvalidRangeError(self.start_addr, self.end_addr)

    @classmethod
    def new(cls, start_addr: HexDevAddr | int | str, end_addr: HexDevAddr | int | str) -> "DevaddrConstraint":
        return cls(start_addr=_as_devaddr(start_addr), end_addr=_as_devaddr(end_addr))

    @classmethod
    def from_wire(cls, data: Mapping[str, Any]) -> "DevaddrConstraint":
        return cls.new(int(data["start_addr"]), int(data["end_addr"]))

    def length(self) -> int:
        return int(self.end_addr) - int(self.start_addr) + 1

    def contains(self, addr: HexDevAddr | int) -> bool:
        return int(self.start_addr) <= int(addr) <= int(self.end_addr)

    def to_subnet(self) -> list[SubnetBlock]:
        return decompose_range(self.start_addr, self.end_addr)

    def to_wire(self) -> dict[str, Any]:
        return {"start_addr": int(self.start_addr), "end_addr": int(self.end_addr)}

    def as_dict(self) -> dict[str, Any]:
        return {"start_addr": str(self.start_addr), "end_addr": str(self.end_addr)}


@dataclass(frozen=True, slots=True)
class DevaddrRange:
    """Inclusive DevAddr range owned by a route."""

    route_id: str
    start_addr: HexDevAddr
    end_addr: HexDevAddr

    def __post_init__(self) -> None:
        if self.end_addr < self.start_addr:
            raise InvalidRangeError(self.start_addr, self.end_addr)

    @classmethod
    def new(
        cls,
        route_id: str,
        start_addr: HexDevAddr | int | str,
        end_addr: HexDevAddr | int | str,
    ) -> "DevaddrRange":
        return cls(route_id=route_id, start_addr=_as_devaddr(start_addr), end_addr=_as_devaddr(end_addr))

    @classmethod
    def from_wire(cls, data: Mapping[str, Any]) -> "DevaddrRange":
        return cls.new(str(data.get("route_id", "")), int(data["start_addr"]), int(data["end_addr"]))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DevaddrRange":
        """Build from the JSON form used in route files (hex text bounds)."""
        return cls.new(str(data["route_id"]), str(data["start_addr"]), str(data["end_addr"]))

    def constraint(self) -> DevaddrConstraint:
        return DevaddrConstraint(start_addr=self.start_addr, end_addr=self.end_addr)

    def length(self) -> int:
        return int(self.end_addr) - int(self.start_addr) + 1

    def contains(self, addr: HexDevAddr | int) -> bool:
        return int(self.start_addr) <= int(addr) <= int(self.end_addr)

    def to_subnet(self) -> list[SubnetBlock]:
        return decompose_range(self.start_addr, self.end_addr)

    def to_wire(self) -> dict[str, Any]:
        return {"route_id": self.route_id, "start_addr": int(self.start_addr), "end_addr": int(self.end_addr)}

    def as_dict(self) -> dict[str, Any]:
        return {"route_id": self.route_id, "start_addr": str(self.start_addr), "end_addr": str(self.end_addr)}

    def __str__(self) -> str:
        return f"{self.route_id}:{self.start_addr}-{self.end_addr}"
