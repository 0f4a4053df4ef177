"""Fixed-width hexadecimal identifiers (DevAddr, EUI, NetID).

Values are always rendered as exactly ``WIDTH`` uppercase hex digits.  Parsing is
strict: the text must contain exactly ``WIDTH`` hex digits, nothing is padded
implicitly.  The ``validate_*`` helpers used by the CLI pre-pad short input
before handing it to the strict parser.
"""
from __future__ import annotations

import string
from dataclasses import dataclass
from typing import ClassVar, TypeVar

from .errors import FormatError

__all__ = [
    "HexField",
    "HexDevAddr",
    "HexEui",
    "HexNetID",
    "devaddr",
    "eui",
    "net_id",
    "validate_devaddr",
    "validate_eui",
    "validate_net_id",
]

_HEX_DIGITS = frozenset(string.hexdigits)

H = TypeVar("H", bound="HexField")


@dataclass(frozen=True, slots=True, order=True)
class HexField:
    value: int

    WIDTH: ClassVar[int] = 0
    LABEL: ClassVar[str] = "hex"

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise FormatError(f"{self.LABEL} must be an integer, got {self.value!r}")
        if not 0 <= self.value < self.limit():
            raise FormatError(f"{self.LABEL} {self.value:#x} does not fit in {self.WIDTH} hex digits")

    @classmethod
    def limit(cls) -> int:
        return 1 << (cls.WIDTH * 4)

    @classmethod
    def parse(cls: type[H], text: str) -> H:
        if not isinstance(text, str):
            raise FormatError(f"{cls.LABEL} must be text, got {type(text).__name__}")
        if len(text) != cls.WIDTH:
            raise FormatError(f"{cls.LABEL} {text!r} must be exactly {cls.WIDTH} hex digits", text=text)
        if not _HEX_DIGITS.issuperset(text):
            raise FormatError(f"{cls.LABEL} {text!r} contains non-hex characters", text=text)
        return cls(int(text, 16))

    def format(self) -> str:
        return f"{self.value:0{self.WIDTH}X}"

    def __str__(self) -> str:
        return self.format()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.format()})"

    def __int__(self) -> int:
        return self.value

    def __index__(self) -> int:
        return self.value


class HexDevAddr(HexField):
    __slots__ = ()
    WIDTH = 8
    LABEL = "devaddr"


class HexEui(HexField):
    __slots__ = ()
    WIDTH = 16
    LABEL = "eui"


class HexNetID(HexField):
    __slots__ = ()
    WIDTH = 6
    LABEL = "net_id"


def devaddr(value: int) -> HexDevAddr:
    return HexDevAddr(value)


def eui(value: int) -> HexEui:
    return HexEui(value)


def net_id(value: int) -> HexNetID:
    return HexNetID(value)


def _padded(cls: type[H], text: str) -> H:
    text = text.strip()
    if 0 < len(text) < cls.WIDTH:
        text = text.rjust(cls.WIDTH, "0")
    return cls.parse(text)


def validate_devaddr(text: str) -> HexDevAddr:
    return _padded(HexDevAddr, text)


def validate_eui(text: str) -> HexEui:
    return _padded(HexEui, text)


def validate_net_id(text: str) -> HexNetID:
    return _padded(HexNetID, text)
