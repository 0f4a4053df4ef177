"""Ed25519 keypairs in the Helium binary layout.

A binary keypair is ``tag || secret(32) || public(32)`` where the tag byte holds
the network in its high nibble and the key type in its low nibble.  Public keys
are exchanged as base58check text of ``tag || public(32)`` with version byte 0.
PKCS8 PEM files holding an Ed25519 key are accepted as well.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import base58
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ed25519

from ..errors import KeyMaterialError, SigningError

__all__ = ["Network", "PublicKey", "Keypair", "KEY_TYPE_ED25519"]

_log = logging.getLogger("iotconfig.crypto.keypair")

KEY_TYPE_ED25519 = 0x01
_KEY_LEN = 32
_B58_VERSION = b"\x00"


class Network(int, Enum):
    MAINNET = 0x00
    TESTNET = 0x10

    @classmethod
    def from_tag(cls, tag: int) -> "Network":
        try:
            return cls(tag & 0xF0)
        except ValueError:
            raise KeyMaterialError(f"unknown network in key tag {tag:#04x}") from None


def _tag(network: Network) -> int:
    return int(network) | KEY_TYPE_ED25519


def _check_key_type(tag: int) -> None:
    if tag & 0x0F != KEY_TYPE_ED25519:
        raise KeyMaterialError(f"unsupported key type {tag & 0x0F:#x}; only ed25519 keys are supported")


@dataclass(frozen=True, slots=True)
class PublicKey:
    network: Network
    key: bytes

    def __post_init__(self) -> None:
        if len(self.key) != _KEY_LEN:
            raise KeyMaterialError(f"ed25519 public key must be {_KEY_LEN} bytes, got {len(self.key)}")

    @classmethod
    def from_bytes(cls, data: bytes) -> "PublicKey":
        if len(data) != _KEY_LEN + 1:
            raise KeyMaterialError(f"public key must be {_KEY_LEN + 1} bytes including the tag, got {len(data)}")
        _check_key_type(data[0])
        return cls(network=Network.from_tag(data[0]), key=bytes(data[1:]))

    @classmethod
    def from_b58(cls, text: str) -> "PublicKey":
        try:
            raw = base58.b58decode_check(text.strip())
        except ValueError as exc:
            raise KeyMaterialError(f"invalid public key {text!r}: {exc}") from exc
        if raw[:1] != _B58_VERSION:
            raise KeyMaterialError(f"invalid public key {text!r}: unexpected version byte")
        return cls.from_bytes(raw[1:])

    def to_bytes(self) -> bytes:
        return bytes([_tag(self.network)]) + self.key

    def to_b58(self) -> str:
        return base58.b58encode_check(_B58_VERSION + self.to_bytes()).decode("ascii")

    def verify(self, signature: bytes, data: bytes) -> bool:
        try:
            ed25519.Ed25519PublicKey.from_public_bytes(self.key).verify(signature, data)
        except InvalidSignature:
            return False
        return True

    def __str__(self) -> str:
        return self.to_b58()


class Keypair:
    """Private signing key owned by the caller; never sent over the wire."""

    __slots__ = ("_key", "network")

    def __init__(self, key: ed25519.Ed25519PrivateKey, network: Network = Network.MAINNET) -> None:
        self._key = key
        self.network = network

    @classmethod
    def generate(cls, network: Network = Network.MAINNET) -> "Keypair":
        return cls(ed25519.Ed25519PrivateKey.generate(), network)

    @classmethod
    def from_bytes(cls, data: bytes, network: Network = Network.MAINNET) -> "Keypair":
        if data.lstrip().startswith(b"-----BEGIN"):
            return cls._from_pem(data, network)
        if len(data) != 1 + 2 * _KEY_LEN:
            raise KeyMaterialError(f"keypair must be {1 + 2 * _KEY_LEN} bytes, got {len(data)}")
        tag = data[0]
        _check_key_type(tag)
        secret, public = data[1 : 1 + _KEY_LEN], data[1 + _KEY_LEN :]
        key = ed25519.Ed25519PrivateKey.from_private_bytes(secret)
        keypair = cls(key, Network.from_tag(tag))
        if keypair.public_key.key != public:
            raise KeyMaterialError("keypair public half does not match its secret")
        return keypair

    @classmethod
    def _from_pem(cls, data: bytes, network: Network) -> "Keypair":
        try:
            key = serialization.load_pem_private_key(data, password=None)
        except (ValueError, TypeError) as exc:
            raise KeyMaterialError(f"failed to load PEM key: {exc}") from exc
        if not isinstance(key, ed25519.Ed25519PrivateKey):
            raise KeyMaterialError(f"unsupported PEM key type {type(key).__name__}; expected ed25519")
        return cls(key, network)

    @classmethod
    def from_file(cls, path: Path) -> "Keypair":
        try:
            data = Path(path).read_bytes()
        except OSError as exc:
            raise KeyMaterialError(f"reading keypair file {path}: {exc}") from exc
        _log.debug("loaded keypair file %s (%d bytes)", path, len(data))
        return cls.from_bytes(data)

    @property
    def public_key(self) -> PublicKey:
        raw = self._key.public_key().public_bytes(serialization.Encoding.Raw, serialization.PublicFormat.Raw)
        return PublicKey(network=self.network, key=raw)

    def to_bytes(self) -> bytes:
        secret = self._key.private_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PrivateFormat.Raw,
            encryption_algorithm=serialization.NoEncryption(),
        )
        return bytes([_tag(self.network)]) + secret + self.public_key.key

    def write(self, path: Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "wb") as fh:
            if hasattr(os, "fchmod"):
                # O_CREAT leaves the mode of an existing file untouched
                os.fchmod(fh.fileno(), 0o600)
            fh.write(self.to_bytes())

    def sign(self, data: bytes) -> bytes:
        try:
            return self._key.sign(data)
        except (TypeError, ValueError) as exc:
            raise SigningError(f"ed25519 signing failed: {exc}") from exc

    def __repr__(self) -> str:
        return f"Keypair(public_key={self.public_key})"
