"""Canonical signing of config service requests.

A request is signed over its canonical encoding with the ``signature`` field
emptied: the message is cloned, the clone's signature is set to ``b""``, the
clone is serialized as compact JSON with sorted keys (bytes as base64) and the
resulting bytes are signed.  The verifier repeats the same steps, so the
signature covers the payload and the timestamp and nothing else.
"""
from __future__ import annotations

import base64
import dataclasses
import json
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Generic, Iterable, Mapping, Protocol, TypeVar, runtime_checkable

from ..errors import IotConfigError, SigningError
from ..hex_field import HexField

__all__ = [
    "HasSignatureField",
    "Signer",
    "BatchSignResult",
    "current_timestamp",
    "to_jsonable",
    "encode",
    "canonical_bytes",
    "sign",
    "sign_in_place",
    "sign_batch",
    "verify",
]

_log = logging.getLogger("iotconfig.crypto.signing")


@runtime_checkable
class HasSignatureField(Protocol):
    """A request carrying a mutable signature alongside its payload."""

    signature: bytes
    timestamp: int

    def to_wire(self) -> Mapping[str, Any]: ...


class Signer(Protocol):
    def sign(self, data: bytes) -> bytes: ...


class Verifier(Protocol):
    def verify(self, signature: bytes, data: bytes) -> bool: ...


M = TypeVar("M", bound=HasSignatureField)
T = TypeVar("T")


def current_timestamp() -> int:
    """Wall-clock milliseconds since the Unix epoch."""
    return time.time_ns() // 1_000_000


def to_jsonable(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, HexField):
        return int(value)
    if isinstance(value, Enum):
        to_wire = getattr(value, "to_wire", None)
        return to_wire() if callable(to_wire) else value.value
    if isinstance(value, Mapping):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    to_wire = getattr(value, "to_wire", None)
    if callable(to_wire):
        return to_jsonable(to_wire())
    to_b58 = getattr(value, "to_b58", None)
    if callable(to_b58):
        return to_b58()
    return value


def encode(message: HasSignatureField) -> bytes:
    """Deterministic byte encoding of a request as it goes on the wire."""
    payload = to_jsonable(message.to_wire())
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def canonical_bytes(message: HasSignatureField) -> bytes:
    """Bytes a signature over ``message`` covers: the encoding with an empty signature."""
    unsigned = dataclasses.replace(message, signature=b"")
    return encode(unsigned)


def sign(message: HasSignatureField, keypair: Signer) -> bytes:
    data = canonical_bytes(message)
    try:
        signature = keypair.sign(data)
    except SigningError:
        raise
    except Exception as exc:
        raise SigningError(f"failed to sign {type(message).__name__}: {exc}") from exc
    _log.debug("signed %s (%d bytes, timestamp=%s)", type(message).__name__, len(data), message.timestamp)
    return signature


def sign_in_place(message: M, keypair: Signer) -> M:
    message.signature = sign(message, keypair)
    return message


def verify(message: HasSignatureField, public_key: Verifier) -> bool:
    if not message.signature:
        return False
    return public_key.verify(bytes(message.signature), canonical_bytes(message))


@dataclass(slots=True)
class BatchSignResult(Generic[T, M]):
    """Outcome of signing a batch: every input lands in exactly one list, in order.

    ``outcomes`` keeps every input in the order it was supplied, with the error
    that stopped it or ``None`` once signed.
    """

    succeeded: list[tuple[T, M]] = field(default_factory=list)
    failed: list[tuple[T, IotConfigError]] = field(default_factory=list)
    outcomes: list[tuple[T, IotConfigError | None]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed)

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def messages(self) -> list[M]:
        return [message for _, message in self.succeeded]

    def report(self) -> list[dict[str, Any]]:
        rows: list[dict[str, Any]] = []
        for item, err in self.outcomes:
            row: dict[str, Any] = {"input": str(item), "signed": err is None}
            if err is not None:
                row["error"] = str(err)
            rows.append(row)
        return rows


def sign_batch(
    items: Iterable[T],
    build: Callable[[T, int], M],
    keypair: Signer,
    *,
    clock: Callable[[], int] = current_timestamp,
) -> BatchSignResult[T, M]:
    """Build and sign one request per item, each with its own timestamp."""

    result: BatchSignResult[T, M] = BatchSignResult()
    for item in items:
        try:
            message = sign_in_place(build(item, clock()), keypair)
        except IotConfigError as exc:
            _log.warning("could not sign batch element %s: %s", item, exc)
            result.failed.append((item, exc))
            result.outcomes.append((item, exc))
            continue
        result.succeeded.append((item, message))
        result.outcomes.append((item, None))
    return result
