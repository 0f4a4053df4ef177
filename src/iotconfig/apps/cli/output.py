"""Rendering of command results."""
from __future__ import annotations

import functools
import json
from dataclasses import dataclass
from typing import Any, Callable, Literal

import typer

from iotconfig.services.errors import IotConfigError

__all__ = ["Msg", "pretty_json", "emit", "cli_errors"]

Kind = Literal["dry_run", "success", "error"]


@dataclass(frozen=True, slots=True)
class Msg:
    kind: Kind
    text: str

    @classmethod
    def ok(cls, text: str) -> "Msg":
        return cls("success", text)

    @classmethod
    def err(cls, text: str) -> "Msg":
        return cls("error", text)

    @classmethod
    def dry_run(cls, text: str) -> "Msg":
        return cls("dry_run", text)

    def __str__(self) -> str:
        if self.kind == "dry_run":
            return f"== DRY RUN == (pass `--commit`)\n{self.text}"
        if self.kind == "success":
            return f"✓ {self.text}"
        return f"✗ {self.text}"


def _plain(value: Any) -> Any:
    as_dict = getattr(value, "as_dict", None)
    if callable(as_dict):
        return as_dict()
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def pretty_json(value: Any) -> str:
    return json.dumps(_plain(value), ensure_ascii=False, indent=2, default=str)


def emit(msg: Msg) -> None:
    typer.echo(str(msg), err=msg.kind == "error")
    if msg.kind == "error":
        raise typer.Exit(1)


def cli_errors(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Turn library errors into a one-line failure message and exit status 1."""

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return fn(*args, **kwargs)
        except IotConfigError as exc:
            emit(Msg.err(str(exc)))

    return wrapper
