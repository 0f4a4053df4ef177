"""Region parameter collections pushed to gateways through the config service."""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .errors import SettingsError

__all__ = ["RegionParams", "load_indexes"]


@dataclass(slots=True)
class RegionParams:
    """Channel plan entries, kept as the JSON objects found in the params file."""

    region_params: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_file(cls, path: Path) -> "RegionParams":
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise SettingsError(f"failed to read region params from {path}: {exc}") from exc
        if isinstance(data, dict):
            data = data.get("region_params", [])
        if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
            raise SettingsError(f"{path}: region params must be a list of objects")
        return cls(region_params=list(data))

    def to_wire(self) -> dict[str, Any]:
        return {"region_params": self.region_params}


def load_indexes(path: Path | None) -> bytes:
    """Raw h3 hex index blob for a region; empty when no file is given."""
    if path is None:
        return b""
    try:
        return Path(path).read_bytes()
    except OSError as exc:
        raise SettingsError(f"failed to read index file {path}: {exc}") from exc
