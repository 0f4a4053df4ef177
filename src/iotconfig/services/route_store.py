"""Local cache of routes, one pretty-printed JSON file per route id."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable

from pydantic import ValidationError

from .errors import RouteStoreError
from .route import Route

__all__ = ["RouteStore"]

_log = logging.getLogger("iotconfig.route_store")


class RouteStore:
    def __init__(self, out_dir: Path) -> None:
        self.out_dir = Path(out_dir)

    def path_for(self, route_id: str) -> Path:
        if not route_id or "/" in route_id or "\\" in route_id or route_id in (".", ".."):
            raise RouteStoreError(f"invalid route id {route_id!r}")
        return self.out_dir / f"{route_id}.json"

    def write(self, route: Route) -> Path:
        path = self.path_for(route.id)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(route.as_dict(), ensure_ascii=False, indent=2) + "\n", encoding="utf-8")
        _log.debug("wrote route %s to %s", route.id, path)
        return path

    def write_all(self, routes: Iterable[Route]) -> list[Path]:
        return [self.write(route) for route in routes]

    def read(self, route_id: str) -> Route:
        path = self.path_for(route_id)
        if not path.exists():
            raise RouteStoreError(f"route {route_id} is not cached in {self.out_dir}")
        try:
            return Route.model_validate_json(path.read_text(encoding="utf-8"))
        except ValidationError as exc:
            raise RouteStoreError(f"failed to parse {path}: {exc}") from exc

    def remove(self, route_id: str) -> bool:
        path = self.path_for(route_id)
        if not path.exists():
            return False
        path.unlink()
        return True

    def list_ids(self) -> list[str]:
        if not self.out_dir.exists():
            return []
        return sorted(p.stem for p in self.out_dir.glob("*.json"))
