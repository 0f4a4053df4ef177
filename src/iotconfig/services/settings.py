"""CLI settings: defaults, then ``iotconfig.yaml``, then ``HELIUM_*`` environment variables."""
from __future__ import annotations

import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Mapping

import yaml

from .errors import FormatError, SettingsError
from .hex_field import HexNetID

__all__ = [
    "ENV_CONFIG_HOST",
    "ENV_KEYPAIR_BIN",
    "ENV_NET_ID",
    "ENV_OUI",
    "ENV_MAX_COPIES",
    "ENV_LOG_LEVEL",
    "DEFAULT_SETTINGS_FILE",
    "Settings",
    "load_settings",
    "save_settings",
]

ENV_CONFIG_HOST = "HELIUM_CONFIG_HOST"
ENV_KEYPAIR_BIN = "HELIUM_KEYPAIR_BIN"
ENV_NET_ID = "HELIUM_NET_ID"
ENV_OUI = "HELIUM_OUI"
ENV_MAX_COPIES = "HELIUM_MAX_COPIES"
ENV_LOG_LEVEL = "IOTCONFIG_LOG_LEVEL"

DEFAULT_SETTINGS_FILE = Path("iotconfig.yaml")

_ENV_FIELDS = {
    "config_host": ENV_CONFIG_HOST,
    "keypair": ENV_KEYPAIR_BIN,
    "net_id": ENV_NET_ID,
    "oui": ENV_OUI,
    "max_copies": ENV_MAX_COPIES,
    "log_level": ENV_LOG_LEVEL,
}


@dataclass
class Settings:
    config_host: str = "http://localhost:50051"
    keypair: str = "./keypair.bin"
    net_id: str = "C00053"
    oui: int | None = None
    max_copies: int = 5
    out_dir: str = "./routes"
    timeout: float = 15.0
    log_level: str = "INFO"

    def keypair_path(self) -> Path:
        return Path(self.keypair).expanduser()

    def out_dir_path(self) -> Path:
        return Path(self.out_dir).expanduser()

    def hex_net_id(self) -> HexNetID:
        return HexNetID.parse(self.net_id)

    def require_oui(self) -> int:
        if self.oui is None:
            raise SettingsError(f"no OUI configured; pass --oui or set {ENV_OUI}")
        return self.oui

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def env_exports(self) -> list[str]:
        """Shell ``export`` lines reproducing these settings through the environment."""
        lines = []
        for name, env in _ENV_FIELDS.items():
            value = getattr(self, name)
            if value is None:
                continue
            lines.append(f"export {env}={value}")
        return lines

    def merged(self, overrides: Mapping[str, Any]) -> "Settings":
        data = self.to_dict()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return _coerce(data, source="overrides")


def _coerce(data: Mapping[str, Any], *, source: str) -> Settings:
    known = {f.name: f for f in fields(Settings)}
    unknown = sorted(set(data) - set(known))
    if unknown:
        raise SettingsError(f"{source}: unknown settings {', '.join(unknown)}")
    values: dict[str, Any] = {}
    try:
        for name, value in data.items():
            if value is None:
                values[name] = None
            elif name in ("oui", "max_copies"):
                values[name] = int(value)
            elif name == "timeout":
                values[name] = float(value)
            else:
                values[name] = str(value)
    except (TypeError, ValueError) as exc:
        raise SettingsError(f"{source}: {exc}") from exc
    settings = Settings(**values)
    try:
        settings.hex_net_id()
    except FormatError as exc:
        raise SettingsError(f"{source}: {exc}") from exc
    return settings


def _read_file(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise SettingsError(f"failed to read settings from {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise SettingsError(f"{path}: settings must be a mapping")
    return data


def load_settings(path: Path | None = None, *, environ: Mapping[str, str] | None = None) -> Settings:
    env = os.environ if environ is None else environ
    data = Settings().to_dict()
    target = path if path is not None else DEFAULT_SETTINGS_FILE
    if target.exists():
        data.update(_read_file(target))
    elif path is not None:
        raise SettingsError(f"settings file {path} does not exist")
    for name, var in _ENV_FIELDS.items():
        if env.get(var):
            data[name] = env[var]
    return _coerce(data, source=str(target))


def save_settings(settings: Settings, path: Path | None = None) -> Path:
    target = path if path is not None else DEFAULT_SETTINGS_FILE
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(yaml.safe_dump(settings.to_dict(), sort_keys=False, allow_unicode=True), encoding="utf-8")
    return target
