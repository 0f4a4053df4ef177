from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx
import typer

from iotconfig.services.config_api.client import GatewayClient, OrgClient, RouteClient, SkfClient
from iotconfig.services.config_api.transport import ConfigServiceTransport
from iotconfig.services.crypto.keypair import Keypair
from iotconfig.services.route_store import RouteStore
from iotconfig.services.settings import Settings


@dataclass
class CliContext:
    settings: Settings
    http_transport: httpx.BaseTransport | None = None

    def transport(self) -> ConfigServiceTransport:
        return ConfigServiceTransport.from_settings(self.settings, transport=self.http_transport)

    def org_client(self) -> OrgClient:
        return OrgClient(self.transport())

    def route_client(self) -> RouteClient:
        return RouteClient(self.transport())

    def skf_client(self) -> SkfClient:
        return SkfClient(self.transport())

    def gateway_client(self) -> GatewayClient:
        return GatewayClient(self.transport())

    def keypair(self) -> Keypair:
        return Keypair.from_file(self.settings.keypair_path())

    def route_store(self) -> RouteStore:
        return RouteStore(self.settings.out_dir_path())

    def oui(self, value: int | None) -> int:
        return value if value is not None else self.settings.require_oui()


def get_cli(ctx: typer.Context) -> CliContext:
    obj: Any = ctx.find_root().obj
    if not isinstance(obj, CliContext):
        raise typer.BadParameter("CLI context is not initialised")
    return obj
