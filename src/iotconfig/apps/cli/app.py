"""``iotconfig`` command line entry point."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from iotconfig.services.devaddr import DevaddrConstraint
from iotconfig.services.hex_field import validate_devaddr
from iotconfig.services.logging import setup_logging
from iotconfig.services.region import Region
from iotconfig.services.region_params import RegionParams, load_indexes
from iotconfig.services.settings import ENV_CONFIG_HOST, ENV_KEYPAIR_BIN, load_settings

from .commands import env, org, route, session_key_filter
from .context import CliContext, get_cli
from .output import Msg, cli_errors, emit, pretty_json

app = typer.Typer(help="Manage LoRaWAN routing allocations on a Helium IoT config service.", no_args_is_help=True)
app.add_typer(env.app, name="env")
app.add_typer(org.app, name="org")
app.add_typer(route.app, name="route")
app.add_typer(session_key_filter.app, name="session-key-filter")
app.add_typer(session_key_filter.app, name="skf", hidden=True)

region_params_app = typer.Typer(help="Region params")
app.add_typer(region_params_app, name="region-params")


@app.callback()
@cli_errors
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(None, "--config", help="Settings file (default ./iotconfig.yaml)"),
    config_host: Optional[str] = typer.Option(None, "--config-host", envvar=ENV_CONFIG_HOST),
    keypair: Optional[Path] = typer.Option(None, "--keypair", envvar=ENV_KEYPAIR_BIN),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING, ..."),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit log records as JSON lines"),
):
    settings = load_settings(config).merged(
        {"config_host": config_host, "keypair": str(keypair) if keypair else None, "log_level": log_level}
    )
    setup_logging(settings.log_level, json_output=json_logs)
    http_transport = ctx.obj.get("http_transport") if isinstance(ctx.obj, dict) else None
    ctx.obj = CliContext(settings=settings, http_transport=http_transport)


@app.command("subnet-mask")
@cli_errors
def subnet_mask(
    start_addr: str = typer.Argument(..., help="First DevAddr (hex)"),
    end_addr: str = typer.Argument(..., help="Last DevAddr (hex)"),
):
    """Print the subnet blocks covering a DevAddr range."""
    constraint = DevaddrConstraint(start_addr=validate_devaddr(start_addr), end_addr=validate_devaddr(end_addr))
    emit(Msg.ok(pretty_json([block.as_dict() for block in constraint.to_subnet()])))


@region_params_app.command("push")
@cli_errors
def push_region_params(
    ctx: typer.Context,
    region: str = typer.Argument(..., help="Region, e.g. us915 or as923_1"),
    params_file: Path = typer.Option(..., "--params-file"),
    index_file: Optional[Path] = typer.Option(None, "--index-file"),
    commit: bool = typer.Option(False, "--commit"),
):
    """Push a region params collection to the config service."""
    cli = get_cli(ctx)
    parsed = Region.parse(region)
    params = RegionParams.from_file(params_file)
    indexes = load_indexes(index_file)
    if not commit:
        emit(Msg.dry_run(f"load {len(params.region_params)} params and {len(indexes)} index bytes for {parsed.value}"))
        return
    cli.gateway_client().load_region(parsed, params, indexes, cli.keypair())
    emit(Msg.ok(f"{parsed.value} region params pushed"))


def run() -> None:
    app()


if __name__ == "__main__":
    run()
