"""Route commands, including the EUI and DevAddr sub-commands."""

from __future__ import annotations

from typing import Any, Callable, Optional

import typer

from iotconfig.services.config_api.client import BatchUpdateResult
from iotconfig.services.devaddr import DevaddrRange
from iotconfig.services.hex_field import validate_devaddr, validate_eui, validate_net_id
from iotconfig.services.models import Eui
from iotconfig.services.region import Region
from iotconfig.services.route import Route
from iotconfig.services.settings import ENV_MAX_COPIES, ENV_NET_ID, ENV_OUI

from ..context import CliContext, get_cli
from ..output import Msg, cli_errors, emit, pretty_json

app = typer.Typer(help="Route")
update_app = typer.Typer(help="Update Route component")
euis_app = typer.Typer(help="Operate on EUIs for a Route")
devaddrs_app = typer.Typer(help="Operate on Devaddrs for a Route")
app.add_typer(update_app, name="update")
app.add_typer(euis_app, name="euis")
app.add_typer(devaddrs_app, name="devaddrs")


def _batch_message(verb: str, result: BatchUpdateResult) -> Msg:
    # batches are sent all-or-nothing here; signing failures surface as BatchSigningError
    return Msg.ok(f"{verb} {', '.join(str(item) for item in result.sent)}")


def _update_route(ctx: typer.Context, route_id: str, commit: bool, mutate: Callable[[Route], Any]) -> None:
    cli = get_cli(ctx)
    keypair = cli.keypair()
    client = cli.route_client()
    route = client.get(route_id, keypair)
    mutate(route)
    if not commit:
        emit(Msg.dry_run(pretty_json(route)))
        return
    updated = client.push(route, keypair)
    emit(Msg.ok(f"route {route_id} updated\n{pretty_json(updated)}"))


# routes ----------------------------------------------------------------------
@app.command("list")
@cli_errors
def cmd_list(
    ctx: typer.Context,
    oui: Optional[int] = typer.Option(None, "--oui", envvar=ENV_OUI),
    commit: bool = typer.Option(False, "--commit", help="Also write the routes to the local cache"),
):
    """List all Routes for an OUI."""
    cli = get_cli(ctx)
    routes = cli.route_client().list(cli.oui(oui), cli.keypair())
    if commit:
        cli.route_store().write_all(routes)
    emit(Msg.ok(pretty_json(routes)))


@app.command("get")
@cli_errors
def cmd_get(
    ctx: typer.Context,
    route_id: str = typer.Option(..., "--route-id", "-r"),
    commit: bool = typer.Option(False, "--commit", help="Also write the route to the local cache"),
):
    """Get a Route by ID."""
    cli = get_cli(ctx)
    route = cli.route_client().get(route_id, cli.keypair())
    if commit:
        cli.route_store().write(route)
    emit(Msg.ok(pretty_json(route)))


@app.command("new")
@cli_errors
def cmd_new(
    ctx: typer.Context,
    net_id: Optional[str] = typer.Option(None, "--net-id", envvar=ENV_NET_ID),
    oui: Optional[int] = typer.Option(None, "--oui", envvar=ENV_OUI),
    max_copies: Optional[int] = typer.Option(None, "--max-copies", envvar=ENV_MAX_COPIES),
    commit: bool = typer.Option(False, "--commit", "-c"),
):
    """Create new Route."""
    cli = get_cli(ctx)
    route = Route.new(
        net_id=validate_net_id(net_id) if net_id else cli.settings.hex_net_id(),
        oui=cli.oui(oui),
        max_copies=max_copies if max_copies is not None else cli.settings.max_copies,
    )
    if not commit:
        emit(Msg.dry_run(pretty_json(route)))
        return
    created = cli.route_client().create_route(route, cli.keypair())
    cli.route_store().write(created)
    emit(Msg.ok(f"route created\n{pretty_json(created)}"))


@app.command("delete")
@cli_errors
def cmd_delete(
    ctx: typer.Context,
    route_id: str = typer.Option(..., "--route-id", "-r"),
    commit: bool = typer.Option(False, "--commit", "-c"),
):
    """Remove Route."""
    cli = get_cli(ctx)
    if not commit:
        emit(Msg.dry_run(f"delete route {route_id}"))
        return
    removed = cli.route_client().delete(route_id, cli.keypair())
    cli.route_store().remove(route_id)
    emit(Msg.ok(f"route {route_id} deleted\n{pretty_json(removed)}"))


@app.command("activate")
@cli_errors
def cmd_activate(
    ctx: typer.Context,
    route_id: str = typer.Option(..., "--route-id", "-r"),
    commit: bool = typer.Option(False, "--commit", "-c"),
):
    """Turn on routing for a Route. The route field `locked` supersedes this setting."""
    _update_route(ctx, route_id, commit, Route.activate)


@app.command("deactivate")
@cli_errors
def cmd_deactivate(
    ctx: typer.Context,
    route_id: str = typer.Option(..., "--route-id", "-r"),
    commit: bool = typer.Option(False, "--commit", "-c"),
):
    """Turn off routing for a Route. The route field `locked` supersedes this setting."""
    _update_route(ctx, route_id, commit, Route.deactivate)


# route updates ---------------------------------------------------------------
@update_app.command("max-copies")
@cli_errors
def cmd_update_max_copies(
    ctx: typer.Context,
    route_id: str = typer.Option(..., "--route-id", "-r"),
    max_copies: int = typer.Option(..., "--max-copies", "-m"),
    commit: bool = typer.Option(False, "--commit", "-c"),
):
    """Update max number of packets to buy."""
    _update_route(ctx, route_id, commit, lambda r: r.set_max_copies(max_copies))


@update_app.command("server")
@cli_errors
def cmd_update_server(
    ctx: typer.Context,
    route_id: str = typer.Option(..., "--route-id", "-r"),
    host: str = typer.Option(..., "--host"),
    port: int = typer.Option(..., "--port"),
    commit: bool = typer.Option(False, "--commit", "-c"),
):
    """Update server destination details."""
    _update_route(ctx, route_id, commit, lambda r: r.set_server(host, port))


@update_app.command("http")
@cli_errors
def cmd_update_http(
    ctx: typer.Context,
    route_id: str = typer.Option(..., "--route-id", "-r"),
    path: str = typer.Option(..., "--path", "-p", help="Path part of the server URL; host and port come from the server"),
    dedupe_timeout: int = typer.Option(250, "--dedupe-timeout", "-d"),
    auth_header: Optional[str] = typer.Option(None, "--auth-header", "-a"),
    commit: bool = typer.Option(False, "--commit", "-c"),
):
    """Set the Route protocol to HTTP roaming."""
    _update_route(ctx, route_id, commit, lambda r: r.set_http(path, dedupe_timeout, auth_header))


@update_app.command("add-gwmp-region")
@cli_errors
def cmd_add_gwmp_region(
    ctx: typer.Context,
    region: str = typer.Argument(...),
    region_port: int = typer.Argument(...),
    route_id: str = typer.Option(..., "--route-id", "-r"),
    commit: bool = typer.Option(False, "--commit", "-c"),
):
    """Set the Route protocol to GWMP (UDP) and map a region to a port."""
    parsed = Region.parse(region)
    _update_route(ctx, route_id, commit, lambda r: r.gwmp_add_mapping(parsed, region_port))


@update_app.command("remove-gwmp-region")
@cli_errors
def cmd_remove_gwmp_region(
    ctx: typer.Context,
    region: str = typer.Argument(...),
    route_id: str = typer.Option(..., "--route-id", "-r"),
    commit: bool = typer.Option(False, "--commit", "-c"),
):
    """Remove a region mapping from a GWMP Route."""
    parsed = Region.parse(region)
    _update_route(ctx, route_id, commit, lambda r: r.gwmp_remove_mapping(parsed))


@update_app.command("packet-router")
@cli_errors
def cmd_update_packet_router(
    ctx: typer.Context,
    route_id: str = typer.Option(..., "--route-id", "-r"),
    commit: bool = typer.Option(False, "--commit", "-c"),
):
    """Set the Route protocol to packet router (gRPC)."""
    _update_route(ctx, route_id, commit, Route.set_packet_router)


# euis ------------------------------------------------------------------------
def _eui(route_id: str, app_eui: str, dev_eui: str) -> Eui:
    return Eui(route_id=route_id, app_eui=validate_eui(app_eui), dev_eui=validate_eui(dev_eui))


@euis_app.command("list")
@cli_errors
def cmd_euis_list(ctx: typer.Context, route_id: str = typer.Option(..., "--route-id", "-r")):
    """Get all EUI pairs for a Route."""
    cli = get_cli(ctx)
    emit(Msg.ok(pretty_json(cli.route_client().get_euis(route_id, cli.keypair()))))


@euis_app.command("add")
@cli_errors
def cmd_euis_add(
    ctx: typer.Context,
    app_eui: str = typer.Option(..., "--app-eui", "-a"),
    dev_eui: str = typer.Option(..., "--dev-eui", "-d"),
    route_id: str = typer.Option(..., "--route-id", "-r"),
    commit: bool = typer.Option(False, "--commit", "-c"),
):
    """Add EUI pair to Route."""
    pair = _eui(route_id, app_eui, dev_eui)
    if not commit:
        emit(Msg.dry_run(pretty_json(pair)))
        return
    cli = get_cli(ctx)
    emit(_batch_message("added", cli.route_client().add_euis([pair], cli.keypair())))


@euis_app.command("remove")
@cli_errors
def cmd_euis_remove(
    ctx: typer.Context,
    app_eui: str = typer.Option(..., "--app-eui", "-a"),
    dev_eui: str = typer.Option(..., "--dev-eui", "-d"),
    route_id: str = typer.Option(..., "--route-id", "-r"),
    commit: bool = typer.Option(False, "--commit", "-c"),
):
    """Remove EUI pair from Route."""
    pair = _eui(route_id, app_eui, dev_eui)
    if not commit:
        emit(Msg.dry_run(pretty_json(pair)))
        return
    cli = get_cli(ctx)
    emit(_batch_message("removed", cli.route_client().remove_euis([pair], cli.keypair())))


@euis_app.command("clear")
@cli_errors
def cmd_euis_clear(
    ctx: typer.Context,
    route_id: str = typer.Option(..., "--route-id", "-r"),
    commit: bool = typer.Option(False, "--commit", "-c"),
):
    """Remove ALL EUI pairs from Route."""
    if not commit:
        emit(Msg.dry_run(f"remove all EUI pairs from route {route_id}"))
        return
    cli = get_cli(ctx)
    cli.route_client().delete_euis(route_id, cli.keypair())
    emit(Msg.ok(f"all EUI pairs removed from route {route_id}"))


# devaddrs --------------------------------------------------------------------
def _range(route_id: str, start_addr: str, end_addr: str) -> DevaddrRange:
    return DevaddrRange(route_id=route_id, start_addr=validate_devaddr(start_addr), end_addr=validate_devaddr(end_addr))


@devaddrs_app.command("list")
@cli_errors
def cmd_devaddrs_list(ctx: typer.Context, route_id: str = typer.Option(..., "--route-id", "-r")):
    """Get all Devaddr Ranges for a Route."""
    cli = get_cli(ctx)
    emit(Msg.ok(pretty_json(cli.route_client().get_devaddrs(route_id, cli.keypair()))))


@devaddrs_app.command("add")
@cli_errors
def cmd_devaddrs_add(
    ctx: typer.Context,
    start_addr: str = typer.Option(..., "--start-addr", "-s"),
    end_addr: str = typer.Option(..., "--end-addr", "-e"),
    route_id: str = typer.Option(..., "--route-id", "-r"),
    commit: bool = typer.Option(False, "--commit", "-c"),
):
    """Add Devaddr Range to Route."""
    devaddr_range = _range(route_id, start_addr, end_addr)
    if not commit:
        emit(Msg.dry_run(pretty_json(devaddr_range)))
        return
    cli = get_cli(ctx)
    emit(_batch_message("added", cli.route_client().add_devaddrs([devaddr_range], cli.keypair())))


@devaddrs_app.command("remove")
@cli_errors
def cmd_devaddrs_remove(
    ctx: typer.Context,
    start_addr: str = typer.Option(..., "--start-addr", "-s"),
    end_addr: str = typer.Option(..., "--end-addr", "-e"),
    route_id: str = typer.Option(..., "--route-id", "-r"),
    commit: bool = typer.Option(False, "--commit", "-c"),
):
    """Remove Devaddr Range from Route."""
    devaddr_range = _range(route_id, start_addr, end_addr)
    if not commit:
        emit(Msg.dry_run(pretty_json(devaddr_range)))
        return
    cli = get_cli(ctx)
    emit(_batch_message("removed", cli.route_client().remove_devaddrs([devaddr_range], cli.keypair())))


@devaddrs_app.command("subnet-mask")
@cli_errors
def cmd_devaddrs_subnet_mask(ctx: typer.Context, route_id: str = typer.Option(..., "--route-id", "-r")):
    """Print subnet blocks for all devaddr ranges in a Route."""
    cli: CliContext = get_cli(ctx)
    ranges = cli.route_client().get_devaddrs(route_id, cli.keypair())
    output = [
        {"range": r.as_dict(), "subnets": [block.as_dict() for block in r.to_subnet()]}
        for r in ranges
    ]
    emit(Msg.ok(pretty_json(output)))


@devaddrs_app.command("clear")
@cli_errors
def cmd_devaddrs_clear(
    ctx: typer.Context,
    route_id: str = typer.Option(..., "--route-id", "-r"),
    commit: bool = typer.Option(False, "--commit", "-c"),
):
    """Remove ALL Devaddr Ranges from Route."""
    if not commit:
        emit(Msg.dry_run(f"remove all devaddr ranges from route {route_id}"))
        return
    cli = get_cli(ctx)
    cli.route_client().delete_devaddrs(route_id, cli.keypair())
    emit(Msg.ok(f"all devaddr ranges removed from route {route_id}"))
