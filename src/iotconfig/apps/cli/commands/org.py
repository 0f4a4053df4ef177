"""Organization commands."""

from __future__ import annotations

from typing import List, Optional

import typer

from iotconfig.services.crypto.keypair import PublicKey
from iotconfig.services.hex_field import validate_net_id
from iotconfig.services.settings import ENV_OUI

from ..context import get_cli
from ..output import Msg, cli_errors, emit, pretty_json

app = typer.Typer(help="Org")


@app.command("list")
@cli_errors
def cmd_list(ctx: typer.Context):
    """Get all Orgs."""
    orgs = get_cli(ctx).org_client().list()
    emit(Msg.ok(pretty_json(orgs)))


@app.command("get")
@cli_errors
def cmd_get(ctx: typer.Context, oui: Optional[int] = typer.Option(None, "--oui", envvar=ENV_OUI)):
    """Get an Organization you own."""
    cli = get_cli(ctx)
    emit(Msg.ok(pretty_json(cli.org_client().get(cli.oui(oui)))))


@app.command("create-helium")
@cli_errors
def cmd_create_helium(
    ctx: typer.Context,
    owner: str = typer.Option(..., "--owner"),
    payer: str = typer.Option(..., "--payer"),
    devaddr_count: int = typer.Option(..., "--devaddr-count"),
    delegate: List[str] = typer.Option([], "--delegate", help="Delegate key (repeatable)"),
    commit: bool = typer.Option(False, "--commit"),
):
    """Create a new Helium Organization."""
    owner_key, payer_key = PublicKey.from_b58(owner), PublicKey.from_b58(payer)
    delegates = [PublicKey.from_b58(key) for key in delegate]
    if not commit:
        emit(Msg.dry_run(f"create helium org owned by {owner_key} paid by {payer_key} with {devaddr_count} devaddrs"))
        return
    cli = get_cli(ctx)
    response = cli.org_client().create_helium(owner_key, payer_key, devaddr_count, cli.keypair(), delegate_keys=delegates)
    emit(Msg.ok(f"helium organization created\n{pretty_json(response)}"))


@app.command("create-roaming")
@cli_errors
def cmd_create_roaming(
    ctx: typer.Context,
    owner: str = typer.Option(..., "--owner"),
    payer: str = typer.Option(..., "--payer"),
    net_id: str = typer.Option(..., "--net-id"),
    delegate: List[str] = typer.Option([], "--delegate", help="Delegate key (repeatable)"),
    commit: bool = typer.Option(False, "--commit"),
):
    """Create a new Roaming Organization (admin only)."""
    owner_key, payer_key = PublicKey.from_b58(owner), PublicKey.from_b58(payer)
    parsed_net_id = validate_net_id(net_id)
    delegates = [PublicKey.from_b58(key) for key in delegate]
    if not commit:
        emit(Msg.dry_run(f"create roaming org for net_id {parsed_net_id} owned by {owner_key} paid by {payer_key}"))
        return
    cli = get_cli(ctx)
    response = cli.org_client().create_roamer(owner_key, payer_key, parsed_net_id, cli.keypair(), delegate_keys=delegates)
    emit(Msg.ok(f"roaming organization created\n{pretty_json(response)}"))
