"""Session key filter commands."""

from __future__ import annotations

from typing import Optional

import typer

from iotconfig.services.hex_field import validate_devaddr
from iotconfig.services.models import SessionKeyFilter
from iotconfig.services.settings import ENV_OUI

from ..context import get_cli
from ..output import Msg, cli_errors, emit, pretty_json

app = typer.Typer(help="Session Key Filter")


def _filter(cli_oui: int, devaddr: str, session_key: str) -> SessionKeyFilter:
    return SessionKeyFilter(oui=cli_oui, devaddr=validate_devaddr(devaddr), session_key=session_key)


@app.command("list")
@cli_errors
def cmd_list(ctx: typer.Context, oui: Optional[int] = typer.Option(None, "--oui", envvar=ENV_OUI)):
    """List all session key filters of an OUI."""
    cli = get_cli(ctx)
    emit(Msg.ok(pretty_json(cli.skf_client().list_filters(cli.oui(oui), cli.keypair()))))


@app.command("get")
@cli_errors
def cmd_get(
    ctx: typer.Context,
    devaddr: str = typer.Option(..., "--devaddr", "-d"),
    oui: Optional[int] = typer.Option(None, "--oui", envvar=ENV_OUI),
):
    """List the session key filters of one DevAddr."""
    cli = get_cli(ctx)
    filters = cli.skf_client().get_filters(cli.oui(oui), validate_devaddr(devaddr), cli.keypair())
    emit(Msg.ok(pretty_json(filters)))


@app.command("add")
@cli_errors
def cmd_add(
    ctx: typer.Context,
    devaddr: str = typer.Option(..., "--devaddr", "-d"),
    session_key: str = typer.Option(..., "--session-key", "-s"),
    oui: Optional[int] = typer.Option(None, "--oui", envvar=ENV_OUI),
    commit: bool = typer.Option(False, "--commit", "-c"),
):
    """Add a session key filter."""
    cli = get_cli(ctx)
    skf = _filter(cli.oui(oui), devaddr, session_key)
    if not commit:
        emit(Msg.dry_run(pretty_json(skf)))
        return
    result = cli.skf_client().add_filters([skf], cli.keypair())
    emit(Msg.ok(f"added {len(result.sent)} session key filter(s)"))


@app.command("remove")
@cli_errors
def cmd_remove(
    ctx: typer.Context,
    devaddr: str = typer.Option(..., "--devaddr", "-d"),
    session_key: str = typer.Option(..., "--session-key", "-s"),
    oui: Optional[int] = typer.Option(None, "--oui", envvar=ENV_OUI),
    commit: bool = typer.Option(False, "--commit", "-c"),
):
    """Remove a session key filter."""
    cli = get_cli(ctx)
    skf = _filter(cli.oui(oui), devaddr, session_key)
    if not commit:
        emit(Msg.dry_run(pretty_json(skf)))
        return
    result = cli.skf_client().remove_filters([skf], cli.keypair())
    emit(Msg.ok(f"removed {len(result.sent)} session key filter(s)"))
