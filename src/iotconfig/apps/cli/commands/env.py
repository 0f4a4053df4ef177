"""Environment commands: settings file, environment variables and keypairs."""

from __future__ import annotations

from pathlib import Path

import typer

from iotconfig.services.crypto.keypair import Keypair, Network
from iotconfig.services.errors import KeyMaterialError
from iotconfig.services.hex_field import validate_net_id
from iotconfig.services.settings import DEFAULT_SETTINGS_FILE, save_settings

from ..context import get_cli
from ..output import Msg, cli_errors, emit, pretty_json

app = typer.Typer(help="Environment")


@app.command("init")
@cli_errors
def cmd_init(
    ctx: typer.Context,
    out: Path = typer.Option(DEFAULT_SETTINGS_FILE, "--out", help="Where to write the settings file"),
):
    """Write a settings file and print matching environment exports."""
    current = get_cli(ctx).settings
    config_host = typer.prompt("Config service host", default=current.config_host)
    keypair = typer.prompt("Keypair file", default=current.keypair)
    net_id = typer.prompt("Net ID", default=current.net_id)
    oui = typer.prompt("OUI", default=str(current.oui or ""), show_default=False)
    max_copies = typer.prompt("Default max copies", default=current.max_copies, type=int)

    settings = current.merged(
        {
            "config_host": config_host,
            "keypair": keypair,
            "net_id": validate_net_id(net_id).format(),
            "oui": int(oui) if oui.strip() else None,
            "max_copies": max_copies,
        }
    )
    path = save_settings(settings, out)
    lines = "\n".join(settings.env_exports())
    emit(Msg.ok(f"settings written to {path}\nor put these in your shell profile:\n\n{lines}"))


@app.command("info")
@cli_errors
def cmd_info(ctx: typer.Context):
    """View information about your environment."""
    settings = get_cli(ctx).settings
    info: dict[str, object] = {"settings": settings.to_dict()}
    path = settings.keypair_path()
    if path.exists():
        try:
            info["public_key"] = str(Keypair.from_file(path).public_key)
        except KeyMaterialError as exc:
            info["public_key"] = f"unreadable: {exc}"
    else:
        info["public_key"] = "no keypair file"
    typer.echo(pretty_json(info))


@app.command("generate-keypair")
@cli_errors
def cmd_generate_keypair(
    out_file: Path = typer.Argument(Path("./keypair.bin")),
    testnet: bool = typer.Option(False, "--testnet", help="Tag the key for the test network"),
    commit: bool = typer.Option(False, "--commit", help="Overwrite <out_file> if it already exists"),
):
    """Make a new keypair."""
    if out_file.exists() and not commit:
        emit(Msg.err(f"{out_file} exists, pass --commit to overwrite"))
    keypair = Keypair.generate(Network.TESTNET if testnet else Network.MAINNET)
    keypair.write(out_file)
    emit(Msg.ok(f"new keypair created and saved to {out_file}\npublic key: {keypair.public_key}"))
