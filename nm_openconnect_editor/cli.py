"""Command line interface for inspecting and converting OpenConnect profiles."""

from __future__ import annotations

from pathlib import Path
from typing import List, NoReturn, Optional

import typer
import yaml
from rich.console import Console
from rich.table import Table

from .core.config import CONFIG_PATH, load_config
from .core.connection import Connection, ConnectionProfile
from .core.errors import ConfigError, EditorLoadError, ImportExportError
from .core.plugin import EditorCapability, OpenconnectEditorPlugin
from .core.protocols import ProtocolFlag
from .core.secrets import TokenSecretStore
from .utils.logging import set_level

console = Console()
app = typer.Typer(add_completion=False, help="Import, export and inspect OpenConnect VPN profiles")

FLAG_LABELS = {
    ProtocolFlag.PROXY: "proxy",
    ProtocolFlag.CSD: "csd",
    ProtocolFlag.AUTH_CERT: "cert",
    ProtocolFlag.AUTH_OTP: "otp",
    ProtocolFlag.AUTH_STOKEN: "stoken",
}

state = {"config_path": CONFIG_PATH}


def _fail(exc: Exception) -> NoReturn:
    console.print(f"[red]{exc}[/red]", soft_wrap=True)
    raise typer.Exit(code=1)


def _load_dump(path: Path) -> dict:
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except (OSError, yaml.YAMLError) as exc:
        _fail(exc)
    if not isinstance(data, dict):
        _fail(ValueError(f"{path} does not contain a connection mapping"))
    return data


def _plugin() -> OpenconnectEditorPlugin:
    try:
        config = load_config(state["config_path"])
    except ConfigError as exc:
        _fail(exc)
    set_level(config.log_level)
    return OpenconnectEditorPlugin(config)


@app.callback()
def main(config: Optional[Path] = typer.Option(None, "--config", help="Path to the plugin configuration file")) -> None:
    if config is not None:
        state["config_path"] = config


@app.command("import")
def import_(
    path: Path,
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the connection as YAML"),
    store_secret: bool = typer.Option(False, "--store-secret", help="Move the soft-token secret into the keyring"),
) -> None:
    """Import a profile file and show the resulting connection."""
    if store_secret and output is None:
        # the keyring entry is keyed by the connection UUID, which only the YAML dump keeps
        _fail(ValueError("--store-secret needs --output to keep the connection UUID"))
    plugin = _plugin()
    try:
        connection = plugin.import_(path)
    except ImportExportError as exc:
        _fail(exc)
    include_secrets = True
    if store_secret:
        store = TokenSecretStore(plugin.config.keyring_service)
        if store.save(connection):
            console.print("Soft-token secret stored in the keyring")
            include_secrets = False
    if output is not None:
        with output.open("w", encoding="utf-8") as handle:
            yaml.safe_dump(connection.to_dict(include_secrets=include_secrets), handle, sort_keys=False)
        console.print(f"Wrote {output}")
        return
    profile = ConnectionProfile.from_connection(connection)
    table = Table(title=f"Imported from {path}")
    table.add_column("Setting")
    table.add_column("Value")
    for key, value in profile.to_dict().items():
        if key == "token_secret" and value:
            value = "********"
        table.add_row(key, "-" if value is None else str(value))
    console.print(table)


@app.command()
def export(settings: Path, destination: Path) -> None:
    """Write a profile file from a YAML connection dump."""
    plugin = _plugin()
    data = _load_dump(settings)
    if "vpn" in data:
        connection = Connection.from_dict(data)
    else:
        connection = ConnectionProfile.from_dict(data).to_connection()
    TokenSecretStore(plugin.config.keyring_service).fill(connection)
    try:
        plugin.export(destination, connection)
    except ImportExportError as exc:
        _fail(exc)
    console.print(f"[green]Exported {destination}[/green]")


@app.command()
def protocols() -> None:
    """List the VPN protocols the engine supports."""
    plugin = _plugin()
    table = Table(title="Supported protocols")
    table.add_column("Name")
    table.add_column("Description")
    table.add_column("Features")
    for protocol in plugin.list_protocols():
        features: List[str] = [label for flag, label in FLAG_LABELS.items() if protocol.supports(flag)]
        table.add_row(protocol.name, protocol.display_name(), ", ".join(features) or "-")
    console.print(table)


@app.command()
def details(name: str) -> None:
    """Show the "add connection" details for a protocol."""
    plugin = _plugin()
    detail = plugin.get_service_add_detail(plugin.service, name)
    if detail is None:
        console.print(f"[red]Protocol {name} not supported[/red]")
        raise typer.Exit(code=1)
    console.print(f"{detail.pretty_name}: {detail.description}")
    if detail.key:
        console.print(f"Presets {detail.key}={detail.value}")


@app.command()
def capabilities() -> None:
    """Print the capabilities of the plugin."""
    plugin = _plugin()
    supported = plugin.get_capabilities()
    for flag in (EditorCapability.IMPORT, EditorCapability.EXPORT, EditorCapability.IPV6):
        if flag in supported:
            console.print(flag.name.lower())


@app.command()
def editor(settings: Path) -> None:
    """Resolve the graphical editor for a YAML connection dump."""
    plugin = _plugin()
    connection = Connection.from_dict(_load_dump(settings))
    try:
        editor_handle = plugin.get_editor(connection)
    except EditorLoadError as exc:
        _fail(exc)
    console.print(f"Editor: {editor_handle!r}")


def run_cli(argv: List[str] | None = None) -> int:
    try:
        result = app(args=argv, prog_name="nm-openconnect-editor", standalone_mode=False)
    except typer.Exit as exc:
        return exc.exit_code
    # click hands back the exit code instead of raising when not standalone
    return result if isinstance(result, int) else 0
