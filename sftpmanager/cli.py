"""Командная строка sftp-manager: каждая команда вызывает одну операцию сервиса."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List, NoReturn, Optional, Tuple

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from sftpmanager import __version__
from sftpmanager.app import create_application
from sftpmanager.docker_api.models import FileEntry
from sftpmanager.servers.models import (
    ConnectionFormat,
    CreateServerRequest,
    ManagedServer,
    OperationResult,
    ServerStatus,
)
from sftpmanager.servers.service import SftpServerService
from sftpmanager.settings.exceptions import SettingsError
from sftpmanager.settings.registry import SettingsRegistry
from sftpmanager.utils.paths import resolve_config_dir

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    name="sftp-manager",
    help="Manage atmoz/sftp Docker containers",
    rich_markup_mode="rich",
    no_args_is_help=True,
)
network_app = typer.Typer(
    name="network",
    help="Bind address selection",
    rich_markup_mode="rich",
    no_args_is_help=True,
)
app.add_typer(network_app, name="network")
config_app = typer.Typer(
    name="config",
    help="Application settings (config.json)",
    rich_markup_mode="rich",
    no_args_is_help=True,
)
app.add_typer(config_app, name="config")


def _service(ctx: typer.Context) -> SftpServerService:
    return ctx.find_root().obj


def _fail(message: str) -> NoReturn:
    err_console.print(f"[red]✗ Failed:[/red] {escape(message)}")
    raise typer.Exit(1)


def _check(result: OperationResult, success_message: str) -> None:
    """Печатает сообщение об успехе либо завершает команду с кодом 1."""

    if not result.success:
        _fail(result.error or "unknown error")
    console.print(f"[green]✓[/green] {success_message}")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback(help="Manage atmoz/sftp Docker containers")
def main_callback(
    ctx: typer.Context,
    home: Optional[Path] = typer.Option(
        None,
        "--home",
        envvar="SFTPM_HOME",
        help="Configuration directory",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """Создаёт сервис, если он не передан заранее через ctx.obj."""
    if ctx.obj is not None:
        return
    try:
        ctx.obj = create_application(home or resolve_config_dir())
    except (OSError, SettingsError) as exc:
        _fail(str(exc))


@app.command("create", help="Create and start a new SFTP server.")
def create_server(
    ctx: typer.Context,
    name: str = typer.Option(..., "--name", "-n", help="Container name"),
    path: Path = typer.Option(..., "--path", "-p", help="Host folder to share"),
    port: Optional[int] = typer.Option(None, "--port", "-P", help="SFTP port"),
    user: str = typer.Option("admin", "--user", "-u", help="Username"),
    password: Optional[str] = typer.Option(
        None, "--password", "-w", help="Password (generated if empty)"
    ),
    mount: Optional[str] = typer.Option(None, "--mount", "-m", help="Container mount path"),
) -> None:
    service = _service(ctx)
    result = service.create_server(
        CreateServerRequest(
            name=name,
            host_path=str(path.expanduser().resolve()),
            username=user,
            password=password,
            port=port,
            container_path=mount,
        )
    )
    _check(result, f"Server created: {name}")
    server: ManagedServer = result.data
    info = service.get_connection_info(server.name)
    console.print(f"  Port: {server.port}")
    console.print(f"  User: {server.username}")
    console.print(f"  Pass: {server.password}")
    if info is not None:
        console.print(f"  Connect: {info.command}")


@app.command("list", help="List managed SFTP servers.")
def list_servers(
    ctx: typer.Context,
    as_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    servers = _service(ctx).list_servers()
    if as_json:
        typer.echo(json.dumps([server.to_dict() for server in servers], indent=2))
        return
    if not servers:
        console.print("[dim]No servers found.[/dim]")
        return

    table = Table(title="SFTP servers")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Port")
    table.add_column("User")
    table.add_column("Path")
    table.add_column("Status")
    table.add_column("Created")
    for server in servers:
        color = "green" if server.status is ServerStatus.RUNNING else "red"
        table.add_row(
            server.name,
            str(server.port or "-"),
            server.username or "-",
            server.host_path or "-",
            f"[{color}]{server.status.value}[/{color}]",
            server.created_at or "-",
        )
    console.print(table)


@app.command("start", help="Start a server.")
def start_server(ctx: typer.Context, name: str) -> None:
    _check(_service(ctx).start_server(name), f"Started: {name}")


@app.command("stop", help="Stop a server.")
def stop_server(ctx: typer.Context, name: str) -> None:
    _check(_service(ctx).stop_server(name), f"Stopped: {name}")


@app.command("remove", help="Remove a server together with its stored credentials.")
def remove_server(
    ctx: typer.Context,
    name: str,
    force: bool = typer.Option(False, "--force", "-f", help="Skip the warning"),
) -> None:
    if not force:
        console.print(f'[yellow]This will remove server "{name}" permanently.[/yellow]')
        console.print("[dim]Use --force to confirm.[/dim]")
        return
    _check(_service(ctx).remove_server(name), f"Removed: {name}")


def _print_bulk(verb: str, total: int, succeeded: int, failed: List[str]) -> None:
    console.print(f"{verb} {succeeded}/{total} servers")
    if failed:
        _fail(", ".join(failed))


@app.command("start-all", help="Start every managed server.")
def start_all(ctx: typer.Context) -> None:
    result = _service(ctx).start_all_servers()
    _print_bulk("Started", result.total, result.succeeded, result.failed)


@app.command("stop-all", help="Stop every managed server.")
def stop_all(ctx: typer.Context) -> None:
    result = _service(ctx).stop_all_servers()
    _print_bulk("Stopped", result.total, result.succeeded, result.failed)


@app.command("status", help="Show the runtime status of a server.")
def server_status(ctx: typer.Context, name: str) -> None:
    typer.echo(_service(ctx).get_status(name))


@app.command("logs", help="Show the last log lines of a server.")
def server_logs(
    ctx: typer.Context,
    name: str,
    lines: Optional[int] = typer.Option(None, "--lines", "-l", min=1, help="Tail lines"),
) -> None:
    typer.echo(_service(ctx).get_logs(name, lines))


@app.command("files", help="List a directory inside the server container.")
def list_files(ctx: typer.Context, name: str, path: str = typer.Argument("/")) -> None:
    result = _service(ctx).list_files(name, path)
    if not result.success:
        _fail(result.error or "unknown error")
    entries: List[FileEntry] = result.data
    table = Table(title=path)
    table.add_column("Name", style="cyan")
    table.add_column("Size", justify="right")
    for entry in entries:
        label = f"[bold blue]{entry.name}/[/bold blue]" if entry.is_dir else entry.name
        table.add_row(label, "-" if entry.is_dir else str(entry.size))
    console.print(table)


@app.command("info", help="Print connection details for a server.")
def connection_info(
    ctx: typer.Context,
    name: str,
    fmt: ConnectionFormat = typer.Option(ConnectionFormat.FULL, "--format", "-f"),
) -> None:
    text = _service(ctx).format_connection_info(name, fmt)
    if text is None:
        _fail(f"Server not found: {name}")
    typer.echo(text)


@app.command("doctor", help="Check Docker availability and show the current bind address.")
def doctor(ctx: typer.Context) -> None:
    status = _service(ctx).get_system_status()
    docker_label = "[green]available[/green]" if status.docker else "[red]not available[/red]"
    console.print(f"Docker: {docker_label}")
    console.print(f"Address: {status.ip}")
    console.print(f"Config: {status.config_dir}")
    if not status.docker:
        raise typer.Exit(1)


@network_app.command("list", help="List local network interfaces.")
def network_list(ctx: typer.Context) -> None:
    table = Table(title="Network interfaces")
    table.add_column("Interface", style="cyan")
    table.add_column("Address")
    table.add_column("VPN")
    for interface in _service(ctx).list_network_interfaces():
        table.add_row(interface.name, interface.address, "yes" if interface.is_vpn else "")
    console.print(table)


@network_app.command("show", help="Show the preference and the resolved bind address.")
def network_show(ctx: typer.Context) -> None:
    info = _service(ctx).get_network_info()
    console.print(f"Address: {info.current_ip}")
    console.print(f"Interface: {info.current_interface or '-'}")
    if info.is_vpn:
        console.print("[yellow]The selected interface looks like a VPN tunnel.[/yellow]")
    console.print(f"Preferred IP: {info.preferred_ip or '-'}")
    console.print(f"Preferred interface: {info.preferred_interface or '-'}")


@network_app.command("set", help="Prefer an interface by address or by name.")
def network_set(ctx: typer.Context, value: str) -> None:
    _check(_service(ctx).select_network(value), f"Network preference set: {value}")


@network_app.command("clear", help="Forget the network preference.")
def network_clear(ctx: typer.Context) -> None:
    _check(_service(ctx).clear_network_preference(), "Network preference cleared")


def _split_setting(name: str) -> Tuple[str, str]:
    group, dot, key = name.partition(".")
    if not dot or not group or not key:
        _fail(f"Expected <group>.<key>, got: {name}")
    return group, key


def _parse_setting_value(raw: str) -> Any:
    """Значение из командной строки: JSON-литерал (2222, true) или строка как есть."""

    try:
        return json.loads(raw)
    except ValueError:
        return raw


@config_app.command("show", help="Print all settings as JSON.")
def config_show() -> None:
    typer.echo(json.dumps(SettingsRegistry().snapshot(), indent=2, ensure_ascii=False))


@config_app.command("get", help="Print one setting, e.g. servers.default_port.")
def config_get(name: str) -> None:
    group, key = _split_setting(name)
    try:
        value = SettingsRegistry().get_value(group, key)
    except SettingsError as exc:
        _fail(exc.message)
    typer.echo(json.dumps(value))


@config_app.command("set", help="Change one setting and write config.json.")
def config_set(name: str, value: str) -> None:
    group, key = _split_setting(name)
    registry = SettingsRegistry()
    try:
        registry.set_value(group, key, _parse_setting_value(value))
        registry.save_to_disk()
    except SettingsError as exc:
        _fail(exc.message)
    console.print(f"[green]✓[/green] {escape(name)} = {escape(value)}")


@config_app.command("reset", help="Restore default settings and write config.json.")
def config_reset(
    force: bool = typer.Option(False, "--force", "-f", help="Skip the warning"),
) -> None:
    if not force:
        console.print("[yellow]This will overwrite config.json with defaults.[/yellow]")
        console.print("[dim]Use --force to confirm.[/dim]")
        return
    registry = SettingsRegistry()
    registry.reset_to_defaults()
    try:
        registry.save_to_disk()
    except SettingsError as exc:
        _fail(exc.message)
    console.print("[green]✓[/green] Settings reset to defaults")
