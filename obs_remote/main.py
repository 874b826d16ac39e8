"""
main.py — obs-remote command line.

CLI:
  python run.py check                  connect, log in, print version + scenes
  python run.py scenes                 list scenes
  python run.py switch "Scene A"       change the current scene
  python run.py source Camera --hide   toggle a source's visibility
  python run.py stream status          streaming status / start / stop / toggle
  python run.py listen                 print server events until the socket closes
  python run.py init-config            create a default config.yaml
"""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from obs_remote import __version__
from obs_remote.config import Settings
from obs_remote.core import (
    OBSConnectionError,
    OBSRemote,
    OBSRemoteError,
    UPDATE_EVENTS,
)

console = Console()
app = typer.Typer(name="obs-remote", help="Remote control for OBS over obs-websocket")

ConfigOption = typer.Option(None, "--config", "-c", help="Path to config.yaml")
HostOption = typer.Option(None, "--host", help="OBS websocket host")
PortOption = typer.Option(None, "--port", "-p", help="OBS websocket port")
PasswordOption = typer.Option(None, "--password", help="OBS websocket password")
DebugOption = typer.Option(False, "--debug", help="Log every inbound frame")


def setup_logging(level: str = "info") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(message)s",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
    )


def load_settings(
    config: Optional[Path],
    host: Optional[str],
    port: Optional[int],
    password: Optional[str],
    debug: bool,
) -> Settings:
    settings = Settings.load(config)
    if host:
        settings.obs.host = host
    if port:
        settings.obs.port = port
    if password is not None:
        settings.obs.password = password
    if debug:
        settings.obs.debug = True
    setup_logging(settings.log_level)
    return settings


async def open_session(settings: Settings) -> OBSRemote:
    """Connect and log in, or exit with status 1."""
    remote = OBSRemote(settings.obs.host, settings.obs.port, debug=settings.obs.debug)
    try:
        info = await remote.connect()
    except OBSConnectionError as e:
        console.print(f"[red]✗ Could not connect to OBS at {remote.url}: {e.error}[/red]")
        sys.exit(1)
    except OBSRemoteError as e:
        console.print(f"[red]✗ Handshake failed: {e}[/red]")
        await remote.close()
        sys.exit(1)

    try:
        await remote.login(settings.obs.password or None)
    except OBSRemoteError as e:
        console.print(f"[red]✗ Login failed: {e}[/red]")
        await remote.close()
        sys.exit(1)
    log = logging.getLogger("obs_remote")
    log.debug(f"Session ready: websocket {info['version']}, auth={'on' if info['auth'] else 'off'}")
    return remote


def run_session(settings: Settings, action: Callable[[OBSRemote], Awaitable[Any]]) -> None:
    async def _run():
        remote = await open_session(settings)
        try:
            await action(remote)
        except OBSRemoteError as e:
            console.print(f"[red]✗ {e}[/red]")
            sys.exit(1)
        finally:
            await remote.close()
    asyncio.run(_run())


# ──────────────────────────────────────────────────────────────────────────────
# CLI commands
# ──────────────────────────────────────────────────────────────────────────────

@app.command("check")
def check_obs(
    config: Optional[Path] = ConfigOption,
    host: Optional[str] = HostOption,
    port: Optional[int] = PortOption,
    password: Optional[str] = PasswordOption,
    debug: bool = DebugOption,
):
    """Test OBS websocket connectivity."""
    settings = load_settings(config, host, port, password, debug)

    async def _check(remote: OBSRemote):
        version = await remote.get_version()
        auth = await remote.get_auth_required()
        scenes = await remote.get_scene_list()
        console.print("[green]✓ Connected to OBS[/green]")
        console.print(f"  OBS version:       {version.get('obs-studio-version', '-')}")
        console.print(f"  WebSocket version: {version.get('obs-websocket-version') or version.get('version')}")
        console.print(f"  Auth required:     {'yes' if auth.get('authRequired') else 'no'}")
        names = [s.get("name", "") for s in scenes.get("scenes", [])]
        console.print(f"  Scenes ({len(names)}): {', '.join(names)}")

    run_session(settings, _check)


@app.command("scenes")
def list_scenes(
    config: Optional[Path] = ConfigOption,
    host: Optional[str] = HostOption,
    port: Optional[int] = PortOption,
    password: Optional[str] = PasswordOption,
    debug: bool = DebugOption,
):
    """Print the scene list."""
    settings = load_settings(config, host, port, password, debug)

    async def _scenes(remote: OBSRemote):
        result = await remote.get_scene_list()
        current = result.get("current-scene", "")
        table = Table(title="Scenes", show_header=True)
        table.add_column("Name", style="cyan")
        table.add_column("Sources", justify="right")
        table.add_column("Current", style="green")
        for scene in result.get("scenes", []):
            name = scene.get("name", "")
            table.add_row(name, str(len(scene.get("sources", []))), "●" if name == current else "")
        console.print(table)

    run_session(settings, _scenes)


@app.command("switch")
def switch_scene(
    scene: str = typer.Argument(..., help="Scene to switch to"),
    config: Optional[Path] = ConfigOption,
    host: Optional[str] = HostOption,
    port: Optional[int] = PortOption,
    password: Optional[str] = PasswordOption,
    debug: bool = DebugOption,
):
    """Change the current scene."""
    settings = load_settings(config, host, port, password, debug)

    async def _switch(remote: OBSRemote):
        await remote.set_current_scene(scene)
        console.print(f"[green]✓[/green] Switched to [bold]{scene}[/bold]")

    run_session(settings, _switch)


@app.command("source")
def source_visibility(
    source: str = typer.Argument(..., help="Source name"),
    show: bool = typer.Option(True, "--show/--hide", help="Show or hide the source"),
    scene: Optional[str] = typer.Option(None, "--scene", "-s", help="Scene (default: current)"),
    config: Optional[Path] = ConfigOption,
    host: Optional[str] = HostOption,
    port: Optional[int] = PortOption,
    password: Optional[str] = PasswordOption,
    debug: bool = DebugOption,
):
    """Show or hide a source."""
    settings = load_settings(config, host, port, password, debug)

    async def _source(remote: OBSRemote):
        await remote.set_source_visibility(source, show, scene)
        console.print(f"[green]✓[/green] {source} → {'visible' if show else 'hidden'}")

    run_session(settings, _source)


@app.command("stream")
def stream(
    action: str = typer.Argument("status", help="status | start | stop | toggle"),
    config: Optional[Path] = ConfigOption,
    host: Optional[str] = HostOption,
    port: Optional[int] = PortOption,
    password: Optional[str] = PasswordOption,
    debug: bool = DebugOption,
):
    """Query or control streaming."""
    actions = {
        "start": OBSRemote.start_streaming,
        "stop": OBSRemote.stop_streaming,
        "toggle": OBSRemote.start_stop_streaming,
    }
    if action != "status" and action not in actions:
        console.print(f"[red]✗ Unknown stream action: {action}[/red]")
        raise typer.Exit(2)
    settings = load_settings(config, host, port, password, debug)

    async def _stream(remote: OBSRemote):
        if action in actions:
            await actions[action](remote)
            console.print(f"[green]✓[/green] stream {action}")
            return
        status = await remote.get_streaming_status()
        console.print(f"  Streaming: {'yes' if status.get('streaming') else 'no'}")
        console.print(f"  Recording: {'yes' if status.get('recording') else 'no'}")

    run_session(settings, _stream)


@app.command("listen")
def listen(
    config: Optional[Path] = ConfigOption,
    host: Optional[str] = HostOption,
    port: Optional[int] = PortOption,
    password: Optional[str] = PasswordOption,
    debug: bool = DebugOption,
):
    """Print server events until the socket closes (Ctrl-C to stop)."""
    settings = load_settings(config, host, port, password, debug)

    async def _listen(remote: OBSRemote):
        closed = asyncio.get_running_loop().create_future()

        def printer(name: str):
            def _print(message: dict):
                console.print(f"[cyan]{name}[/cyan] {message}")
            return _print

        for event in sorted(set(UPDATE_EVENTS.values())):
            remote.on(event, printer(event))
        remote.on("error", lambda error: console.print(f"[yellow]⚠ {error}[/yellow]"))
        remote.on("socket.close", lambda event: closed.done() or closed.set_result(event))

        console.rule(f"[bold blue]obs-remote v{__version__} — {remote.url}[/bold blue]")
        event = await closed
        console.print(f"[yellow]Socket closed ({event.code})[/yellow]")

    try:
        run_session(settings, _listen)
    except KeyboardInterrupt:
        console.print("Stopped.")


@app.command("init-config")
def init_config(
    output: Path = typer.Option(Path("config.yaml"), "--output", "-o"),
):
    """Generate a default config.yaml."""
    s = Settings.load()
    s.to_yaml(output)
    console.print(f"[green]✓[/green] Config written to [bold]{output}[/bold]")


if __name__ == "__main__":
    app()
