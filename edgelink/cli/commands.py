"""CLI commands for edgelink.

The CLI is a thin operator surface over ApiClient: one-off calls against the
function endpoints, action-envelope dispatch, and a push-stream listener.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from edgelink import __logo__, __version__
from edgelink.api.client import ApiClient
from edgelink.api.types import ApiResponse, RequestOptions
from edgelink.config.loader import get_config_path, load_config
from edgelink.config.schema import Settings
from edgelink.streaming.types import StreamCallbacks
from edgelink.utils.exceptions import ConfigurationError, SessionRequiredError, StreamError
from edgelink.cli.logging_utils import configure_console_logging, ensure_rotating_log_file

app = typer.Typer(
    name="edgelink",
    help=f"{__logo__} edgelink - authenticated client for remote function endpoints",
    no_args_is_help=True,
)
config_app = typer.Typer(help="Inspect configuration")
app.add_typer(config_app, name="config")

console = Console()

TOKEN_OPTION = typer.Option(None, "--token", "-t", help="Bearer token (defaults to EDGELINK_TOKEN)")


def version_callback(value: bool):
    if value:
        console.print(f"{__logo__} edgelink v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Print debug logs to stderr"),
):
    """edgelink - authenticated client for remote function endpoints."""
    configure_console_logging(verbose)


def _make_client(settings: Settings, token: str | None) -> ApiClient:
    return ApiClient(settings, token or settings.token or None)


def _parse_json(value: str | None, option: str) -> Any:
    if value is None:
        return None
    try:
        return json.loads(value)
    except json.JSONDecodeError as e:
        console.print(f"[red]Invalid JSON for {option}:[/red] {e}")
        raise typer.Exit(2)


def _parse_params(items: list[str] | None) -> dict[str, str] | None:
    if not items:
        return None
    params: dict[str, str] = {}
    for item in items:
        name, sep, value = item.partition("=")
        if not sep or not name:
            console.print(f"[red]Invalid --param (expected key=value):[/red] {item}")
            raise typer.Exit(2)
        params[name] = value
    return params


def _render(result: ApiResponse[Any]) -> None:
    if result.error is not None:
        console.print(f"[red]✗[/red] status={result.status} code={result.error.code}: {result.error.message}")
        if result.error.details is not None:
            console.print_json(data=result.error.details)
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] status={result.status}")
    if isinstance(result.data, (dict, list)):
        console.print_json(data=result.data)
    elif result.data:
        console.print(result.data)


def _run_request(token: str | None, fn) -> None:
    """Load settings, build a client, await ``fn(client)`` and render the result."""

    async def run(settings: Settings) -> ApiResponse[Any]:
        async with _make_client(settings, token) as client:
            return await fn(client)

    try:
        settings = load_config()
        ensure_rotating_log_file("cli", settings.log_level)
        result = asyncio.run(run(settings))
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e.message}")
        console.print(f"[dim]Set EDGELINK_BASE_URL / EDGELINK_ANON_KEY or edit {get_config_path()}[/dim]")
        raise typer.Exit(1)
    except SessionRequiredError as e:
        console.print(f"[yellow]Session required:[/yellow] {e.message}")
        raise typer.Exit(1)
    _render(result)


@app.command()
def call(
    action: str = typer.Argument(..., help="Action name, e.g. listProjects"),
    payload: str = typer.Option(None, "--payload", "-p", help="JSON payload"),
    token: str = TOKEN_OPTION,
):
    """Dispatch an action envelope to the multiplexing endpoint."""
    body = _parse_json(payload, "--payload")
    if body is not None and not isinstance(body, dict):
        console.print("[red]--payload must be a JSON object[/red]")
        raise typer.Exit(2)
    _run_request(token, lambda client: client.dialectic.dispatcher.dispatch(action, body))


@app.command()
def get(
    endpoint: str = typer.Argument(..., help="Endpoint relative to the functions URL"),
    param: list[str] = typer.Option(None, "--param", help="Query parameter key=value (repeatable)"),
    public: bool = typer.Option(False, "--public", help="Do not attach credentials"),
    token: str = TOKEN_OPTION,
):
    """Issue a GET against one endpoint."""
    options = RequestOptions(is_public=public, params=_parse_params(param))
    _run_request(token, lambda client: client.get(endpoint, options))


@app.command()
def post(
    endpoint: str = typer.Argument(..., help="Endpoint relative to the functions URL"),
    body: str = typer.Option(None, "--body", "-b", help="JSON body"),
    public: bool = typer.Option(False, "--public", help="Do not attach credentials"),
    token: str = TOKEN_OPTION,
):
    """Issue a POST with a JSON body against one endpoint."""
    data = _parse_json(body, "--body")
    _run_request(token, lambda client: client.post(endpoint, data, RequestOptions(is_public=public)))


@app.command()
def listen(
    endpoint: str = typer.Argument(..., help="Push-stream endpoint, e.g. notifications-stream"),
    key: str = typer.Option(None, "--key", "-k", help="Subscription key (defaults to the endpoint)"),
    max_messages: int = typer.Option(0, "--max-messages", "-n", help="Stop after N messages (0 = until closed)"),
    token: str = TOKEN_OPTION,
):
    """Open a push stream and print each frame until it closes or Ctrl+C."""
    errors: list[StreamError] = []

    async def run(settings: Settings) -> int:
        received = 0
        done = asyncio.Event()

        def on_message(payload: Any) -> None:
            nonlocal received
            received += 1
            console.print_json(data=payload)
            if max_messages and received >= max_messages:
                done.set()

        def on_error(error: StreamError) -> None:
            console.print(f"[red]Stream error:[/red] {error.message}")
            errors.append(error)
            if not client.streams.is_active(stream_key):
                done.set()

        def on_close() -> None:
            console.print("[dim]Stream closed by remote[/dim]")
            done.set()

        stream_key = key or endpoint
        async with _make_client(settings, token) as client:
            disconnect = client.streams.connect(
                stream_key,
                StreamCallbacks(
                    on_message=on_message,
                    on_error=on_error,
                    on_open=lambda: console.print(f"[green]✓[/green] Listening on {endpoint}"),
                    on_close=on_close,
                ),
                endpoint=endpoint,
            )
            if disconnect is None:
                return received
            # Setup failures release the handle after on_error; poll for that case
            while not done.is_set():
                if not client.streams.is_active(stream_key):
                    break
                try:
                    await asyncio.wait_for(done.wait(), timeout=0.1)
                except asyncio.TimeoutError:
                    continue
            disconnect()
        return received

    try:
        settings = load_config()
        ensure_rotating_log_file("listen", settings.log_level)
        received = asyncio.run(run(settings))
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e.message}")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        console.print("\n[dim]Interrupted[/dim]")
        return
    console.print(f"[dim]{received} message(s) received[/dim]")
    if errors and not received:
        raise typer.Exit(1)


@config_app.command("show")
def config_show():
    """Show the effective configuration (secrets masked)."""
    try:
        settings = load_config()
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e.message}")
        raise typer.Exit(1)

    table = Table(title=f"edgelink configuration ({get_config_path()})")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    rows = [
        ("base_url", settings.base_url or "[yellow]<unset>[/yellow]"),
        ("functions_url", settings.functions_url if settings.base_url else "[yellow]<unset>[/yellow]"),
        ("anon_key", _mask(settings.anon_key)),
        ("token", _mask(settings.token)),
        ("multiplex_endpoint", settings.multiplex_endpoint),
        ("notifications_stream_endpoint", settings.notifications_stream_endpoint),
        ("http.timeout_seconds", str(settings.http.timeout_seconds)),
        ("streams.token_param", settings.streams.token_param),
    ]
    for name, value in rows:
        table.add_row(name, value)
    console.print(table)


def _mask(secret: str) -> str:
    if not secret:
        return "[yellow]<unset>[/yellow]"
    return f"{secret[:4]}…" if len(secret) > 8 else "****"


if __name__ == "__main__":
    app()
