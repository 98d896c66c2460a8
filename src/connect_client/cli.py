"""Command line interface for the Connect XML API client."""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar
from xml.etree import ElementTree

import click
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .api_clients.network_error_handler import TransportError
from .api_clients.sco_client import ScoAPIClient
from .api_clients.status import Outcome
from .config import ClientSettings, build_settings, load_settings_from_file
from .exceptions import ConfigurationError

console = Console()

T = TypeVar("T")


def _load_settings(options: Dict[str, Any]) -> ClientSettings:
    """Merge the config file (if any) with command line options."""
    values: Dict[str, Any] = {}
    config_path = options.get("config")
    if config_path:
        values.update(load_settings_from_file(Path(config_path)).model_dump())

    for key in ("service_url", "username", "password", "timeout_seconds"):
        if options.get(key) is not None:
            values[key] = options[key]
    if options.get("no_session_param"):
        values["use_session_param"] = False

    return build_settings(values, "command line")


def _report_failure(outcome: Outcome) -> None:
    console.print(f"❌ {escape(outcome.describe())}", style="red")
    if isinstance(outcome.error, TransportError) and outcome.error.user_guidance:
        console.print(outcome.error.user_guidance)


async def _with_session(
    settings: ClientSettings, operation: Callable[[ScoAPIClient], Awaitable[T]]
) -> Optional[T]:
    """Log in, run ``operation`` and log out again."""
    async with ScoAPIClient(settings) as client:
        login = await client.login()
        if not login.succeeded:
            console.print("❌ Login failed", style="red")
            _report_failure(login.outcome)
            return None
        try:
            return await operation(client)
        finally:
            await client.logout()


def _run(ctx: click.Context, operation: Callable[[ScoAPIClient], Awaitable[bool]]) -> None:
    try:
        settings = _load_settings(ctx.obj)
    except ConfigurationError as e:
        console.print(f"❌ {escape(str(e))}", style="red")
        sys.exit(1)

    succeeded = asyncio.run(_with_session(settings, operation))
    if not succeeded:
        sys.exit(1)


@click.group()
@click.option(
    "--config", "-c", type=click.Path(exists=True), help="JSON settings file"
)
@click.option("--service-url", envvar="CONNECT_SERVICE_URL", help="XML API endpoint URL")
@click.option("--username", "-u", envvar="CONNECT_USERNAME", help="Account login")
@click.option("--password", "-p", envvar="CONNECT_PASSWORD", help="Account password")
@click.option(
    "--timeout", "timeout_seconds", type=float, envvar="CONNECT_TIMEOUT",
    help="Request timeout in seconds",
)
@click.option(
    "--no-session-param",
    is_flag=True,
    help="Send the session as a cookie instead of a 'session' parameter",
)
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.version_option(version=__version__, prog_name="connect-client")
@click.pass_context
def cli(
    ctx,
    config: Optional[str],
    service_url: Optional[str],
    username: Optional[str],
    password: Optional[str],
    timeout_seconds: Optional[float],
    no_session_param: bool,
    verbose: bool,
):
    """Run actions against a Connect XML API server.

    \b
    EXAMPLES:
      connect-client --service-url https://host/api/xml login
      connect-client action common-info
      connect-client action sco-shortcuts
      connect-client meetings
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s:%(name)s:%(message)s",
    )
    if not verbose:
        logging.getLogger("httpx").setLevel(logging.WARNING)

    ctx.ensure_object(dict)
    ctx.obj.update(
        {
            "config": config,
            "service_url": service_url,
            "username": username,
            "password": password,
            "timeout_seconds": timeout_seconds,
            "no_session_param": no_session_param,
        }
    )


@cli.command()
@click.pass_context
def login(ctx):
    """Check credentials and show the logged in user."""

    async def operation(client: ScoAPIClient) -> bool:
        result = await client.get_user_info()
        if not result.succeeded or result.value is None:
            _report_failure(result.outcome)
            return False
        user = result.value
        console.print(f"✅ Logged in as {user.name} ({user.login})", style="green")
        return True

    _run(ctx, operation)


@cli.command()
@click.argument("action_name")
@click.argument("params", required=False)
@click.pass_context
def action(ctx, action_name: str, params: Optional[str]):
    """Dispatch ACTION_NAME with optional PARAMS (name=value&...)."""

    async def operation(client: ScoAPIClient) -> bool:
        outcome = await client.dispatch(action_name, params)
        if outcome.result_document is not None:
            ElementTree.indent(outcome.result_document)
            console.print(
                ElementTree.tostring(outcome.result_document, encoding="unicode"),
                markup=False,
                highlight=False,
            )
        if not outcome.ok:
            _report_failure(outcome)
            return False
        return True

    _run(ctx, operation)


@cli.command()
@click.pass_context
def meetings(ctx):
    """List the meetings of the logged in user."""

    async def operation(client: ScoAPIClient) -> bool:
        result = await client.report_my_meetings()
        if not result.succeeded or result.value is None:
            _report_failure(result.outcome)
            return False

        table = Table(title="My Meetings")
        table.add_column("SCO ID", style="cyan")
        table.add_column("Name")
        table.add_column("Begins")
        table.add_column("Duration")
        table.add_column("URL", style="blue")

        try:
            for item in result.value:
                table.add_row(
                    item.sco_id,
                    item.name or "",
                    item.date_begin.isoformat() if item.date_begin else "",
                    str(item.duration) if item.duration is not None else "",
                    item.full_url,
                )
        except ValidationError as e:
            _report_failure(result.outcome.as_format_failure(e))
            return False
        console.print(table)
        return True

    _run(ctx, operation)


@cli.command()
@click.argument("sco_ids", nargs=-1, required=True)
@click.pass_context
def delete(ctx, sco_ids):
    """Delete one or more SCOs by id."""

    async def operation(client: ScoAPIClient) -> bool:
        outcome = await client.sco_delete(list(sco_ids))
        if not outcome.ok:
            _report_failure(outcome)
            return False
        console.print(f"✅ Deleted {len(sco_ids)} SCO(s)", style="green")
        return True

    _run(ctx, operation)


def main():
    """Entry point for the connect-client command."""
    cli(obj={})


if __name__ == "__main__":
    main()
