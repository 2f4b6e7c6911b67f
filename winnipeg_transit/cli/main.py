"""CLI commands for querying the Winnipeg Transit API."""

import json
import logging
import sys
from collections.abc import Callable
from dataclasses import dataclass

import click
import httpx
import structlog

from winnipeg_transit.observability.logging import (
    bind_command_context,
    configure_logging,
)
from winnipeg_transit.stops.models import Stop
from winnipeg_transit.transport.client import TransitClient
from winnipeg_transit.transport.context import RequestContext
from winnipeg_transit.transport.errors import ConfigurationError, TransitError


logger = structlog.get_logger()

COMPONENT_CLI = "cli"


@dataclass
class CliOptions:
    """Global options shared by every command."""

    json_logs: bool
    verbose: bool
    json_output: bool
    timeout: float


def _run_stops_query(
    options: CliOptions,
    command: str,
    query: Callable[[TransitClient, RequestContext], tuple[list[Stop], httpx.Response]],
) -> None:
    """Run a stops query and print the result, exiting 1 on API errors."""
    configure_logging(
        level=logging.DEBUG if options.verbose else logging.WARNING,
        json_format=options.json_logs,
    )
    bind_command_context(command)
    log = logger.bind(component=COMPONENT_CLI, command=command)

    try:
        client = TransitClient.from_settings()
    except ConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    with client:
        try:
            stops, _ = query(client, RequestContext.with_timeout(options.timeout))
        except TransitError as e:
            log.warning("command_failed", **e.to_dict())
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)

    if options.json_output:
        payload = [stop.model_dump(by_alias=True) for stop in stops]
        click.echo(json.dumps(payload, indent=2))
        return

    if not stops:
        click.echo("No stops found.")
        return
    for stop in stops:
        click.echo(
            f"{stop.number:>6}  {stop.name}  ({stop.direction or '-'}, {stop.side or '-'})"
        )


@click.group()
@click.version_option(version="0.1.0")
@click.option(
    "--json-logs/--no-json-logs",
    default=False,
    help="Use JSON format for logs (default: false).",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging.")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON.")
@click.option(
    "--timeout",
    type=float,
    default=30.0,
    show_default=True,
    help="Overall request deadline in seconds.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_logs: bool,
    verbose: bool,
    json_output: bool,
    timeout: float,
) -> None:
    """Winnipeg Transit API client.

    Reads the API key from TRANSIT_API_KEY (or a .env file).
    """
    ctx.obj = CliOptions(
        json_logs=json_logs,
        verbose=verbose,
        json_output=json_output,
        timeout=timeout,
    )


@cli.group()
def stops() -> None:
    """Query transit stops."""


@stops.command()
@click.argument("query")
@click.pass_obj
def search(options: CliOptions, query: str) -> None:
    """Search stops by name or street."""
    _run_stops_query(
        options,
        "stops-search",
        lambda client, ctx: client.stops.search(ctx, query),
    )


@stops.command()
@click.option("--lat", "latitude", type=float, required=True, help="Latitude.")
@click.option("--lon", "longitude", type=float, required=True, help="Longitude.")
@click.option("--distance", type=int, default=None, help="Radius in metres.")
@click.option("--walking", is_flag=True, help="Measure walking distance.")
@click.pass_obj
def nearby(
    options: CliOptions,
    latitude: float,
    longitude: float,
    distance: int | None,
    walking: bool,
) -> None:
    """List stops near a point."""
    _run_stops_query(
        options,
        "stops-nearby",
        lambda client, ctx: client.stops.nearby(
            ctx, latitude, longitude, distance=distance, walking=walking
        ),
    )


if __name__ == "__main__":
    cli()
