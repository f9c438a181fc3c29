"""Click CLI to run the push2tweet server."""

from __future__ import annotations

import asyncio
import json
import sys

import click

from push2tweet.logging_config import configure_logging
from push2tweet.server.lifecycle import Push2TweetServer
from push2tweet.settings import redacted, resolve


@click.group()
@click.option(
    "--config", "config_path", default=None,
    help="Path to the JSON defaults file (default: config/push2tweet.json).",
)
@click.pass_context
def cli(ctx: click.Context, config_path: str | None) -> None:
    """push2tweet button-press relay."""
    ctx.ensure_object(dict)
    ctx.obj["settings"] = resolve(config_path=config_path)


@cli.command()
@click.pass_context
def run(ctx: click.Context) -> None:
    """Start the server and block until it is stopped."""
    settings = ctx.obj["settings"]
    configure_logging(settings.log_level)
    server = Push2TweetServer(settings)
    sys.exit(asyncio.run(server.serve_forever()))


@cli.command("config")
@click.pass_context
def show_config(ctx: click.Context) -> None:
    """Print the resolved configuration with credentials masked."""
    click.echo(json.dumps(redacted(ctx.obj["settings"]), indent=2))
