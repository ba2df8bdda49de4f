"""Typer CLI for Page webhook subscriptions and token exchange."""

import os

os.environ.setdefault("LOGFIRE_IGNORE_NO_CONFIG", "1")

from pathlib import Path

_project_root = Path(__file__).resolve().parent.parent.parent
from dotenv import load_dotenv

load_dotenv(_project_root / ".env")
load_dotenv(_project_root / ".env.local")

import asyncio
import json

import typer

from messenger_platform.services.graph_api import FacebookApiError
from messenger_platform.services.oauth_service import exchange_short_lived_token
from messenger_platform.services.webhook_subscription_service import (
    DEFAULT_SUBSCRIBED_FIELDS,
    get_page_details,
    get_subscribed_apps,
    subscribe_page_to_webhooks,
    unsubscribe_page_from_webhooks,
)

app = typer.Typer(help="Manage a Facebook Page's Messenger webhook subscription.")

TokenOption = typer.Option(
    None,
    "--token",
    help="Page access token (defaults to FACEBOOK_PAGE_ACCESS_TOKEN)",
)


def _run(coro):
    """Run a Graph API coroutine, turning API errors into exit code 1."""
    try:
        return asyncio.run(coro)
    except FacebookApiError as e:
        typer.echo(f"✗ {e}", err=True)
        if e.fbtrace_id:
            typer.echo(f"  fbtrace_id: {e.fbtrace_id}", err=True)
        raise typer.Exit(1)


def _print_json(data) -> None:
    typer.echo(json.dumps(data, indent=2, sort_keys=True))


@app.command()
def subscribe(
    page_id: str,
    field: list[str] = typer.Option(
        None,
        "--field",
        "-f",
        help=f"Webhook field to subscribe (repeatable, default: {', '.join(DEFAULT_SUBSCRIBED_FIELDS)})",
    ),
    token: str | None = TokenOption,
):
    """Subscribe the app to a Page's webhook fields."""
    result = _run(subscribe_page_to_webhooks(page_id, field or None, token))
    if result.get("success"):
        typer.echo(f"✓ Subscribed page {page_id}")
    else:
        _print_json(result)


@app.command("subscribed-apps")
def subscribed_apps(page_id: str, token: str | None = TokenOption):
    """List apps subscribed to a Page and their fields."""
    apps = _run(get_subscribed_apps(page_id, token))
    if not apps:
        typer.echo("No subscribed apps")
        return
    for subscribed in apps:
        fields = ", ".join(subscribed.get("subscribed_fields", []))
        typer.echo(f"{subscribed.get('name', '?')} ({subscribed.get('id', '?')}): {fields}")


@app.command()
def unsubscribe(page_id: str, token: str | None = TokenOption):
    """Remove the app's webhook subscription from a Page."""
    result = _run(unsubscribe_page_from_webhooks(page_id, token))
    if result.get("success"):
        typer.echo(f"✓ Unsubscribed page {page_id}")
    else:
        _print_json(result)


@app.command("exchange-token")
def exchange_token(short_lived_token: str):
    """Exchange a short-lived user token for a long-lived one."""
    typer.echo(_run(exchange_short_lived_token(short_lived_token)))


@app.command()
def page(page_id: str, token: str | None = TokenOption):
    """Show the Page's Graph API details."""
    _print_json(_run(get_page_details(page_id, token)))


if __name__ == "__main__":
    app()
