"""
CLI interface for expo-push.

Commands:
    check-token  — Check that a push token is well formed
    send         — Publish one message to one or more tokens
    send-batch   — Publish a JSON file of messages in a single request
"""

from __future__ import annotations

import dataclasses
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import click

from expo_push import __version__
from expo_push.errors import MalformedTokenError, PushError, ValidationError
from expo_push.gateway import PushClient, load_client_config
from expo_push.messages import Priority, PushMessage, PushTicket, PushToken
from expo_push.messages.builder import validate_messages


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------

@click.group()
@click.version_option(version=__version__, prog_name="expo-push")
@click.option("--verbose", "-v", is_flag=True, help="Log HTTP activity to stderr.")
@click.option("--config", "config_path", default=None, type=click.Path(exists=True, dir_okay=False),
              help="Path to a client config JSON file.")
@click.option("--access-token", default=None, help="Bearer token (overrides EXPO_ACCESS_TOKEN).")
@click.option("--url", default=None, help="Full push endpoint URL override.")
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    config_path: Optional[str],
    access_token: Optional[str],
    url: Optional[str],
) -> None:
    """Publish push notifications through the Expo push gateway."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["access_token"] = access_token
    ctx.obj["url"] = url


def _build_client(ctx: click.Context) -> PushClient:
    try:
        config = load_client_config(ctx.obj.get("config_path"))
    except ValueError as e:
        raise click.BadParameter(f"not valid JSON ({e})", param_hint="--config")
    overrides: dict[str, Any] = {}
    if ctx.obj.get("access_token"):
        overrides["access_token"] = ctx.obj["access_token"]
    if ctx.obj.get("url"):
        overrides["url"] = ctx.obj["url"]
    if overrides:
        config = dataclasses.replace(config, **overrides)
    return PushClient(config)


# ---------------------------------------------------------------------------
# check-token
# ---------------------------------------------------------------------------

@cli.command(name="check-token")
@click.argument("token")
def check_token(token: str) -> None:
    """Check that TOKEN is a well-formed push token."""
    try:
        PushToken(token)
    except MalformedTokenError as e:
        click.echo(f"Invalid: {e}", err=True)
        sys.exit(1)
    click.echo(f"Valid: {token}")


# ---------------------------------------------------------------------------
# send
# ---------------------------------------------------------------------------

@cli.command()
@click.option("--to", "-t", "recipients", multiple=True, required=True,
              help="Recipient push token (repeatable).")
@click.option("--body", "-b", required=True, help="Notification body text.")
@click.option("--title", default=None, help="Notification title.")
@click.option("--sound", default=None, help="Sound to play ('default' for the device sound).")
@click.option("--ttl", type=int, default=None, help="Seconds the gateway may hold the message.")
@click.option("--expiration", type=int, default=None, help="UNIX timestamp when the message expires.")
@click.option("--priority", default=None,
              type=click.Choice([p.value for p in Priority], case_sensitive=False),
              help="Delivery priority.")
@click.option("--badge", type=int, default=None, help="iOS badge count (0 clears it).")
@click.option("--channel-id", default=None, help="Android notification channel.")
@click.option("--data", "data_json", default=None, help="Extra data as a JSON object.")
@click.option("--json-output", is_flag=True, help="Output tickets as JSON.")
@click.pass_context
def send(
    ctx: click.Context,
    recipients: tuple[str, ...],
    body: str,
    title: Optional[str],
    sound: Optional[str],
    ttl: Optional[int],
    expiration: Optional[int],
    priority: Optional[str],
    badge: Optional[int],
    channel_id: Optional[str],
    data_json: Optional[str],
    json_output: bool,
) -> None:
    """Publish one message to one or more recipients."""
    data = None
    if data_json:
        try:
            data = json.loads(data_json)
        except ValueError as e:
            raise click.BadParameter(f"not valid JSON ({e})", param_hint="--data")
        if not isinstance(data, dict):
            raise click.BadParameter("must be a JSON object", param_hint="--data")

    message = PushMessage(
        to=list(recipients),
        body=body,
        title=title,
        data=data,
        sound=sound,
        ttl=ttl,
        expiration=expiration,
        priority=Priority(priority.lower()) if priority else None,
        badge=badge,
        channel_id=channel_id,
    )
    _publish(ctx, [message], json_output)


# ---------------------------------------------------------------------------
# send-batch
# ---------------------------------------------------------------------------

@cli.command(name="send-batch")
@click.argument("messages_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--json-output", is_flag=True, help="Output tickets as JSON.")
@click.pass_context
def send_batch(ctx: click.Context, messages_file: str, json_output: bool) -> None:
    """Publish every message in MESSAGES_FILE (a JSON array) in one request."""
    try:
        raw = json.loads(Path(messages_file).read_text(encoding="utf-8"))
    except ValueError as e:
        raise click.BadParameter(f"not valid JSON ({e})", param_hint="MESSAGES_FILE")
    if not isinstance(raw, list) or not all(isinstance(e, dict) for e in raw):
        raise click.BadParameter("expected a JSON array of message objects", param_hint="MESSAGES_FILE")

    try:
        messages = [PushMessage.from_dict(entry) for entry in raw]
        validate_messages(messages)
    except ValidationError as e:
        raise click.BadParameter(str(e), param_hint="MESSAGES_FILE")

    _publish(ctx, messages, json_output)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _publish(ctx: click.Context, messages: list[PushMessage], json_output: bool) -> None:
    try:
        with _build_client(ctx) as client:
            tickets = client.publish_multiple(messages)
    except PushError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if json_output:
        click.echo(json.dumps([_ticket_to_dict(t) for t in tickets], indent=2))
        return

    failed = 0
    click.echo(f"Tickets ({len(tickets)}):")
    for i, ticket in enumerate(tickets):
        error = ticket.classify_error()
        if error is None:
            click.echo(f"  [{i:3d}] OK    | {_recipient(ticket)} | id={ticket.id or '-'}")
        else:
            failed += 1
            click.echo(
                f"  [{i:3d}] ERROR | {_recipient(ticket)} | "
                f"{type(error).__name__}: {error}"
            )
    if failed:
        click.echo(f"{failed} of {len(tickets)} recipients failed.")


def _recipient(ticket: PushTicket) -> str:
    if ticket.push_message and ticket.push_message.to:
        return str(ticket.push_message.to[0])
    return "?"


def _ticket_to_dict(ticket: PushTicket) -> dict[str, Any]:
    error = ticket.classify_error()
    return {
        "to": _recipient(ticket),
        "status": ticket.status,
        "id": ticket.id,
        "message": ticket.message,
        "details": ticket.details,
        "error": type(error).__name__ if error else None,
    }


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
