"""
Response reconciler: map the gateway's flat ticket array back onto the batch.

Ticket *i* belongs to the *i*-th recipient when the batch is walked
message by message, recipient by recipient. The count must match
exactly; nothing is truncated or padded.
"""

from __future__ import annotations

import json
from typing import Any, Optional

import httpx

from expo_push.errors import GatewayRequestError, MalformedResponseError, MismatchedCountError
from expo_push.messages.builder import PreparedRequest, iter_recipients
from expo_push.messages.models import GatewayEnvelope, PushTicket


def parse_envelope(
    body: bytes | str,
    response: Optional[httpx.Response] = None,
) -> GatewayEnvelope:
    try:
        raw: Any = json.loads(body)
    except ValueError as exc:
        raise MalformedResponseError(
            f"Invalid server response: body is not JSON ({exc})",
            response=response,
        ) from exc

    if not isinstance(raw, dict):
        raise MalformedResponseError(
            "Invalid server response: expected a JSON object",
            response=response,
        )

    data = raw.get("data")
    errors = raw.get("errors")
    if data is not None and not isinstance(data, list):
        raise MalformedResponseError(
            "Invalid server response: 'data' is not an array", response=response
        )
    if errors is not None and not isinstance(errors, list):
        raise MalformedResponseError(
            "Invalid server response: 'errors' is not an array", response=response
        )
    return GatewayEnvelope(data=data, errors=errors)


def reconcile(
    body: bytes | str,
    prepared: PreparedRequest,
    response: Optional[httpx.Response] = None,
) -> list[PushTicket]:
    """Turn a gateway response body into tickets for ``prepared``.

    Tickets are returned in positional order with ``push_message`` set to
    the originating message narrowed to its single recipient. Tickets are
    not validated; call ``PushTicket.validate()`` for that.

    Raises:
        MalformedResponseError: Not JSON, wrong shape, or no ``data``.
        GatewayRequestError: The gateway rejected the entire request.
        MismatchedCountError: Ticket count differs from recipient count.
    """
    envelope = parse_envelope(body, response)

    # If there are errors with the entire request, raise them now.
    if envelope.errors:
        raise GatewayRequestError(
            "Request rejected by push gateway",
            response=response,
            response_data=envelope,
            errors=envelope.errors,
        )

    if envelope.data is None:
        raise MalformedResponseError(
            "Invalid server response: missing 'data'",
            response=response,
            response_data=envelope,
        )

    if len(envelope.data) != prepared.expected_receipts:
        raise MismatchedCountError(
            expected=prepared.expected_receipts,
            received=len(envelope.data),
            response=response,
            response_data=envelope,
        )

    tickets: list[PushTicket] = []
    for (message, recipient), entry in zip(iter_recipients(prepared.messages), envelope.data):
        if not isinstance(entry, dict):
            raise MalformedResponseError(
                f"Invalid server response: ticket {len(tickets)} is not an object",
                response=response,
                response_data=envelope,
            )
        tickets.append(
            PushTicket.from_api(entry, push_message=message.with_recipient(recipient))
        )
    return tickets
