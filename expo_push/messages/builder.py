"""
Request builder: validate a batch and serialize it for the wire.

Pure functions only. Nothing here touches the network.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Iterator, Sequence

from expo_push.errors import ValidationError
from expo_push.messages.models import PushMessage


@dataclass
class PreparedRequest:
    """A validated, serialized batch.

    Attributes:
        payload: JSON array body, one object per message.
        expected_receipts: Total recipients across the batch; the gateway
                           must return exactly this many tickets.
        messages: The batch in submission order.
    """

    payload: bytes
    expected_receipts: int
    messages: list[PushMessage] = field(default_factory=list)


def validate_messages(messages: Sequence[PushMessage]) -> None:
    for message in messages:
        if not message.to:
            raise ValidationError("No recipients")
        for recipient in message.to:
            if not recipient:
                raise ValidationError("Invalid push token")


def iter_recipients(messages: Sequence[PushMessage]) -> Iterator[tuple[PushMessage, str]]:
    """Walk a batch in flattening order: messages first, then their recipients."""
    for message in messages:
        for recipient in message.to:
            yield message, recipient


def build_request(messages: Sequence[PushMessage]) -> PreparedRequest:
    """Validate ``messages`` and produce the request body.

    Raises:
        ValidationError: A message has no recipients, or a token is empty.
    """
    validate_messages(messages)
    payload = json.dumps(
        [m.to_dict() for m in messages],
        ensure_ascii=False,
    ).encode("utf-8")
    return PreparedRequest(
        payload=payload,
        expected_receipts=sum(len(m.to) for m in messages),
        messages=list(messages),
    )
