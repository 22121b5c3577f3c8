"""
Message, ticket and envelope models for the push gateway.

A ``PushMessage`` addressed to N tokens is N independent deliveries; the
gateway answers with one ``PushTicket`` per token, in the same order.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from expo_push.errors import (
    DeviceNotRegisteredError,
    MalformedTokenError,
    MessageRateExceededError,
    MessageTooBigError,
    PushTicketError,
    ValidationError,
)


TOKEN_PREFIX = "ExponentPushToken"
SUCCESS_STATUS = "ok"


class PushToken(str):
    """A push token that is known to start with ``ExponentPushToken``.

        >>> PushToken("ExponentPushToken[xxxxxxxxxxxxxxxxxxxxxx]")
        'ExponentPushToken[xxxxxxxxxxxxxxxxxxxxxx]'
    """

    def __new__(cls, value: str) -> PushToken:
        if not isinstance(value, str) or not value.startswith(TOKEN_PREFIX):
            raise MalformedTokenError(f"Token should start with {TOKEN_PREFIX}")
        return super().__new__(cls, value)


class Priority(str, Enum):
    DEFAULT = "default"
    NORMAL = "normal"
    HIGH = "high"


class ErrorCode(str, Enum):
    """Machine-readable codes the gateway puts in ``details["error"]``."""

    DEVICE_NOT_REGISTERED = "DeviceNotRegistered"
    MESSAGE_TOO_BIG = "MessageTooBig"
    MESSAGE_RATE_EXCEEDED = "MessageRateExceeded"

    @classmethod
    def lookup(cls, code: Any) -> Optional[ErrorCode]:
        try:
            return cls(code)
        except ValueError:
            return None


TICKET_ERRORS: dict[ErrorCode, type[PushTicketError]] = {
    ErrorCode.DEVICE_NOT_REGISTERED: DeviceNotRegisteredError,
    ErrorCode.MESSAGE_TOO_BIG: MessageTooBigError,
    ErrorCode.MESSAGE_RATE_EXCEEDED: MessageRateExceededError,
}


@dataclass
class PushMessage:
    """A push notification request.

    Attributes:
        to: Recipient push tokens, in delivery order.
        body: The message to display in the notification.
        title: Title to display. On iOS this is shown only on Apple Watch.
        data: Extra data passed inside the notification. The gateway caps
              the total payload at 4096 bytes; this is not checked locally.
        sound: ``"default"`` plays the device's default sound; omit for silence.
        ttl: Seconds the message may be kept around for redelivery.
        expiration: UNIX timestamp when the message expires. Same effect as
                    ``ttl``, as an absolute time.
        priority: Delivery priority.
        badge: Unread count (iOS). ``0`` clears the badge.
        channel_id: Android notification channel.
    """

    to: list[str] = field(default_factory=list)
    body: str = ""
    title: Optional[str] = None
    data: Optional[dict[str, Any]] = None
    sound: Optional[str] = None
    ttl: Optional[int] = None
    expiration: Optional[int] = None
    priority: Optional[Priority] = None
    badge: Optional[int] = None
    channel_id: Optional[str] = None

    def with_recipient(self, token: str) -> PushMessage:
        """Return a copy of this message addressed to ``token`` alone."""
        return dataclasses.replace(self, to=[token])

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "to": [str(t) for t in self.to],
            "body": self.body,
        }
        # Unset fields are omitted; falsy-but-set values (badge=0) are sent.
        optional = {
            "data": self.data,
            "sound": self.sound,
            "title": self.title,
            "ttl": self.ttl,
            "expiration": self.expiration,
            "priority": self.priority.value if self.priority else None,
            "badge": self.badge,
            "channelId": self.channel_id,
        }
        payload.update({k: v for k, v in optional.items() if v is not None})
        return payload

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PushMessage:
        to = data.get("to")
        if to is None:
            to = []
        elif isinstance(to, str):
            to = [to]
        elif not isinstance(to, list):
            raise ValidationError(
                f"'to' must be a token or a list of tokens, not {type(to).__name__}"
            )

        priority = data.get("priority")
        if priority is not None:
            try:
                priority = Priority(priority)
            except ValueError:
                raise ValidationError(
                    f"Unknown priority {priority!r}. "
                    f"Options: {[p.value for p in Priority]}"
                ) from None

        return cls(
            to=list(to),
            body=data.get("body", ""),
            title=data.get("title"),
            data=data.get("data"),
            sound=data.get("sound"),
            ttl=data.get("ttl"),
            expiration=data.get("expiration"),
            priority=priority,
            badge=data.get("badge"),
            channel_id=data.get("channelId", data.get("channel_id")),
        )


@dataclass
class PushTicket:
    """The gateway's answer for one recipient.

    A successful push::

        {"status": "ok", "id": "XXXXXXXX-XXXX-XXXX-XXXX-XXXXXXXXXXXX"}

    An unregistered token::

        {"status": "error",
         "message": "\\"ExponentPushToken[...]\\" is not a registered push notification recipient",
         "details": {"error": "DeviceNotRegistered"}}

    ``push_message`` is not sent by the gateway; the reconciler fills it
    with the original message narrowed to this ticket's recipient.
    """

    status: str
    message: str = ""
    details: dict[str, Any] = field(default_factory=dict)
    id: Optional[str] = None
    push_message: Optional[PushMessage] = None

    @classmethod
    def from_api(
        cls,
        data: dict[str, Any],
        push_message: Optional[PushMessage] = None,
    ) -> PushTicket:
        details = data.get("details")
        return cls(
            status=data.get("status", ""),
            message=data.get("message") or "",
            details=details if isinstance(details, dict) else {},
            id=data.get("id"),
            push_message=push_message,
        )

    @property
    def is_success(self) -> bool:
        return self.status == SUCCESS_STATUS

    @property
    def error_code(self) -> Optional[ErrorCode]:
        return ErrorCode.lookup(self.details.get("error"))

    def classify_error(self) -> Optional[PushTicketError]:
        """Return the error this ticket represents, or None on success."""
        if self.is_success:
            return None
        error_cls = TICKET_ERRORS.get(self.error_code, PushTicketError)
        return error_cls(self)

    def validate(self) -> None:
        """Raise the classified error if this ticket is not a success.

        Callers should handle these individually: e.g. stop sending to a
        token on ``DeviceNotRegisteredError``, back off on
        ``MessageRateExceededError``.
        """
        error = self.classify_error()
        if error is not None:
            raise error


@dataclass
class GatewayEnvelope:
    """Top-level JSON object returned for a publish call."""

    data: Optional[list[Any]] = None
    errors: Optional[list[dict[str, Any]]] = None
