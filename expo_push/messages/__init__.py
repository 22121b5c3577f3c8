"""
Outbound messages, gateway tickets, and the request builder.
"""

from expo_push.messages.builder import PreparedRequest, build_request, iter_recipients
from expo_push.messages.models import (
    ErrorCode,
    GatewayEnvelope,
    Priority,
    PushMessage,
    PushTicket,
    PushToken,
)

__all__ = [
    "ErrorCode",
    "GatewayEnvelope",
    "PreparedRequest",
    "Priority",
    "PushMessage",
    "PushTicket",
    "PushToken",
    "build_request",
    "iter_recipients",
]
