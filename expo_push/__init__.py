"""
expo-push: a client for publishing notifications through the Expo push gateway.
"""

__version__ = "0.1.0"

from expo_push.errors import (
    AuthenticationError,
    DeviceNotRegisteredError,
    GatewayRequestError,
    GatewayStatusError,
    MalformedResponseError,
    MalformedTokenError,
    MessageRateExceededError,
    MessageTooBigError,
    MismatchedCountError,
    PushError,
    PushServerError,
    PushTicketError,
    TransportError,
    ValidationError,
)
from expo_push.gateway import PushClient, PushClientConfig, load_client_config
from expo_push.messages import Priority, PushMessage, PushTicket, PushToken

__all__ = [
    "__version__",
    "AuthenticationError",
    "DeviceNotRegisteredError",
    "GatewayRequestError",
    "GatewayStatusError",
    "MalformedResponseError",
    "MalformedTokenError",
    "MessageRateExceededError",
    "MessageTooBigError",
    "MismatchedCountError",
    "Priority",
    "PushClient",
    "PushClientConfig",
    "PushError",
    "PushMessage",
    "PushServerError",
    "PushTicket",
    "PushTicketError",
    "PushToken",
    "TransportError",
    "ValidationError",
    "load_client_config",
]
