"""
Error taxonomy for push publishing.

Request-level failures (bad input, network, HTTP status, unusable
response) are raised from ``PushClient.publish*``. Per-recipient
failures are only produced when a caller validates an individual
``PushTicket``; one failed recipient never fails the whole publish.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

import httpx

if TYPE_CHECKING:
    from expo_push.messages.models import GatewayEnvelope, PushTicket


class PushError(Exception):
    """Base class for every error raised by this package."""


# ---------------------------------------------------------------------------
# Request validation
# ---------------------------------------------------------------------------

class ValidationError(PushError, ValueError):
    """The outbound batch is malformed. Raised before any network call."""


class MalformedTokenError(ValidationError):
    """A push token does not start with the required prefix."""


# ---------------------------------------------------------------------------
# Network / HTTP
# ---------------------------------------------------------------------------

class TransportError(PushError):
    """The HTTP exchange failed at the network layer (DNS, refused, timeout).

    The underlying httpx exception is available as ``__cause__``.
    """


class GatewayStatusError(PushError):
    """The gateway answered with a non-2xx HTTP status.

    The body is not parsed; it is left on ``response`` for inspection.
    """

    is_auth_failure = False

    def __init__(self, message: str, response: httpx.Response) -> None:
        super().__init__(message)
        self.response = response
        self.status_code = response.status_code


class AuthenticationError(GatewayStatusError):
    """The gateway rejected the access token (HTTP 401 or 403)."""

    is_auth_failure = True


# ---------------------------------------------------------------------------
# Response envelope
# ---------------------------------------------------------------------------

class PushServerError(PushError):
    """The gateway responded, but not with a usable set of tickets.

    Attributes:
        message: Human-readable description.
        response: The raw httpx response, when available.
        response_data: The parsed envelope, when parsing got that far.
        errors: Request-level error entries reported by the gateway.
    """

    def __init__(
        self,
        message: str,
        response: Optional[httpx.Response] = None,
        response_data: Optional[GatewayEnvelope] = None,
        errors: Optional[list[dict[str, Any]]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.response = response
        self.response_data = response_data
        self.errors = errors or []


class MalformedResponseError(PushServerError):
    """The body is not JSON, or is neither a clear success nor a clear failure."""


class GatewayRequestError(PushServerError):
    """The gateway rejected the whole request and returned an ``errors`` array.

    Example body::

        {"errors": [{"code": "API_ERROR",
                     "message": "child \\"to\\" fails because ..."}]}
    """


class MismatchedCountError(PushServerError):
    """The number of tickets differs from the number of recipients sent."""

    def __init__(
        self,
        expected: int,
        received: int,
        response: Optional[httpx.Response] = None,
        response_data: Optional[GatewayEnvelope] = None,
    ) -> None:
        super().__init__(
            f"Mismatched response length. Expected {expected} receipts "
            f"but received {received}",
            response=response,
            response_data=response_data,
        )
        self.expected = expected
        self.received = received


# ---------------------------------------------------------------------------
# Per-ticket errors
# ---------------------------------------------------------------------------

class PushTicketError(PushError):
    """A single recipient's ticket reported an error."""

    def __init__(self, ticket: PushTicket) -> None:
        super().__init__(ticket.message or "Unknown push ticket error")
        self.ticket = ticket


class DeviceNotRegisteredError(PushTicketError):
    """The token is no longer valid. Stop sending to it."""


class MessageTooBigError(PushTicketError):
    """The notification payload exceeded the gateway's size limit (4096 bytes)."""


class MessageRateExceededError(PushTicketError):
    """Messages are being sent to this device too often. Back off and retry."""
