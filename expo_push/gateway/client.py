"""
Push client: build, send, and reconcile a batch in one round trip.

API docs: https://docs.expo.dev/push-notifications/sending-notifications/
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import httpx

from expo_push.gateway.config import PushClientConfig
from expo_push.gateway.reconciler import reconcile
from expo_push.gateway.transport import HttpTransport
from expo_push.messages.builder import build_request
from expo_push.messages.models import PushMessage, PushTicket

logger = logging.getLogger(__name__)


class PushClient:
    """
    Client for the push notification gateway.

    Usage:
        with PushClient(PushClientConfig(access_token="...")) as client:
            tickets = client.publish(
                PushMessage(to=["ExponentPushToken[xxx]"], body="Hello")
            )
            for ticket in tickets:
                ticket.validate()

    One publish call is one HTTP request. There are no retries; errors are
    raised to the caller as ``expo_push.errors.PushError`` subclasses.
    """

    def __init__(self, config: Optional[PushClientConfig] = None) -> None:
        self.config = config or PushClientConfig()
        self._owns_client = self.config.http_client is None
        self._http = self.config.http_client or httpx.Client()
        self._transport = HttpTransport(self._http)

    def close(self) -> None:
        """Close the underlying httpx client if this PushClient created it."""
        if self._owns_client:
            self._http.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    # ---- Publishing ----

    def publish(self, message: PushMessage) -> list[PushTicket]:
        """Send a single message. Returns one ticket per recipient."""
        return self.publish_multiple([message])

    def publish_multiple(self, messages: Sequence[PushMessage]) -> list[PushTicket]:
        """
        Send several messages in one request.

        Returns:
            Tickets for every recipient across the batch, in order: all of
            the first message's recipients, then the second's, and so on.

        Raises:
            ValidationError: Before sending, if the batch is malformed.
            TransportError: On network failure.
            GatewayStatusError: On a non-2xx status (AuthenticationError
                                for 401/403).
            PushServerError: If the response cannot be reconciled.
        """
        prepared = build_request(messages)
        url = self.config.push_url

        logger.debug(
            "Publishing %d message(s) to %d recipient(s) via %s",
            len(prepared.messages),
            prepared.expected_receipts,
            url,
        )
        resp = self._transport.post(url, prepared.payload, self.config.access_token)
        return reconcile(resp.content, prepared, response=resp)
