"""
HTTP transport for the push gateway.

One POST per call. Network failures and non-2xx statuses become typed
errors; the body of a failed response is never parsed here.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from expo_push.errors import (
    AuthenticationError,
    GatewayStatusError,
    MalformedResponseError,
    TransportError,
)

logger = logging.getLogger(__name__)


class HttpTransport:
    """Thin wrapper over an ``httpx.Client`` that posts JSON payloads."""

    def __init__(self, client: httpx.Client) -> None:
        self._client = client

    def post(
        self,
        url: str,
        payload: bytes,
        access_token: Optional[str] = None,
    ) -> httpx.Response:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"

        try:
            resp = self._client.post(url, content=payload, headers=headers)
        except httpx.DecodingError as exc:
            raise MalformedResponseError(
                f"Invalid server response: body could not be decoded ({exc})"
            ) from exc
        except httpx.RequestError as exc:
            raise TransportError(f"Push request to {url} failed: {exc}") from exc

        logger.debug("Push gateway responded: status=%d url=%s", resp.status_code, url)
        check_status(resp)
        return resp


def check_status(resp: httpx.Response) -> None:
    if 200 <= resp.status_code <= 299:
        return

    if resp.status_code in (401, 403):
        raise AuthenticationError(
            f"Invalid access token (HTTP {resp.status_code})", resp
        )

    raise GatewayStatusError(
        f"Invalid response: HTTP {resp.status_code} {resp.reason_phrase}".rstrip(),
        resp,
    )
