"""
Push client configuration.

Defines the connection settings for the push gateway. Supports loading
from a JSON config file with the access token sourced from an
environment variable.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import httpx


DEFAULT_HOST = "https://exp.host"
DEFAULT_API_URL = "/--/api/v2"
DEFAULT_ACCESS_TOKEN_ENV = "EXPO_ACCESS_TOKEN"


@dataclass(frozen=True)
class PushClientConfig:
    """Connection settings for a ``PushClient``.

    Attributes:
        host: Gateway host, scheme included.
        api_url: API path appended to ``host``.
        url: Full push endpoint. Overrides ``host`` and ``api_url`` when set.
        access_token: Bearer credential sent in the Authorization header.
        http_client: A reusable httpx client. Timeouts, proxies and retries
                     are configured on it, not here.
    """

    host: str = DEFAULT_HOST
    api_url: str = DEFAULT_API_URL
    url: Optional[str] = None
    access_token: Optional[str] = None
    http_client: Optional[httpx.Client] = None

    @property
    def push_url(self) -> str:
        if self.url:
            return self.url
        return f"{self.host}{self.api_url}/push/send"


def load_client_config(config_path: Optional[str | Path] = None) -> PushClientConfig:
    """Load a PushClientConfig from a JSON file and the environment.

    The access token is never read from the file. The JSON file names the
    environment variable holding it in ``access_token_env`` (default
    ``EXPO_ACCESS_TOKEN``). If the variable is unset, no token is sent.

    Example file::

        {"host": "https://exp.host", "api_url": "/--/api/v2",
         "access_token_env": "EXPO_ACCESS_TOKEN"}

    Args:
        config_path: Path to the config JSON file. When omitted, defaults
                     plus the environment are used.

    Returns:
        A fully populated PushClientConfig instance.

    Raises:
        FileNotFoundError: If config_path does not exist.
        json.JSONDecodeError: If the JSON is malformed.
    """
    raw: dict[str, Any] = {}
    if config_path is not None:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Push client config not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)

    token_env = raw.get("access_token_env", DEFAULT_ACCESS_TOKEN_ENV)
    access_token = os.environ.get(token_env, "") if token_env else ""

    return PushClientConfig(
        host=raw.get("host") or DEFAULT_HOST,
        api_url=raw.get("api_url") or DEFAULT_API_URL,
        url=raw.get("url") or None,
        access_token=access_token or None,
    )
