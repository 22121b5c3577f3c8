"""
Gateway access: configuration, HTTP transport, and response reconciliation.
"""

from expo_push.gateway.client import PushClient
from expo_push.gateway.config import (
    DEFAULT_API_URL,
    DEFAULT_HOST,
    PushClientConfig,
    load_client_config,
)
from expo_push.gateway.reconciler import reconcile

__all__ = [
    "DEFAULT_API_URL",
    "DEFAULT_HOST",
    "PushClient",
    "PushClientConfig",
    "load_client_config",
    "reconcile",
]
