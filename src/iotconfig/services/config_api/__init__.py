"""Signed command clients for the config service."""
from .client import BatchUpdateResult, DevaddrClient, EuiClient, GatewayClient, OrgClient, RouteClient, SkfClient
from .transport import DEFAULT_CONFIG_HOST, ConfigServiceTransport

__all__ = [
    "BatchUpdateResult",
    "DevaddrClient",
    "EuiClient",
    "GatewayClient",
    "OrgClient",
    "RouteClient",
    "SkfClient",
    "DEFAULT_CONFIG_HOST",
    "ConfigServiceTransport",
]
