"""gRPC client for the Dash Platform DAPI service.

This package hosts:
- The wire schema (`schema`) and structured request/response models (`models`).
- Converters and client interceptors bridging the two representations.
- A callback-style transport and the awaitable `PlatformPromiseClient` facade.
"""

from dapi_client.client import PlatformPromiseClient
from dapi_client.options import CallOptions

__all__ = ["PlatformPromiseClient", "CallOptions"]
