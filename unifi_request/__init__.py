"""Authenticated async client core for UniFi network controllers."""

__version__ = "0.1.0"

from .client import UnifiRequest, is_session_expired
from .config import UnifiOptions
from .errors import (
    UnifiApiError,
    UnifiAuthenticationError,
    UnifiClientError,
    UnifiConnectionError,
    UnifiResponseError,
    UnifiSessionExpiredError,
    UnifiTimeout,
)
from .executor import UnifiRequestExecutor
from .http import UnifiHttpTransport, UnifiResponse, UnifiTransport
from .protocol import RequestDescriptor
from .session import UnifiSession
from .singleflight import SingleFlight

__all__ = [
    "RequestDescriptor",
    "SingleFlight",
    "UnifiApiError",
    "UnifiAuthenticationError",
    "UnifiClientError",
    "UnifiConnectionError",
    "UnifiHttpTransport",
    "UnifiOptions",
    "UnifiRequest",
    "UnifiRequestExecutor",
    "UnifiResponse",
    "UnifiResponseError",
    "UnifiSession",
    "UnifiSessionExpiredError",
    "UnifiTimeout",
    "UnifiTransport",
    "__version__",
    "is_session_expired",
]
