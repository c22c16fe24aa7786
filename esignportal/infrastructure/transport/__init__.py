"""Transports to the signing backend."""

from esignportal.infrastructure.transport.base import (
    Transport,
    TransportError,
    TransportFailureError,
    TransportTimeoutError,
)
from esignportal.infrastructure.transport.fallback import FallbackTransport
from esignportal.infrastructure.transport.http import HttpTransport
from esignportal.infrastructure.transport.mock import MockTransport

__all__ = [
    "FallbackTransport",
    "HttpTransport",
    "MockTransport",
    "Transport",
    "TransportError",
    "TransportFailureError",
    "TransportTimeoutError",
]
