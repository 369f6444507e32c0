"""Stellar Bit Hub REST API client package.

Provides an asynchronous client that keeps a cookie session with the hub,
logs in again when the session expires, and returns validated response
types.

Exports:
    HubApiClient: Client exposing the typed hub operations.
    RequestTemplate: Replayable request description for raw hub calls.
    types: Module containing Pydantic models for API responses.
    DEFAULT_BASE_URL: Default hub address.
    DEFAULT_TIMEOUT: Default HTTP request timeout.
"""

from . import types
from .client import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, HubApiClient
from .errors import (
    AuthenticationError,
    HubError,
    RequestError,
    ResponseDecodeError,
    TransportError,
)
from .executor import RequestTemplate

__all__ = [
    "DEFAULT_BASE_URL",
    "DEFAULT_TIMEOUT",
    "AuthenticationError",
    "HubApiClient",
    "HubError",
    "RequestError",
    "RequestTemplate",
    "ResponseDecodeError",
    "TransportError",
    "types",
]
