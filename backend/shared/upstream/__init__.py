"""Transport client for the Eurogames backend API."""

from shared.upstream.client import API_PREFIX, DEFAULT_TIMEOUT_SECONDS, UpstreamClient
from shared.upstream.types import ApiEnvelope, CallResult, ErrorKind, Failure, Success

__all__ = [
    "API_PREFIX",
    "DEFAULT_TIMEOUT_SECONDS",
    "ApiEnvelope",
    "CallResult",
    "ErrorKind",
    "Failure",
    "Success",
    "UpstreamClient",
]
