"""
Access to the generative-language service.

The transport speaks HTTP; the client adds error classification and
retries on top of it.
"""

from multiglot.services.ai.client import (
    RetryingClient,
    ValidationResult,
    classify_failure,
    compute_delay_ms,
    parse_retry_after_ms,
)
from multiglot.services.ai.transport import (
    HttpxTransport,
    ServiceRequest,
    Transport,
    TransportFailure,
    UnexpectedResponse,
)

__all__ = [
    "RetryingClient",
    "ValidationResult",
    "classify_failure",
    "compute_delay_ms",
    "parse_retry_after_ms",
    "HttpxTransport",
    "ServiceRequest",
    "Transport",
    "TransportFailure",
    "UnexpectedResponse",
]
