"""Outbound relay to the Shapes service."""

from shaperelay.relay.client import (
    FailureKind,
    RelayError,
    RelayResponse,
    RelayClient,
    ShapesClient,
    classify_failure,
)
from shaperelay.relay.messages import failure_message

__all__ = [
    "FailureKind",
    "RelayError",
    "RelayResponse",
    "RelayClient",
    "ShapesClient",
    "classify_failure",
    "failure_message",
]
