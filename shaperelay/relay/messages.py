"""User-facing messages for relay failures."""

from shaperelay.relay.client import FailureKind


FAILURE_MESSAGES: dict[FailureKind, str] = {
    FailureKind.TIMEOUT: "Sorry, the request to {name} timed out.",
    FailureKind.RATE_LIMITED: "Too many requests to the Shapes API. Please try again later.",
    FailureKind.UPSTREAM_UNAVAILABLE: "The service for {name} is temporarily unavailable. Please try again later.",
    FailureKind.OTHER: "Oops, something went wrong while trying to talk to {name}.",
}


def failure_message(kind: FailureKind, name: str = "the Shape") -> str:
    """Fixed message shown in chat for a relay failure."""
    return FAILURE_MESSAGES[kind].format(name=name)
