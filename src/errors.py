"""
Error taxonomy for the node configuration reconciler.

Local errors (ValidationError, ConfigParseError) are raised before any
network call is made. Remote errors carry the response verbatim.
"""

from typing import Any, Optional


class NodeConfigError(Exception):
    """Base class for all reconciler errors."""

    # Last-known state of a remote object the failed operation already wrote.
    state: Optional[Any] = None


class ValidationError(NodeConfigError, ValueError):
    """Declared input has a bad shape, range or enum value."""


class ConfigParseError(NodeConfigError):
    """An embedded JSON sub-configuration could not be parsed."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"{field}: invalid JSON object: {reason}")


class RemoteAPIError(NodeConfigError):
    """The remote API returned a non-success status."""

    def __init__(self, status: int, body: Optional[str] = None):
        self.status = status
        self.body = body or ""
        super().__init__(f"expected status code 200, received: status={status} body={self.body}")


class ConsistencyError(NodeConfigError):
    """The remote system disagrees with a write it just acknowledged."""


class InvariantViolation(NodeConfigError):
    """A response breaks the remote contract (e.g. two variants populated)."""


class NotFoundError(NodeConfigError):
    """Import resolution found no configuration with the given name."""

    def __init__(self, token: str):
        self.token = token
        super().__init__(
            f"failed to find node configuration with the following name: {token}"
        )
