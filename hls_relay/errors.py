"""
Error taxonomy for hls-relay.

Every failure a pipeline stage can produce is a RelayError subclass. The web
layer turns each one into a JSON body carrying a machine-readable ``error``
field and a human-readable ``details`` field.
"""

from typing import Any, Dict, Optional


class RelayError(Exception):
    """Base class for all relay failures."""

    code = "relay_error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message}


class ValidationError(RelayError):
    """Missing or malformed client input."""

    code = "validation_error"


class InvalidArgumentError(ValidationError, ValueError):
    """A required argument was empty or unusable."""

    code = "invalid_argument"


class UpstreamError(RelayError):
    """The origin answered with a non-2xx status."""

    code = "upstream_error"

    def __init__(self, status: int, reason: str = "", url: Optional[str] = None) -> None:
        super().__init__(f"Upstream returned {status} {reason}".strip())
        self.status = status
        self.reason = reason
        self.url = url

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["status"] = self.status
        data["reason"] = self.reason
        return data


class NetworkError(RelayError):
    """Transport-level failure talking to the origin."""

    code = "network_error"


class FetchTimeoutError(NetworkError):
    """The upstream fetch exceeded its time budget."""

    code = "timeout"


class ResolutionError(RelayError):
    """A content identifier could not be resolved to a manifest URL."""

    code = "resolution_error"
