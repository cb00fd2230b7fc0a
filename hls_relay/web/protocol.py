"""
Response policy and error serialization for the HTTP boundary.

Converts a ResourceClass into the headers a player should see, and a
RelayError into the status code plus JSON body of an error response:
    {"error": "<summary>", "details": "<message>"}
"""

from typing import Any, Dict, Tuple

from ..errors import RelayError, UpstreamError, ValidationError
from ..types import ResourceClass

MANIFEST_CONTENT_TYPE = "application/vnd.apple.mpegurl"
SEGMENT_CONTENT_TYPE = "video/mp2t"

# Segment lists can change; a given upstream segment URL never does.
RESPONSE_POLICIES: Dict[ResourceClass, Dict[str, str]] = {
    ResourceClass.MANIFEST: {
        "Content-Type": MANIFEST_CONTENT_TYPE,
        "Cache-Control": "public, max-age=600",
    },
    ResourceClass.SEGMENT: {
        "Content-Type": SEGMENT_CONTENT_TYPE,
        "Cache-Control": "public, max-age=31536000",
    },
}

CORS_HEADERS: Dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def classify_url(url: str) -> ResourceClass:
    return ResourceClass.for_url(url)


def headers_for(resource_class: ResourceClass) -> Dict[str, str]:
    return dict(RESPONSE_POLICIES[resource_class])


def proxy_error_to_response(error: RelayError) -> Tuple[int, Dict[str, Any]]:
    """Map a streaming-proxy failure to (status_code, body)."""
    if isinstance(error, ValidationError):
        return 400, {"error": error.message}
    if isinstance(error, UpstreamError):
        return error.status, {"error": error.reason, "status": error.status}
    return 500, {"error": "Failed to fetch data", "details": error.message}


def watch_error_to_response(error: RelayError) -> Tuple[int, Dict[str, Any]]:
    """Map a watch failure to (status_code, body). Every failure is a 500."""
    if isinstance(error, ValidationError):
        return 500, {"error": error.message}
    return 500, {"error": "Failed to fetch playlist", "details": error.message}
