"""
CORS header resolution for the contact endpoint.

The endpoint answers its own preflight requests, so headers are computed per
request from a static allow-list instead of through CORSMiddleware.
"""

from typing import Dict, Iterable, Optional

ALLOWED_METHODS = "POST"
ALLOWED_HEADERS = "Content-Type"


def resolve_cors_headers(origin: Optional[str], allowed_origins: Iterable[str]) -> Dict[str, str]:
    """
    Compute CORS response headers for a request origin.

    Methods, headers and credentials are always advertised. The
    Access-Control-Allow-Origin header is added only when the origin exactly
    matches an allow-list entry; otherwise it is omitted and browsers block
    cross-origin reads.
    """
    headers = {
        "Access-Control-Allow-Methods": ALLOWED_METHODS,
        "Access-Control-Allow-Headers": ALLOWED_HEADERS,
        "Access-Control-Allow-Credentials": "true",
    }

    if origin and origin in set(allowed_origins):
        headers["Access-Control-Allow-Origin"] = origin

    return headers
