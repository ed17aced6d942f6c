"""
Allow-list header projection in both directions.

Only the names listed here cross the proxy. Matching is case-insensitive,
the output keeps whatever casing the source used.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, Mapping, Optional, Tuple

from webproxy.proxy.models import TargetURL
from webproxy.vars import UPSTREAM_USER_AGENT

REQUEST_HEADER_ALLOW_LIST = frozenset(
    {
        "accept",
        "accept-language",
        "cache-control",
        "content-type",
        "user-agent",
    }
)

RESPONSE_HEADER_ALLOW_LIST = frozenset(
    {
        "content-type",
        "cache-control",
        "expires",
        "last-modified",
        "etag",
    }
)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, X-Requested-With, X-Proxy-Target",
    "Access-Control-Max-Age": "86400",
}


@dataclass(frozen=True)
class HeaderPolicy:
    """Allow-lists plus the values forced onto every upstream request."""

    request_allow_list: frozenset = REQUEST_HEADER_ALLOW_LIST
    response_allow_list: frozenset = RESPONSE_HEADER_ALLOW_LIST
    user_agent: str = UPSTREAM_USER_AGENT
    cors_headers: Mapping[str, str] = field(default_factory=lambda: dict(CORS_HEADERS))


DEFAULT_HEADER_POLICY = HeaderPolicy()


def _items(headers) -> Iterable[Tuple[str, str]]:
    if hasattr(headers, "items"):
        return headers.items()
    return headers


def project_headers(headers, allow_list: frozenset) -> Dict[str, str]:
    return {name: value for name, value in _items(headers) if name.lower() in allow_list}


def set_header(headers: Dict[str, str], name: str, value: str) -> None:
    """Set ``name`` replacing any differently-cased variant already present."""
    for existing in [k for k in headers if k.lower() == name.lower()]:
        del headers[existing]
    headers[name] = value


def filter_request_headers(headers, policy: HeaderPolicy = DEFAULT_HEADER_POLICY) -> Dict[str, str]:
    return project_headers(headers, policy.request_allow_list)


def filter_response_headers(headers, policy: HeaderPolicy = DEFAULT_HEADER_POLICY) -> Dict[str, str]:
    return project_headers(headers, policy.response_allow_list)


def build_upstream_headers(
    inbound, target: TargetURL, policy: HeaderPolicy = DEFAULT_HEADER_POLICY
) -> Dict[str, str]:
    """
    Headers for the request sent to the target.

    Overrides are applied after filtering: Origin and Referer point at the
    target itself and User-Agent is replaced so upstream bot filters see a
    regular desktop browser.
    """
    headers = filter_request_headers(inbound, policy)
    set_header(headers, "Origin", target.origin)
    set_header(headers, "Referer", target.href)
    set_header(headers, "User-Agent", policy.user_agent)
    return headers


def build_downstream_headers(
    upstream,
    policy: HeaderPolicy = DEFAULT_HEADER_POLICY,
    content_length: Optional[int] = None,
) -> Dict[str, str]:
    """Headers returned to the client; ``content_length`` is set for rewritten bodies."""
    headers = dict(policy.cors_headers)
    headers.update(filter_response_headers(upstream, policy))
    if content_length is not None:
        set_header(headers, "Content-Length", str(content_length))
    return headers
