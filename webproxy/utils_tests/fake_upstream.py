"""Test doubles for the upstream fetch collaborator and inbound requests."""

from typing import Dict, List, Optional

import httpx
from starlette.requests import Request

from webproxy.proxy.fetcher import UpstreamResponse


def upstream_response(
    status_code: int = 200,
    content: bytes = b"",
    content_type: Optional[str] = "text/plain",
    headers: Optional[Dict[str, str]] = None,
    url: Optional[str] = None,
) -> UpstreamResponse:
    all_headers = dict(headers or {})
    if content_type is not None:
        all_headers["content-type"] = content_type
    return UpstreamResponse(
        status_code=status_code,
        headers=httpx.Headers(all_headers),
        content=content,
        url=url,
    )


class RecordingFetcher:
    """Stands in for UpstreamFetcher and remembers every call."""

    def __init__(
        self,
        response: Optional[UpstreamResponse] = None,
        error: Optional[Exception] = None,
    ):
        self.response = response or upstream_response()
        self.error = error
        self.calls: List[Dict] = []

    async def fetch(self, method, url, headers, content=None):
        self.calls.append(
            {"method": method, "url": url, "headers": headers, "content": content}
        )
        if self.error is not None:
            raise self.error
        return self.response


def make_request(
    path: str,
    method: str = "GET",
    query: str = "",
    headers: Optional[Dict[str, str]] = None,
    body: bytes = b"",
    host: str = "proxy.test",
    scheme: str = "https",
) -> Request:
    """Build a real Starlette request; ``path`` is the raw, still-encoded path."""
    all_headers = {"host": host}
    all_headers.update(headers or {})
    scope = {
        "type": "http",
        "http_version": "1.1",
        "method": method,
        "scheme": scheme,
        "path": path,
        "raw_path": path.encode("latin-1"),
        "query_string": query.encode("latin-1"),
        "root_path": "",
        "headers": [
            (k.lower().encode("latin-1"), v.encode("latin-1"))
            for k, v in all_headers.items()
        ],
        "server": (host, 443 if scheme == "https" else 80),
        "client": ("203.0.113.7", 50000),
    }

    async def receive():
        return {"type": "http.request", "body": body, "more_body": False}

    return Request(scope, receive)
