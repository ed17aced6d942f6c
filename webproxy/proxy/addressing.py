"""
Addressing schemes: how a target URL is carried inside a request to this
proxy, and how references in rewritten content are pointed back at it.

Two schemes exist:

``QueryParamScheme``   ``/?url=<percent-encoded URL>``  (read-only, always GET)
``PathSegmentScheme``  ``/proxy/<percent-encoded or base64 URL>``

Percent-encoding follows ``encodeURIComponent`` so that references encoded
here and references encoded by the injected browser script are identical.
"""

import base64
import logging
import re
from abc import ABC, abstractmethod
from urllib.parse import parse_qs, quote, unquote

from starlette.requests import Request

logger = logging.getLogger("uvicorn.error")

# Characters encodeURIComponent leaves alone besides alphanumerics
URI_COMPONENT_SAFE = "-_.!~*'()"

BASE64_SEGMENT = re.compile(r"[A-Za-z0-9+/]+=*")
_MALFORMED_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def encode_uri_component(value: str) -> str:
    return quote(value, safe=URI_COMPONENT_SAFE)


def decode_uri_component(value: str) -> str:
    """Strict inverse of encode_uri_component; raises ValueError on bad escapes."""
    if _MALFORMED_ESCAPE.search(value):
        raise ValueError(f"malformed percent-escape in {value!r}")
    return unquote(value, errors="strict")


class AddressingScheme(ABC):
    """
    Strategy describing one way of embedding target URLs in proxy requests.

    Attributes:
        name: Short identifier used in logs and span attributes
        prefix: Proxy-relative prefix placed before the encoded URL
        forwards_request_body: Whether non-GET/HEAD methods and bodies
            are passed upstream; when False every request becomes a GET
        rewrites_css: Whether ``text/css`` bodies are rewritten
        intercepts_location: Whether the injected script overrides
            ``location.href`` assignment
    """

    name: str = ""
    prefix: str = ""
    forwards_request_body: bool = True

    def __init__(self, rewrites_css: bool = True, intercepts_location: bool = True):
        self.rewrites_css = rewrites_css
        self.intercepts_location = intercepts_location

    def encode(self, url: str) -> str:
        """Proxy-relative reference for an absolute target URL."""
        return f"{self.prefix}{encode_uri_component(url)}"

    @abstractmethod
    def decode(self, request_path: str) -> str:
        """Candidate target string carried by a proxy request path. Never raises."""

    @abstractmethod
    def request_path(self, request: Request) -> str:
        """The part of an inbound request that ``decode`` understands."""

    def extract_candidate(self, request: Request) -> str:
        return self.decode(self.request_path(request))

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(rewrites_css={self.rewrites_css}, "
            f"intercepts_location={self.intercepts_location})"
        )


class QueryParamScheme(AddressingScheme):
    name = "query"
    prefix = "/?url="
    forwards_request_body = False

    def decode(self, request_path: str) -> str:
        _, _, query = request_path.partition("?")
        values = parse_qs(query, keep_blank_values=True).get("url")
        return values[0] if values else ""

    def request_path(self, request: Request) -> str:
        return f"{request.url.path}?{request.url.query}"


class PathSegmentScheme(AddressingScheme):
    """
    ``/proxy/<segment>`` addressing.

    A segment made only of base64 alphabet characters is base64-decoded
    before anything else. Percent-encoded absolute URLs always contain
    ``%`` (the ``:`` after the scheme is escaped) so they never take that
    branch, but any other segment that happens to fit the alphabet does:
    ``/proxy/abcd`` decodes as base64, not as the literal text ``abcd``.
    When neither decoding works the raw segment is returned unchanged and
    classification decides what to do with it.
    """

    name = "path"
    prefix = "/proxy/"

    def decode(self, request_path: str) -> str:
        segment = request_path
        if segment.startswith(self.prefix):
            segment = segment[len(self.prefix):]

        try:
            if BASE64_SEGMENT.fullmatch(segment):
                return base64.b64decode(segment, validate=True).decode("utf-8")
            return decode_uri_component(segment)
        except ValueError as e:
            # binascii.Error and UnicodeDecodeError are both ValueErrors
            logger.debug(f"[Codec] Using raw segment, decode failed: {e}")
            return segment

    def request_path(self, request: Request) -> str:
        raw_path = request.scope.get("raw_path")
        if raw_path:
            # Encoded targets escape "?", so anything after one is our own query
            return raw_path.decode("latin-1").partition("?")[0]
        return request.url.path
