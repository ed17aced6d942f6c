"""
Target URL classification: parse, restrict to http(s), and refuse hosts
on the block-list before anything is fetched.

The block-list is a plain prefix match on the hostname string as parsed.
It does not resolve DNS and does not know about IPv6 loopback, so
``http://[::1]/`` or a public name pointing at a private address still
passes. ``172.`` covers the whole 172.0.0.0/8 range, not only 172.16/12.
Only the requested URL is classified. Upstream redirects are followed
without re-checking, so a public host answering with a redirect to
``127.0.0.1`` or ``10.x`` reaches the internal address.
"""

import logging
import re
from typing import Iterable, Optional
from urllib.parse import urlsplit

from webproxy.proxy.errors import BlockedHostError, InvalidURLError
from webproxy.proxy.models import TargetURL
from webproxy.vars import EXTRA_BLOCKED_HOST_PREFIXES

logger = logging.getLogger("uvicorn.error")

ALLOWED_SCHEMES = {"http", "https"}

DEFAULT_BLOCKED_HOST_PREFIXES = (
    "localhost",
    "127.0.0.1",
    "0.0.0.0",
    "10.",
    "192.168.",
    "172.",
)

_FORBIDDEN_HOST_CHARS = re.compile(r"[\s<>\\^|%\"`{}#?/@]")


class BlockList:
    """Hostname prefixes the proxy refuses to reach."""

    def __init__(self, prefixes: Iterable[str] = DEFAULT_BLOCKED_HOST_PREFIXES):
        self.prefixes = tuple(prefixes)

    def is_blocked(self, hostname: str) -> bool:
        return any(hostname.startswith(prefix) for prefix in self.prefixes)


default_block_list = BlockList(
    DEFAULT_BLOCKED_HOST_PREFIXES + tuple(EXTRA_BLOCKED_HOST_PREFIXES)
)


def parse_target(candidate: Optional[str]) -> TargetURL:
    """Parse ``candidate`` as an absolute http(s) URL or raise InvalidURLError."""
    if not candidate:
        raise InvalidURLError(candidate or "")

    href = candidate.strip()
    try:
        parts = urlsplit(href)
        # Accessing port validates it
        parts.port
    except ValueError:
        raise InvalidURLError(candidate)

    if parts.scheme.lower() not in ALLOWED_SCHEMES:
        raise InvalidURLError(candidate)
    if not parts.hostname or _FORBIDDEN_HOST_CHARS.search(parts.hostname):
        raise InvalidURLError(candidate)

    return TargetURL.from_split(href, parts)


def validate(candidate: Optional[str], block_list: Optional[BlockList] = None) -> TargetURL:
    """
    Classify a candidate target.

    Returns:
        The parsed TargetURL when the candidate may be fetched

    Raises:
        InvalidURLError: malformed, relative, or non-http(s) candidate
        BlockedHostError: hostname starts with a blocked prefix
    """
    target = parse_target(candidate)
    block_list = block_list or default_block_list
    if block_list.is_blocked(target.hostname):
        logger.warning(f"[Classifier] Refusing blocked host {target.hostname}")
        raise BlockedHostError(target.hostname)
    return target
