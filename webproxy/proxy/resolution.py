"""
The URL Resolution Rule, declared once.

``RESOLUTION_RULES`` is an ordered table of (prefix, kind). The server-side
resolver below and the client-side script in ``interceptor.py`` are both
generated from it, so a reference resolves the same way whether it is
rewritten in the document or requested later by page JavaScript.
"""

from urllib.parse import urljoin

from webproxy.proxy.models import TargetURL

PROTOCOL_RELATIVE = "protocol-relative"
ORIGIN_RELATIVE = "origin-relative"
ABSOLUTE = "absolute"
RELATIVE = "relative"

# First matching prefix wins; anything else is RELATIVE
RESOLUTION_RULES = (
    ("//", PROTOCOL_RELATIVE),
    ("/", ORIGIN_RELATIVE),
    ("http", ABSOLUTE),
)


def classify_reference(reference: str) -> str:
    for prefix, kind in RESOLUTION_RULES:
        if reference.startswith(prefix):
            return kind
    return RELATIVE


_RESOLVERS = {
    PROTOCOL_RELATIVE: lambda ref, target: f"{target.scheme}:{ref}",
    ORIGIN_RELATIVE: lambda ref, target: f"{target.origin}{ref}",
    ABSOLUTE: lambda ref, target: ref,
    RELATIVE: lambda ref, target: urljoin(target.href, ref),
}


def resolve_reference(reference: str, target: TargetURL) -> str:
    """
    Absolute URL for ``reference`` found in a document fetched from ``target``.

    Raises:
        ValueError: the reference cannot be resolved (e.g. broken IPv6 literal)
    """
    return _RESOLVERS[classify_reference(reference)](reference, target)
