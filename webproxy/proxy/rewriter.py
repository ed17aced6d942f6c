"""
Content rewriting for proxied responses.

HTML: URL-bearing attributes and ``<meta http-equiv="refresh">`` targets
are pointed at the proxy, and the interceptor script is injected before
``</head>``. CSS: every ``url(...)`` is pointed at the proxy. Other
content types pass through untouched.

Rewriting is best effort. A reference that fails to resolve is left as it
was, and a body that cannot be decoded as UTF-8 is returned unchanged.
"""

import html
import logging
import re
from typing import Callable, Optional

from webproxy.proxy.addressing import AddressingScheme
from webproxy.proxy.interceptor import interceptor_script
from webproxy.proxy.models import RewriteContext
from webproxy.proxy.resolution import resolve_reference
from webproxy.utils.exception_logging import log_exception_with_details

logger = logging.getLogger("uvicorn.error")

HTML = "html"
CSS = "css"

HTML_URL_ATTRIBUTE = re.compile(
    r"""(href|src|action|data-src|data-href)=["']([^"']+)["']""", re.IGNORECASE
)
META_REFRESH = re.compile(
    r"""<meta\s+http-equiv=["']refresh["']\s+content=["'](\d+);url=([^"']+)["']""",
    re.IGNORECASE,
)
CSS_URL = re.compile(r"""url\(["']?([^"')]+)["']?\)""", re.IGNORECASE)
HEAD_CLOSE = re.compile(r"</head>", re.IGNORECASE)

HTML_SKIPPED_PREFIXES = ("data:", "javascript:", "#")
CSS_SKIPPED_PREFIXES = ("data:", "#")

ScriptBuilder = Callable[[str, str, AddressingScheme], str]


def content_kind(content_type: Optional[str], scheme: AddressingScheme) -> Optional[str]:
    """HTML, CSS or None (pass through) for a response content type."""
    media_type = (content_type or "").strip().lower()
    if media_type.startswith("text/html"):
        return HTML
    if media_type.startswith("text/css") and scheme.rewrites_css:
        return CSS
    return None


def proxied_reference(reference: str, ctx: RewriteContext) -> str:
    return ctx.proxied(resolve_reference(reference, ctx.target))


def _rewrite_html_attribute(match: re.Match, ctx: RewriteContext) -> str:
    attribute, value = match.group(1), html.unescape(match.group(2)).strip()
    if value.startswith(HTML_SKIPPED_PREFIXES):
        return match.group(0)
    try:
        return f'{attribute}="{proxied_reference(value, ctx)}"'
    except ValueError as e:
        logger.debug(f"[Rewrite] Leaving {attribute}={value!r} unchanged: {e}")
        return match.group(0)


def _rewrite_meta_refresh(match: re.Match, ctx: RewriteContext) -> str:
    delay, value = match.group(1), html.unescape(match.group(2)).strip()
    try:
        return (
            f'<meta http-equiv="refresh" '
            f'content="{delay};url={proxied_reference(value, ctx)}"'
        )
    except ValueError as e:
        logger.debug(f"[Rewrite] Leaving meta refresh {value!r} unchanged: {e}")
        return match.group(0)


def _rewrite_css_url(match: re.Match, ctx: RewriteContext) -> str:
    value = match.group(1).strip()
    if value.startswith(CSS_SKIPPED_PREFIXES):
        return match.group(0)
    try:
        return f'url("{proxied_reference(value, ctx)}")'
    except ValueError as e:
        logger.debug(f"[Rewrite] Leaving url({value!r}) unchanged: {e}")
        return match.group(0)


def rewrite_html(
    text: str, ctx: RewriteContext, script_builder: ScriptBuilder = interceptor_script
) -> str:
    text = HTML_URL_ATTRIBUTE.sub(lambda m: _rewrite_html_attribute(m, ctx), text)
    text = META_REFRESH.sub(lambda m: _rewrite_meta_refresh(m, ctx), text)

    # No </head>, no injection
    script = script_builder(ctx.proxy_origin, ctx.target.href, ctx.scheme)
    return HEAD_CLOSE.sub(lambda m: f"{script}{m.group(0)}", text, count=1)


def rewrite_css(text: str, ctx: RewriteContext) -> str:
    return CSS_URL.sub(lambda m: _rewrite_css_url(m, ctx), text)


def rewrite_content(
    body: bytes,
    content_type: Optional[str],
    ctx: RewriteContext,
    script_builder: ScriptBuilder = interceptor_script,
) -> bytes:
    """
    Rewrite a fetched body for delivery through the proxy.

    Args:
        body: Raw upstream body (already decompressed by httpx)
        content_type: Upstream ``Content-Type`` header value
        ctx: Target, proxy origin and addressing scheme for this response
        script_builder: Produces the interceptor element for HTML

    Returns:
        Rewritten bytes, or ``body`` itself when the type is not rewritten
        or rewriting failed
    """
    kind = content_kind(content_type, ctx.scheme)
    if kind is None or not body:
        return body

    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as e:
        logger.info(f"[Rewrite] Passing {kind} through unchanged, not UTF-8: {e}")
        return body

    try:
        if kind == HTML:
            text = rewrite_html(text, ctx, script_builder)
        else:
            text = rewrite_css(text, ctx)
        return text.encode("utf-8")
    except Exception as e:
        log_exception_with_details(logger, "[Rewrite]", e, level=logging.WARNING)
        return body
