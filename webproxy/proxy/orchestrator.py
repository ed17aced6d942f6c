"""
Request pipeline shared by both addressing schemes.

Received -> Decoded -> Validated -> Fetching -> RewritingBody -> Responding

Early exits: 400 for an invalid target, 403 for a blocked host (both before
any upstream traffic), 429 when the rate-limit hook says so, 500 for fetch
failures or anything unexpected. Every exit is a well-formed plain text
response carrying the CORS headers.
"""

import logging
from typing import Callable, Optional, Tuple

from fastapi.responses import PlainTextResponse, Response
from opentelemetry import trace
from starlette.requests import Request

from webproxy.proxy.addressing import AddressingScheme
from webproxy.proxy.errors import ProxyError, RateLimitedError
from webproxy.proxy.fetcher import UpstreamFetcher
from webproxy.proxy.headers import (
    DEFAULT_HEADER_POLICY,
    HeaderPolicy,
    build_downstream_headers,
    build_upstream_headers,
)
from webproxy.proxy.models import RewriteContext
from webproxy.proxy.rate_limit import RateLimiter
from webproxy.proxy.rewriter import content_kind, rewrite_content
from webproxy.proxy.url_classifier import BlockList, validate
from webproxy.utils import request_origin
from webproxy.utils.exception_logging import (
    format_exception_message,
    log_exception_with_details,
)
from webproxy.utils.traced_requests import traced_request
from webproxy.vars import RATE_LIMIT

logger = logging.getLogger("uvicorn.error")
tracer = trace.get_tracer(__name__)

BODYLESS_METHODS = {"GET", "HEAD"}


class ProxyOrchestrator:
    def __init__(
        self,
        scheme: AddressingScheme,
        fetcher: UpstreamFetcher,
        rate_limiter: Optional[RateLimiter] = None,
        rate_limit_enabled: bool = RATE_LIMIT,
        header_policy: HeaderPolicy = DEFAULT_HEADER_POLICY,
        block_list: Optional[BlockList] = None,
        rewriter: Callable[..., bytes] = rewrite_content,
    ):
        self.scheme = scheme
        self.fetcher = fetcher
        self.rate_limiter = rate_limiter or RateLimiter()
        self.rate_limit_enabled = rate_limit_enabled
        self.header_policy = header_policy
        self.block_list = block_list
        self.rewriter = rewriter

    async def handle(self, request: Request) -> Response:
        with traced_request(
            tracer,
            operation="proxy_request",
            scheme=self.scheme.name,
            method=request.method,
            start_message=f"[Proxy] {request.method} {request.url.path} ({self.scheme.name} scheme)",
        ) as span:
            try:
                return await self._proxy(request, span)
            except ProxyError as e:
                logger.info(f"[Proxy] Rejected with {e.status_code}: {e.message}")
                span.set_attribute("proxy.error", type(e).__name__)
                span.set_attribute("proxy.status_code", e.status_code)
                return self.error_response(e)
            except Exception as e:
                log_exception_with_details(logger, "[Proxy]", e)
                span.set_attribute("proxy.error", format_exception_message(e))
                span.set_attribute("proxy.status_code", 500)
                return self.error_response(
                    ProxyError(f"Proxy Error: {format_exception_message(e)}")
                )

    async def _proxy(self, request: Request, span) -> Response:
        if self.rate_limit_enabled and await self.rate_limiter.is_limited(request):
            raise RateLimitedError()

        candidate = self.scheme.extract_candidate(request)
        target = validate(candidate, self.block_list)
        span.set_attribute("proxy.target_url", target.href)

        method, body = await self._upstream_method_and_body(request)
        headers = build_upstream_headers(request.headers, target, self.header_policy)
        logger.debug(f"[Proxy] Fetching {method} {target.href}")

        upstream = await self.fetcher.fetch(method, target.href, headers, body)
        span.set_attribute("proxy.status_code", upstream.status_code)
        if upstream.url and upstream.url != target.href:
            logger.info(f"[Proxy] {target.href} redirected to {upstream.url}")
            span.set_attribute("proxy.final_url", upstream.url)

        content_type = upstream.headers.get("content-type", "")
        ctx = RewriteContext(
            target=target,
            proxy_origin=request_origin(request),
            scheme=self.scheme,
        )
        rewritable = content_kind(content_type, self.scheme) is not None
        try:
            content = self.rewriter(upstream.content, content_type, ctx)
        except Exception as e:
            log_exception_with_details(logger, "[Rewrite]", e, level=logging.WARNING)
            content, rewritable = upstream.content, False
        span.set_attribute("proxy.rewritten", rewritable)

        return Response(
            content=content,
            status_code=upstream.status_code,
            headers=build_downstream_headers(
                upstream.headers,
                self.header_policy,
                content_length=len(content) if rewritable else None,
            ),
        )

    async def _upstream_method_and_body(self, request: Request) -> Tuple[str, Optional[bytes]]:
        if not self.scheme.forwards_request_body:
            return "GET", None
        if request.method in BODYLESS_METHODS:
            return request.method, None
        return request.method, await request.body()

    def error_response(self, error: ProxyError) -> Response:
        return PlainTextResponse(
            error.message,
            status_code=error.status_code,
            headers=dict(self.header_policy.cors_headers),
        )
