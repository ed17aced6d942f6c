import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, Response

from webproxy.landing import LANDING_PAGE_HTML
from webproxy.proxy import (
    AddressingScheme,
    PathSegmentScheme,
    ProxyOrchestrator,
    QueryParamScheme,
    RateLimiter,
    UpstreamFetcher,
    get_rate_limiter,
    get_upstream_fetcher,
)
from webproxy.proxy.headers import CORS_HEADERS
from webproxy.vars import INTERCEPT_LOCATION_HREF, RATE_LIMIT, REWRITE_CSS_URLS

router = APIRouter()
logger = logging.getLogger("uvicorn.error")

PROXY_METHODS = ["GET", "POST", "PUT", "DELETE", "PATCH", "HEAD"]

query_scheme = QueryParamScheme(
    rewrites_css=REWRITE_CSS_URLS, intercepts_location=INTERCEPT_LOCATION_HREF
)
path_scheme = PathSegmentScheme(
    rewrites_css=REWRITE_CSS_URLS, intercepts_location=INTERCEPT_LOCATION_HREF
)

logger.info(f"Proxy schemes: {query_scheme!r}, {path_scheme!r}, rate limit hook: {RATE_LIMIT}")


def build_orchestrator(
    scheme: AddressingScheme, fetcher: UpstreamFetcher, rate_limiter: RateLimiter
) -> ProxyOrchestrator:
    return ProxyOrchestrator(
        scheme, fetcher, rate_limiter=rate_limiter, rate_limit_enabled=RATE_LIMIT
    )


@router.api_route("/", methods=PROXY_METHODS)
async def root(
    request: Request,
    fetcher: UpstreamFetcher = Depends(get_upstream_fetcher),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
):
    """Landing page, or the query-parameter proxy when ``?url=`` is present."""
    if "url" in request.query_params:
        return await build_orchestrator(query_scheme, fetcher, rate_limiter).handle(
            request
        )
    return HTMLResponse(LANDING_PAGE_HTML, headers=dict(CORS_HEADERS))


@router.get("/index.html")
async def index():
    return HTMLResponse(LANDING_PAGE_HTML, headers=dict(CORS_HEADERS))


@router.api_route("/proxy/{path:path}", methods=PROXY_METHODS)
async def proxy_path(
    path: str,
    request: Request,
    fetcher: UpstreamFetcher = Depends(get_upstream_fetcher),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
):
    return await build_orchestrator(path_scheme, fetcher, rate_limiter).handle(request)


@router.get("/static/{path:path}")
async def static_files(path: str):
    return PlainTextResponse(
        "Static file not found", status_code=404, headers=dict(CORS_HEADERS)
    )


# Must stay last: answers CORS preflight for every path, 404 for anything else
@router.api_route("/{path:path}", methods=PROXY_METHODS + ["OPTIONS"])
async def fallback(path: str, request: Request):
    if request.method == "OPTIONS":
        return Response(status_code=200, headers=dict(CORS_HEADERS))
    return PlainTextResponse("Not Found", status_code=404, headers=dict(CORS_HEADERS))
