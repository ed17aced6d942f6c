from .addressing import AddressingScheme, PathSegmentScheme, QueryParamScheme
from .fetcher import UpstreamFetcher, UpstreamResponse, get_upstream_fetcher
from .orchestrator import ProxyOrchestrator
from .rate_limit import RateLimiter, get_rate_limiter

__all__ = [
    "AddressingScheme",
    "PathSegmentScheme",
    "QueryParamScheme",
    "UpstreamFetcher",
    "UpstreamResponse",
    "get_upstream_fetcher",
    "ProxyOrchestrator",
    "RateLimiter",
    "get_rate_limiter",
]
