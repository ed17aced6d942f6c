import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

import httpx

from webproxy.proxy.errors import UpstreamFetchError
from webproxy.utils.exception_logging import format_exception_message
from webproxy.vars import PROXY_TIMEOUT

logger = logging.getLogger("uvicorn.error")


@dataclass
class UpstreamResponse:
    status_code: int
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    content: bytes = b""
    url: Optional[str] = None


class UpstreamFetcher:
    """
    Issues the single upstream request for a proxied call.

    Redirects are followed by httpx, bodies are read fully (rewriting needs
    the whole document) and transport failures surface as
    UpstreamFetchError.
    """

    def __init__(self, timeout: float = PROXY_TIMEOUT, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.timeout = timeout
        self.transport = transport

    async def fetch(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        content: Optional[bytes] = None,
    ) -> UpstreamResponse:
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
                transport=self.transport,
            ) as client:
                response = await client.request(
                    method=method,
                    url=url,
                    headers=headers,
                    content=content or None,
                )
                return UpstreamResponse(
                    status_code=response.status_code,
                    headers=response.headers,
                    content=response.content,
                    url=str(response.url),
                )
        except httpx.TimeoutException as e:
            logger.error(f"[Proxy] Upstream timeout for {url}: {e!r}")
            raise UpstreamFetchError(f"Upstream timed out: {format_exception_message(e)}")
        except httpx.HTTPError as e:
            logger.error(f"[Proxy] Upstream request to {url} failed: {e!r}")
            raise UpstreamFetchError(format_exception_message(e))


async def get_upstream_fetcher() -> UpstreamFetcher:
    """FastAPI dependency; tests override it with a recording fake."""
    return UpstreamFetcher()
