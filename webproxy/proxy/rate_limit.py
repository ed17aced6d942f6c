from starlette.requests import Request


class RateLimiter:
    """
    Hook consulted before each proxied request when RATE_LIMIT is enabled.

    This implementation never limits. Deployments that need real limiting
    supply their own subclass (backed by shared storage) through the
    ``get_rate_limiter`` dependency.
    """

    async def is_limited(self, request: Request) -> bool:
        return False


async def get_rate_limiter() -> RateLimiter:
    return RateLimiter()
