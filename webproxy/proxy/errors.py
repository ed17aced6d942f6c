class ProxyError(Exception):
    """Base class for failures that end a proxied request early."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidURLError(ProxyError):
    """Candidate is not an absolute http(s) URL."""

    status_code = 400

    def __init__(self, candidate: str):
        super().__init__(f"Invalid URL: {candidate}")
        self.candidate = candidate


class BlockedHostError(ProxyError):
    """Target hostname matches the block-list."""

    status_code = 403

    def __init__(self, hostname: str):
        super().__init__("Access denied")
        self.hostname = hostname


class RateLimitedError(ProxyError):
    status_code = 429

    def __init__(self):
        super().__init__("Rate limit exceeded")


class UpstreamFetchError(ProxyError):
    """Network, DNS or timeout failure while talking to the target."""

    status_code = 500

    def __init__(self, detail: str):
        super().__init__(
            f"Proxy Error: {detail}\nTarget URL might be invalid or unreachable."
        )
        self.detail = detail
