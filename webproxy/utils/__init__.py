from starlette.requests import Request


def request_origin(request: Request) -> str:
    """Scheme, host and port the client used to reach this service."""
    return f"{request.url.scheme}://{request.url.netloc}"


def shorten(text: str, limit: int = 200) -> str:
    return text if len(text) <= limit else f"{text[:limit]}...({len(text)} chars)"
