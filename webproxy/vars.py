import os

SERVICE_NAME = os.getenv("SERVICE_NAME", "rewriting-web-proxy")

PROXY_TIMEOUT = float(os.getenv("PROXY_TIMEOUT", "30"))
RATE_LIMIT = os.getenv("RATE_LIMIT", "false").lower() == "true"

UPSTREAM_USER_AGENT = os.getenv(
    "UPSTREAM_USER_AGENT",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36",
)

# Both addressing schemes share these switches
REWRITE_CSS_URLS = os.getenv("REWRITE_CSS_URLS", "true").lower() == "true"
INTERCEPT_LOCATION_HREF = (
    os.getenv("INTERCEPT_LOCATION_HREF", "true").lower() == "true"
)

EXTRA_BLOCKED_HOST_PREFIXES = [
    p.strip()
    for p in os.getenv("EXTRA_BLOCKED_HOST_PREFIXES", "").split(",")
    if p.strip()
]

OTLP_ENDPOINT = os.getenv("OTLP_ENDPOINT")
OTLP_HEADERS = os.getenv("OTLP_HEADERS", "")
