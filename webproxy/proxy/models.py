from dataclasses import dataclass
from typing import TYPE_CHECKING
from urllib.parse import SplitResult

if TYPE_CHECKING:
    from webproxy.proxy.addressing import AddressingScheme

DEFAULT_PORTS = {"http": 80, "https": 443}


@dataclass(frozen=True)
class TargetURL:
    """An absolute http(s) URL that passed classification."""

    href: str
    scheme: str
    host: str
    hostname: str

    @classmethod
    def from_split(cls, href: str, parts: SplitResult) -> "TargetURL":
        scheme = parts.scheme.lower()
        hostname = parts.hostname or ""
        return cls(
            href=href,
            scheme=scheme,
            host=_host(scheme, hostname, parts.port),
            hostname=hostname,
        )

    @property
    def origin(self) -> str:
        return f"{self.scheme}://{self.host}"


def _host(scheme: str, hostname: str, port) -> str:
    """Host as a browser's ``URL.host`` reports it: no userinfo, no default port."""
    host = f"[{hostname}]" if ":" in hostname else hostname
    if port is not None and port != DEFAULT_PORTS.get(scheme):
        host = f"{host}:{port}"
    return host


@dataclass(frozen=True)
class RewriteContext:
    """Everything the content rewriter needs for one response."""

    target: TargetURL
    proxy_origin: str
    scheme: "AddressingScheme"

    def proxied(self, absolute_url: str) -> str:
        return f"{self.proxy_origin}{self.scheme.encode(absolute_url)}"
