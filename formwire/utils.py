from __future__ import annotations

from urllib.parse import urlparse

from .errors import InvalidURLError


def parse_url(url: str):
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        raise InvalidURLError("Only http and https schemes are supported")
    host = parsed.hostname or ""
    if not host:
        raise InvalidURLError(f"URL has no host: {url!r}")
    port = parsed.port or (443 if parsed.scheme == "https" else 80)
    path = parsed.path or "/"
    if parsed.query:
        path = f"{path}?{parsed.query}"
    return parsed, host, port, path


def host_header(host: str, port: int, scheme: str) -> str:
    default_port = 443 if scheme == "https" else 80
    return host if port == default_port else f"{host}:{port}"
