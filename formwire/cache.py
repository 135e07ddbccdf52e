"""
Interpretation of HTTP caching headers.

Computes when a response becomes stale (soft TTL) and when it must no
longer be served at all (TTL) from Date, Cache-Control, Expires,
Last-Modified and ETag.
"""

from __future__ import annotations

import time
from email.utils import parsedate_to_datetime

from .models import CacheEntry, Response


def parse_date_ms(value: str | None) -> int:
    """Parse an HTTP date into epoch milliseconds, 0 when absent or invalid."""
    if not value:
        return 0
    try:
        dt = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        return 0
    return int(dt.timestamp() * 1000)


def _directive_seconds(directive: str) -> int:
    _, _, raw = directive.partition("=")
    raw = raw.strip().strip('"')
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"Invalid Cache-Control directive: {directive!r}") from None


def parse_cache_headers(response: Response, now_ms: int | None = None) -> CacheEntry | None:
    """
    Build a CacheEntry from a response's headers.

    Returns None when the server forbids caching (no-cache / no-store).

    Raises:
        ValueError: on a malformed numeric Cache-Control directive.
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    headers = response.headers

    server_date = parse_date_ms(headers.get("date"))
    max_age = 0
    stale_while_revalidate = 0
    must_revalidate = False
    has_cache_control = False

    cache_control = headers.get("cache-control")
    if cache_control is not None:
        has_cache_control = True
        for token in cache_control.split(","):
            directive = token.strip().lower()
            if directive in ("no-cache", "no-store"):
                return None
            if directive.startswith("max-age="):
                max_age = _directive_seconds(directive)
            elif directive.startswith("stale-while-revalidate="):
                stale_while_revalidate = _directive_seconds(directive)
            elif directive in ("must-revalidate", "proxy-revalidate"):
                must_revalidate = True

    server_expires = parse_date_ms(headers.get("expires"))
    last_modified = parse_date_ms(headers.get("last-modified"))

    soft_expire = 0
    final_expire = 0
    if has_cache_control:
        soft_expire = now_ms + max_age * 1000
        if must_revalidate:
            final_expire = soft_expire
        else:
            final_expire = soft_expire + stale_while_revalidate * 1000
    elif server_date > 0 and server_expires >= server_date:
        # Expires is relative to the server clock.
        soft_expire = now_ms + (server_expires - server_date)
        final_expire = soft_expire

    return CacheEntry(
        data=response.content,
        etag=headers.get("etag"),
        server_date=server_date,
        last_modified=last_modified,
        ttl=final_expire,
        soft_ttl=soft_expire,
        response_headers=headers,
    )
