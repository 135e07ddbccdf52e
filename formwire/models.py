from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any


class Response:
    """
    Raw network response as read off the wire, with header order preserved.
    """

    def __init__(
        self,
        status_code: int,
        reason: str,
        http_version: str,
        headers: Iterable[tuple[str, str]],
        body: bytes,
        network_time_ms: int = 0,
    ) -> None:
        self.status_code = status_code
        self.reason = reason
        self.http_version = http_version
        self.raw_headers: list[tuple[str, str]] = list(headers)
        self._body = body
        self.network_time_ms = network_time_ms

    @property
    def headers(self) -> dict[str, str]:
        # Last-write wins; keys are lower-cased for lookups.
        out: dict[str, str] = {}
        for name, value in self.raw_headers:
            out[name.lower()] = value
        return out

    @property
    def not_modified(self) -> bool:
        return self.status_code == 304

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    @property
    def content(self) -> bytes:
        return self._body

    @property
    def text(self) -> str:
        encoding = "utf-8"
        ctype = self.headers.get("content-type")
        if ctype and "charset=" in ctype:
            encoding = ctype.split("charset=")[-1].split(";")[0].strip() or encoding
        try:
            return self._body.decode(encoding, errors="replace")
        except LookupError:
            return self._body.decode("utf-8", errors="replace")

    def json(self) -> object:
        return json.loads(self.text)

    def __repr__(self) -> str:
        return f"<Response [{self.status_code}] {len(self._body)} bytes>"


@dataclass
class CacheEntry:
    """Freshness metadata derived from response headers. Times are epoch ms."""

    data: bytes
    etag: str | None = None
    server_date: int = 0
    last_modified: int = 0
    ttl: int = 0
    soft_ttl: int = 0
    response_headers: dict[str, str] = field(default_factory=dict)

    def is_expired(self, now_ms: int) -> bool:
        return self.ttl < now_ms

    def refresh_needed(self, now_ms: int) -> bool:
        return self.soft_ttl < now_ms


@dataclass
class Result:
    """Outcome of interpreting a network response: a value or an error."""

    result: Any = None
    cache_entry: CacheEntry | None = None
    error: Exception | None = None

    @classmethod
    def success(cls, result: Any, cache_entry: CacheEntry | None = None) -> Result:
        return cls(result=result, cache_entry=cache_entry)

    @classmethod
    def failure(cls, error: Exception) -> Result:
        return cls(error=error)

    @property
    def is_success(self) -> bool:
        return self.error is None
