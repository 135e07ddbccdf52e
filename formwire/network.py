from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping

from .compression import ACCEPT_ENCODING
from .errors import HTTPError, RetryError
from .headers import merge_headers
from .models import Response
from .pool import ConnectionPool
from .request import Request
from .retry import default_retryable_exceptions
from .utils import host_header, parse_url

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "formwire"


class HttpNetwork:
    """
    Sends a Request over HTTP/1.1 and returns the raw Response.

    The request body is serialized again for every attempt, so retries
    always send exactly what the request produces at that moment.

    Args:
        timeout: Socket timeout in seconds
        verify: Whether to verify TLS certificates
        max_per_host: Idle connections kept per (scheme, host, port)
        default_headers: Headers sent with every request unless overridden
        pool: Connection pool to use instead of a private one
        sleep: Function used to wait between retries
    """

    def __init__(
        self,
        timeout: float = 10.0,
        verify: bool = True,
        max_per_host: int = 4,
        default_headers: Mapping[str, str] | None = None,
        pool: ConnectionPool | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.timeout = timeout
        self.verify = verify
        self.default_headers = dict(default_headers or {})
        self.pool = pool or ConnectionPool(timeout=timeout, verify=verify, max_per_host=max_per_host)
        self._sleep = sleep

    def build_headers(
        self, request: Request, host: str, port: int, scheme: str, body: bytes | None
    ) -> list[tuple[str, str]]:
        computed = {"Host": host_header(host, port, scheme)}
        if body is not None:
            computed["Content-Type"] = request.get_body_content_type()
            computed["Content-Length"] = str(len(body))
        elif request.method in ("POST", "PUT", "PATCH"):
            computed["Content-Length"] = "0"
        defaults = [
            ("User-Agent", DEFAULT_USER_AGENT),
            ("Accept", "*/*"),
            ("Accept-Encoding", ACCEPT_ENCODING),
            ("Connection", "keep-alive"),
        ]
        # Content-Type and Content-Length describe the body actually sent.
        return merge_headers(defaults, self.default_headers, request.get_headers(), computed)

    def perform_request(self, request: Request) -> Response:
        """
        Send ``request``, retrying according to its retry policy.

        Raises:
            BodyBuildError: if the request body cannot be serialized.
            HTTPError: for a 4xx/5xx response that is not retried further.
            RetryError: when transport failures outlast the retry policy.
            ConnectionError, ProtocolError, TimeoutError: transport failures
                when the policy allows no retries.
        """
        parsed, host, port, path = parse_url(request.url)
        policy = request.retry_policy
        attempt = 0
        while True:
            body = request.get_body()
            headers = self.build_headers(request, host, port, parsed.scheme, body)
            request.sent = True
            conn = self.pool.acquire(parsed.scheme, host, port)
            logger.debug("%s %s (attempt %d)", request.method, request.url, attempt + 1)
            try:
                response = conn.request(request.method, path, headers, body)
            except default_retryable_exceptions() as exc:
                conn.close()
                if not policy.should_retry(attempt, exc=exc):
                    if attempt == 0:
                        raise
                    raise RetryError(f"Gave up after {attempt + 1} attempts: {exc}") from exc
                self._backoff(policy, attempt, exc)
                attempt += 1
                continue
            except Exception:
                conn.close()
                raise
            self.pool.release(conn)

            if response.status_code < 400:
                return response
            if policy.should_retry(attempt, status_code=response.status_code):
                self._backoff(policy, attempt, f"status {response.status_code}")
                attempt += 1
                continue
            raise HTTPError(
                f"{response.status_code} {response.reason} for {request.method} {request.url}",
                response=response,
            )

    def _backoff(self, policy, attempt: int, reason: object) -> None:
        delay = policy.delay_for(attempt)
        logger.info("Retrying in %.2fs after %s", delay, reason)
        self._sleep(delay)

    def close(self) -> None:
        self.pool.close()

    def __enter__(self) -> HttpNetwork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
