from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from .cache import parse_cache_headers
from .errors import ParseError
from .models import Response, Result
from .multipart import MultipartBody
from .parts import Part
from .retry import RetryPolicy

logger = logging.getLogger(__name__)

Listener = Callable[[object], None]
ErrorListener = Callable[[Exception], None]


class Request:
    """
    Base class for requests handled by HttpNetwork and RequestQueue.

    Subclasses provide the body and decide how a raw Response is turned
    into a Result. ``parse_network_response`` and ``deliver_response`` are
    override hooks: the base versions raise NotImplementedError, so a bare
    Request can describe headers and body but cannot be delivered. Exactly
    one of ``deliver_response`` / ``deliver_error`` runs per request, once,
    through ``dispatch``.
    """

    DEFAULT_CONTENT_TYPE = "application/x-www-form-urlencoded; charset=UTF-8"

    def __init__(
        self,
        method: str,
        url: str,
        error_listener: ErrorListener | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self.method = method.upper()
        self.url = url
        self.error_listener = error_listener
        self.retry_policy = retry_policy or RetryPolicy()
        self.sequence: int | None = None
        self.sent = False
        self._delivered = False
        self._lock = threading.Lock()

    @property
    def delivered(self) -> bool:
        return self._delivered

    def get_headers(self) -> dict[str, str]:
        return {}

    def get_body(self) -> bytes | None:
        return None

    def get_body_content_type(self) -> str:
        return self.DEFAULT_CONTENT_TYPE

    def parse_network_response(self, response: Response) -> Result:
        raise NotImplementedError

    def deliver_response(self, response: object) -> None:
        raise NotImplementedError

    def deliver_error(self, error: Exception) -> None:
        if self.error_listener is not None:
            self.error_listener(error)

    def finish(self) -> bool:
        """Mark the request delivered. Returns False if it already was."""
        with self._lock:
            if self._delivered:
                return False
            self._delivered = True
            return True

    def dispatch(self, result: Result) -> bool:
        """
        Hand a Result to the matching listener, at most once per request.

        Returns True if a listener was invoked.
        """
        if not self.finish():
            logger.warning("Ignoring duplicate delivery for %r", self)
            return False
        if result.is_success:
            logger.debug("Delivering response for %r", self)
            self.deliver_response(result.result)
        else:
            logger.debug("Delivering error for %r: %s", self, result.error)
            self.deliver_error(result.error)
        return True

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.method} {self.url}>"


class MultipartRequest(Request):
    """
    A request that POSTs (by default) a multipart/form-data body.

    Args:
        url: URL to send the request to
        headers: Headers to send instead of the transport defaults
        listener: Called with the raw Response on success
        error_listener: Called with the error on failure
        method: HTTP method (default: "POST")
        retry_policy: Retry policy used by the network layer
    """

    def __init__(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        listener: Listener | None = None,
        error_listener: ErrorListener | None = None,
        method: str = "POST",
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        super().__init__(method, url, error_listener, retry_policy)
        self.headers = headers
        self.listener = listener
        self.body = MultipartBody()

    @property
    def parts(self) -> tuple[Part, ...]:
        return self.body.parts

    def add_part(self, part: Part | None) -> None:
        if part is None:
            return
        if self.sent:
            logger.warning("Part %r added to %r after it was sent", part.name, self)
        self.body.add_part(part)

    def get_headers(self) -> dict[str, str]:
        if self.headers:
            return self.headers
        return super().get_headers()

    def get_body_content_type(self) -> str:
        return self.body.content_type

    def get_body(self) -> bytes:
        return self.body.build()

    def parse_network_response(self, response: Response) -> Result:
        try:
            return Result.success(response, parse_cache_headers(response))
        except Exception as exc:
            error = ParseError(f"Could not parse response headers: {exc}")
            error.__cause__ = exc
            return Result.failure(error)

    def deliver_response(self, response: object) -> None:
        if self.listener is not None:
            self.listener(response)
