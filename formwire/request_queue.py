from __future__ import annotations

import asyncio
import itertools
import logging
from concurrent.futures import Future, ThreadPoolExecutor

from .models import Result
from .network import HttpNetwork
from .request import Request

logger = logging.getLogger(__name__)


class RequestQueue:
    """
    Runs requests on a pool of network threads and delivers their outcome
    on a single delivery thread.

    Every request that is sent gets exactly one call to its success or
    error listener. ``add`` also returns a Future that resolves after the
    listener has run.

    Args:
        network: Network used to send requests (default: a new HttpNetwork)
        workers: Number of network threads
    """

    def __init__(self, network: HttpNetwork | None = None, workers: int = 4) -> None:
        self._owns_network = network is None
        self.network = network or HttpNetwork()
        self._sequence = itertools.count(1)
        self._network_pool = ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="formwire-network"
        )
        self._delivery_pool = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="formwire-delivery"
        )

    def add(self, request: Request) -> Future:
        """
        Queue ``request`` for sending.

        Raises:
            ValueError: if the request was already queued. A request is
                sent and delivered at most once.
        """
        if request.sequence is not None:
            raise ValueError(f"{request!r} was already queued as #{request.sequence}")
        request.sequence = next(self._sequence)
        future: Future = Future()
        self._network_pool.submit(self._run, request, future)
        logger.debug("Queued %r as #%d", request, request.sequence)
        return future

    def send(self, request: Request, timeout: float | None = None):
        """Queue ``request`` and block until its outcome is delivered."""
        return self.add(request).result(timeout)

    async def asend(self, request: Request):
        """Queue ``request`` and await its outcome."""
        return await asyncio.wrap_future(self.add(request))

    def _run(self, request: Request, future: Future) -> None:
        if not future.set_running_or_notify_cancel():
            logger.debug("Request #%s cancelled before sending", request.sequence)
            return
        try:
            response = self.network.perform_request(request)
            result = request.parse_network_response(response)
        except Exception as exc:
            result = Result.failure(exc)
        try:
            self._delivery_pool.submit(self._deliver, request, result, future)
        except RuntimeError:
            # Delivery thread already shut down by stop(wait=False).
            logger.debug("Delivering #%s on the network thread", request.sequence)
            self._deliver(request, result, future)

    def _deliver(self, request: Request, result: Result, future: Future) -> None:
        try:
            request.dispatch(result)
        except Exception:
            logger.exception("Listener for %r raised", request)
        if result.is_success:
            future.set_result(result.result)
        else:
            future.set_exception(result.error)

    def stop(self, wait: bool = True) -> None:
        """
        Stop accepting requests.

        Requests already queued are still sent and delivered; with
        ``wait=False`` their listeners run on the network threads once the
        delivery thread is gone.
        """
        self._network_pool.shutdown(wait=wait)
        self._delivery_pool.shutdown(wait=wait)
        if self._owns_network:
            self.network.close()

    def __enter__(self) -> RequestQueue:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
