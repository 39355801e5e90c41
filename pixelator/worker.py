# pixelator/worker.py
from __future__ import annotations

"""
Message channel running pipeline requests off the caller's thread.

PixelatorWorker.post(message) queues one request and returns a Response
handle. Requests are not cancelable: once posted, each one runs to
completion and its response is delivered, even when a newer request has
been posted since. Responses reach on_message in completion order, which
is not necessarily posting order; callers that only want the latest result
tag requests with an 'id' (echoed on the response) and drop stale ones.
"""

import threading
from concurrent.futures import Executor, Future, ProcessPoolExecutor, ThreadPoolExecutor
from typing import Any, Callable, Dict, Mapping, Optional

from .pipeline import handle_message
from .utils import error

MessageCallback = Callable[[Dict[str, Any]], None]


def _response_of(future: "Future[Dict[str, Any]]", request_id: Any) -> Dict[str, Any]:
    """Future -> response dict; executor failures become error responses."""
    try:
        return future.result()
    except Exception as exc:  # broken pool, pickling failure
        response: Dict[str, Any] = {"type": "error", "message": str(exc) or type(exc).__name__}
        if request_id is not None:
            response["id"] = request_id
        return response


class Response:
    """Read-only handle on one posted request. There is no cancel()."""

    __slots__ = ("_future", "request_id")

    def __init__(self, future: "Future[Dict[str, Any]]", request_id: Any = None) -> None:
        self._future = future
        self.request_id = request_id

    def done(self) -> bool:
        return self._future.done()

    def result(self, timeout: Optional[float] = None) -> Dict[str, Any]:
        """Block until the response is ready; raises TimeoutError on timeout."""
        self._future.exception(timeout)  # wait without raising task errors
        return _response_of(self._future, self.request_id)

    def add_done_callback(self, fn: Callable[["Response"], None]) -> None:
        self._future.add_done_callback(lambda _f: fn(self))


class PixelatorWorker:
    """
    Executor-backed request channel.

    max_workers=1 keeps requests strictly one at a time. processes=True runs
    requests in a ProcessPoolExecutor so CPU-heavy runs do not hold the GIL
    of the posting process.
    """

    def __init__(
        self,
        max_workers: int = 1,
        processes: bool = False,
        on_message: Optional[MessageCallback] = None,
        debug: bool = False,
    ) -> None:
        workers = max(1, int(max_workers))
        self._executor: Executor = (
            ProcessPoolExecutor(max_workers=workers)
            if processes
            else ThreadPoolExecutor(max_workers=workers, thread_name_prefix="pixelator")
        )
        self._on_message = on_message
        self._debug = bool(debug)
        self._deliver_lock = threading.Lock()
        self._closed = False

    def post(self, message: Mapping[str, Any]) -> Response:
        """Queue one request message. Non-blocking."""
        if self._closed:
            raise RuntimeError("worker is closed")
        request_id = message.get("id") if isinstance(message, Mapping) else None
        future = self._executor.submit(handle_message, dict(message), debug=self._debug)
        response = Response(future, request_id)
        if self._on_message is not None:
            future.add_done_callback(lambda f: self._deliver(f, request_id))
        return response

    def _deliver(self, future: "Future[Dict[str, Any]]", request_id: Any) -> None:
        response = _response_of(future, request_id)
        if response.get("type") == "error":
            error(f"pixelator request failed: {response.get('message')}")
        callback = self._on_message
        if callback is None:
            return
        with self._deliver_lock:
            try:
                callback(response)
            except Exception as exc:
                error(f"on_message callback raised {exc!r}")

    def close(self, wait: bool = True) -> None:
        """Stop accepting requests; with wait=True, finish the queued ones first."""
        self._closed = True
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "PixelatorWorker":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close(wait=True)


__all__ = ["MessageCallback", "Response", "PixelatorWorker"]
