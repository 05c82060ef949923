# src/transport/pump.py
"""
Request pump: runs transport calls and delivers completions on the
control-loop thread.

With workers=0 the transport is called inline and the callback fires
before submit() returns. With workers > 0 calls run on a thread pool
and finished results wait in a queue until drain() is called from the
control loop, so callbacks never run concurrently with the loop.
"""

from __future__ import annotations

import logging
import queue
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Mapping, Optional, Tuple

log = logging.getLogger(__name__)

ResponseCallback = Callable[[Optional[str], Optional[str]], None]


class RequestPump:
    def __init__(self, transport: Any, workers: int = 0) -> None:
        self._transport = transport
        self._pool: Optional[ThreadPoolExecutor] = (
            ThreadPoolExecutor(max_workers=workers, thread_name_prefix="bridge-http")
            if workers > 0
            else None
        )
        self._done: "queue.Queue[Tuple[ResponseCallback, Optional[str], Optional[str]]]" = queue.Queue()
        self._in_flight = 0

    @property
    def in_flight(self) -> int:
        return self._in_flight

    def _call(self, endpoint: str, body: Mapping[str, Any]) -> Tuple[Optional[str], Optional[str]]:
        try:
            return self._transport.send(endpoint, body)
        except Exception as exc:
            log.exception("Transport raised for %s", endpoint)
            return None, str(exc) or type(exc).__name__

    def submit(self, endpoint: str, body: Mapping[str, Any], callback: ResponseCallback) -> None:
        if self._pool is None:
            response, error = self._call(endpoint, body)
            callback(response, error)
            return

        self._in_flight += 1

        def _work() -> None:
            response, error = self._call(endpoint, body)
            self._done.put((callback, response, error))

        self._pool.submit(_work)

    def drain(self) -> int:
        """Run callbacks for finished requests; returns how many ran."""
        delivered = 0
        while True:
            try:
                callback, response, error = self._done.get_nowait()
            except queue.Empty:
                break
            self._in_flight -= 1
            delivered += 1
            callback(response, error)
        return delivered

    def shutdown(self, wait: bool = True) -> None:
        if self._pool is not None:
            self._pool.shutdown(wait=wait)
            self.drain()
