"""
In-process publish/subscribe dispatcher for catalog events.

Synchronous handlers run on the publisher's thread, one after the other, before
publish() returns. Deferred handlers are queued on a pool of single-threaded
workers; the worker is chosen from the event's partition key (the series ID), so
deferred events of one series are handled serially and in publish order.
"""
import logging
import threading
import time
from collections import defaultdict
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Callable, Dict, List, Optional, Set

logger = logging.getLogger(__name__)

Handler = Callable[[Any], None]


def _handler_name(handler: Handler) -> str:
    return getattr(handler, "__qualname__", repr(handler))


class EventAggregator:
    """
    Routes published events to the handlers subscribed to their type.

    Handler exceptions are logged and never reach the publisher.

    Attributes:
        async_workers (int): Number of partitions for deferred handlers.
    """

    def __init__(self, async_workers: int = 4) -> None:
        if async_workers < 1:
            raise ValueError("async_workers must be at least 1")
        self.async_workers = async_workers
        self._handlers: Dict[type, List[Handler]] = defaultdict(list)
        self._async_handlers: Dict[type, List[Handler]] = defaultdict(list)
        self._workers = [
            ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"seasonkeeper-events-{i}")
            for i in range(async_workers)
        ]
        self._pending: Set[Future] = set()
        self._lock = threading.Lock()
        self._closed = False

    def __enter__(self) -> "EventAggregator":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.shutdown(wait=True)

    def subscribe(self, event_type: type, handler: Handler) -> None:
        """Register a handler that runs synchronously inside publish()."""
        self._handlers[event_type].append(handler)
        logger.debug(f"Subscribed {_handler_name(handler)} to {event_type.__name__}")

    def subscribe_async(self, event_type: type, handler: Handler) -> None:
        """Register a handler that runs on a partition worker after publish() returns."""
        self._async_handlers[event_type].append(handler)
        logger.debug(f"Subscribed {_handler_name(handler)} to {event_type.__name__} (deferred)")

    @staticmethod
    def _matching(registry: Dict[type, List[Handler]], event: Any) -> List[Handler]:
        handlers = []
        for event_type in type(event).__mro__:
            handlers.extend(registry.get(event_type, []))
        return handlers

    def publish(self, event: Any) -> None:
        """
        Publish an event to every subscribed handler.

        Args:
            event: Event instance. Its ``partition_key`` selects the deferred worker.

        Raises:
            RuntimeError: If the aggregator has been shut down.
        """
        if self._closed:
            raise RuntimeError("EventAggregator has been shut down")

        event_name = type(event).__name__
        logger.debug(f"Publishing {event_name}")

        for handler in self._matching(self._handlers, event):
            self._invoke(handler, event)

        async_handlers = self._matching(self._async_handlers, event)
        if not async_handlers:
            return

        partition = getattr(event, "partition_key", 0) % self.async_workers
        worker = self._workers[partition]
        for handler in async_handlers:
            future = worker.submit(self._invoke, handler, event)
            with self._lock:
                self._pending.add(future)
            future.add_done_callback(self._discard)
            logger.debug(f"Queued {_handler_name(handler)} for {event_name} on partition {partition}")

    def _invoke(self, handler: Handler, event: Any) -> None:
        try:
            handler(event)
        except Exception as e:
            logger.exception(f"{_handler_name(handler)} failed while processing [{type(event).__name__}]: {e}")

    def _discard(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

    def wait_for_pending(self, timeout: Optional[float] = None) -> bool:
        """
        Block until every queued deferred handler has run.

        Returns:
            bool: True if nothing is left pending, False if the timeout expired first.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            with self._lock:
                snapshot = {future for future in self._pending if not future.done()}
            if not snapshot:
                return True
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            _, not_done = wait(snapshot, timeout=remaining)
            if not_done:
                return False

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting events and shut down the partition workers."""
        if self._closed:
            return
        self._closed = True
        for worker in self._workers:
            worker.shutdown(wait=wait)
        logger.debug("EventAggregator shut down")
