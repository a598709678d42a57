"""
Long-running operation tracking.

Each long-running operation (image generation, export) gets an
OperationTracker: an explicit state machine that runs the work on a single
background worker and refuses to start a second run while one is in flight.
Windows derive their enabled/disabled controls from `controls_enabled`
instead of keeping their own loading flags.

    idle --submit--> in_flight --> succeeded | failed --acknowledge--> idle

Classes:
    OperationTracker: Single in-flight operation state machine
"""

import concurrent.futures
import logging
import threading
from typing import Any, Callable, Literal, Optional

logger = logging.getLogger(__name__)

OperationStatus = Literal["idle", "in_flight", "succeeded", "failed"]
SettledCallback = Callable[["OperationTracker"], None]


class OperationTracker:
    """
    Runs one operation at a time and records how it settled.

    Example:
        >>> tracker = OperationTracker("generation")
        >>> future = tracker.submit(client.generate, "a red cube", "1:1")
        >>> tracker.submit(client.generate, "again", "1:1") is None
        True
    """

    def __init__(
        self,
        name: str,
        executor: Optional[concurrent.futures.Executor] = None,
    ) -> None:
        self.name = name
        self._owns_executor = executor is None
        self._executor = executor or concurrent.futures.ThreadPoolExecutor(
            max_workers=1, thread_name_prefix=f"ais-{name}"
        )
        self._lock = threading.Lock()
        self.status: OperationStatus = "idle"
        self.result: Any = None
        self.error: Optional[BaseException] = None

    @property
    def is_busy(self) -> bool:
        return self.status == "in_flight"

    @property
    def controls_enabled(self) -> bool:
        return not self.is_busy

    def submit(
        self,
        fn: Callable[..., Any],
        *args: Any,
        on_settled: Optional[SettledCallback] = None,
    ) -> Optional[concurrent.futures.Future]:
        """
        Start the operation unless one is already in flight.

        Args:
            fn: Work to run on the background worker
            *args: Positional arguments for fn
            on_settled: Called with this tracker once the work finishes. Runs
                on the worker thread; GUI callers must hop back to their own
                thread (e.g. through a queued signal).

        Returns:
            The Future for the new run, or None if the request was refused
        """
        with self._lock:
            if self.status == "in_flight":
                logger.debug(f"{self.name}: refused, an operation is already in flight")
                return None
            self.status = "in_flight"
            self.result = None
            self.error = None

        logger.debug(f"{self.name}: started")
        future = self._executor.submit(fn, *args)
        future.add_done_callback(lambda done: self._settle(done, on_settled))
        return future

    def _settle(
        self,
        future: concurrent.futures.Future,
        on_settled: Optional[SettledCallback],
    ) -> None:
        error = future.exception()
        with self._lock:
            if error is None:
                self.result = future.result()
                self.status = "succeeded"
            else:
                self.error = error
                self.status = "failed"

        if error is None:
            logger.debug(f"{self.name}: succeeded")
        else:
            logger.warning(f"{self.name}: failed: {error}")

        if on_settled is not None:
            on_settled(self)

    def acknowledge(self) -> None:
        """Return a settled operation to idle, clearing its result and error."""
        with self._lock:
            if self.status == "in_flight":
                return
            self.status = "idle"
            self.result = None
            self.error = None

    def shutdown(self, wait: bool = False) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=wait)
