"""Watchdog that reruns a long-running service with exponential backoff."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Generic, List, Protocol, TypeVar

log = logging.getLogger(__name__)

_MAX_BACKOFF_EXPONENT = 16


@dataclass(frozen=True)
class RestarterConfig:
    """Restart timing, in seconds."""

    restart_interval: float
    restart_interval_max_backoff: float


class ServiceError(Exception):
    """A service stopped with an error; immediate marks a failure right at start."""

    def __init__(self, message: str, immediate: bool = False) -> None:
        super().__init__(message)
        self.immediate = immediate


class Restartable(Protocol):
    @property
    def name(self) -> str: ...

    def run(self, stop: threading.Event) -> None: ...


S = TypeVar("S", bound=Restartable)


class Restarter(Generic[S]):
    """Runs a service in a thread and restarts it whenever it raises.

    The service returns normally to signal a clean shutdown; the stop event
    tells it to finish.
    """

    def __init__(self, config: RestarterConfig, service: S) -> None:
        self.config = config
        self.service = service
        self.stop_event = threading.Event()
        self._threads: List[threading.Thread] = []

    @property
    def name(self) -> str:
        return self.service.name

    @property
    def is_running(self) -> bool:
        return any(t.is_alive() for t in self._threads)

    def run(self) -> None:
        """Start the service in the background unless already shut down."""
        if self.stop_event.is_set():
            return
        thread = threading.Thread(target=self._loop, name=f"restarter-{self.name}", daemon=True)
        self._threads.append(thread)
        thread.start()

    def shutdown(self) -> None:
        """Signal the service to stop and wait for it."""
        self.stop_event.set()
        for thread in self._threads:
            thread.join()

    def restart_interval(self, errors_in_a_row: int) -> float:
        """Delay before the next start after the given number of errors in a row."""
        exponent = min(errors_in_a_row, _MAX_BACKOFF_EXPONENT)
        interval = self.config.restart_interval * (1 << exponent)
        return min(interval, self.config.restart_interval_max_backoff)

    def _loop(self) -> None:
        immediate_errors_in_a_row = 0
        first = True
        while True:
            if not first:
                log.info("restarter[%s]: start", self.name)
            first = False

            start = time.monotonic()
            try:
                self.service.run(self.stop_event)
            except Exception as exc:  # any failure of the service leads to a restart
                log.warning("restarter[%s]: terminated with error: %s", self.name, exc)
                running_for = time.monotonic() - start
                if isinstance(exc, ServiceError) and exc.immediate:
                    immediate_errors_in_a_row += 1
                else:
                    immediate_errors_in_a_row = 0
                retry_in = self.restart_interval(immediate_errors_in_a_row)
                log.info(
                    "restarter[%s]: error after %.3fs, exponential backoff, retry in %.3fs",
                    self.name,
                    running_for,
                    retry_in,
                )
                if self.stop_event.wait(retry_in):
                    return
            else:
                return