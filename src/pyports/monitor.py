"""Background port polling for pyports."""

import threading
from collections.abc import Callable
from queue import Queue

from pyports.logging import get_logger
from pyports.models import PortEntity

log = get_logger(__name__)

Snapshotter = Callable[[], list[PortEntity]]


class PortMonitor:
    """
    Port monitor that snapshots listening sockets on a fixed interval.

    Runs in a separate daemon thread and pushes each snapshot to a thread-safe
    Queue. The consumer drains that queue on its own thread, so the session
    only ever sees snapshots from a single writer.
    """

    def __init__(
        self,
        update_queue: Queue[list[PortEntity]],
        inspector: Snapshotter,
        poll_rate: float = 2.0,
    ) -> None:
        """
        Initialize the PortMonitor.

        Args:
            update_queue: Thread-safe queue to push snapshots to.
            inspector: Callable returning the current entity list.
            poll_rate: How often to poll (in seconds). Default 2.0s.
        """
        self._queue = update_queue
        self._inspector = inspector
        self._poll_rate = max(0.1, poll_rate)
        self._stop_event = threading.Event()
        self._wake_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def poll_rate(self) -> float:
        """Get the current poll rate."""
        return self._poll_rate

    @poll_rate.setter
    def poll_rate(self, value: float) -> None:
        """Set the poll rate."""
        self._poll_rate = max(0.1, value)  # Minimum 0.1 seconds

    @property
    def is_running(self) -> bool:
        """Check if the monitor thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the monitoring thread."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._wake_event.clear()
        self._thread = threading.Thread(
            target=self._poll_loop,
            daemon=True,
            name="PortMonitor",
        )
        self._thread.start()
        log.debug("monitor_started", poll_rate=self._poll_rate)

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Stop the monitoring thread.

        Args:
            timeout: How long to wait for thread to stop (seconds).
        """
        self._stop_event.set()
        self._wake_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None
            log.debug("monitor_stopped")

    def request_refresh(self) -> None:
        """Take the next snapshot now instead of waiting out the interval."""
        self._wake_event.set()

    def _poll_loop(self) -> None:
        """Main polling loop running in the background thread."""
        while not self._stop_event.is_set():
            self._wake_event.clear()
            try:
                self._queue.put(list(self._inspector()))
            except Exception:
                # The inspector already degrades to []; keep polling regardless
                log.exception("snapshot_failed")

            # Wait for poll_rate seconds or until a refresh or stop is requested
            self._wake_event.wait(timeout=self._poll_rate)
