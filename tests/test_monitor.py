"""Tests for the PortMonitor class."""

import time
from queue import Empty, Queue

from conftest import make_entity
from pyports.models import PortEntity
from pyports.monitor import PortMonitor

PORTS = [make_entity(3000), make_entity(8080, pid="200")]


class CountingInspector:
    """Returns a fixed list and counts calls."""

    def __init__(self, result: list[PortEntity] | None = None) -> None:
        self.result = PORTS if result is None else result
        self.calls = 0

    def __call__(self) -> list[PortEntity]:
        self.calls += 1
        return self.result


class FlakyInspector:
    """Raises on the first call, then behaves."""

    def __init__(self) -> None:
        self.calls = 0

    def __call__(self) -> list[PortEntity]:
        self.calls += 1
        if self.calls == 1:
            raise RuntimeError("boom")
        return PORTS


class TestPortMonitor:
    """Tests for PortMonitor class."""

    def test_monitor_creation(self):
        """Test PortMonitor can be instantiated."""
        queue: Queue[list[PortEntity]] = Queue()
        monitor = PortMonitor(queue, CountingInspector())

        assert monitor.poll_rate == 2.0
        assert not monitor.is_running

    def test_poll_rate_minimum(self):
        """Test poll rate has a minimum value."""
        queue: Queue[list[PortEntity]] = Queue()
        monitor = PortMonitor(queue, CountingInspector(), poll_rate=0.0)
        assert monitor.poll_rate >= 0.1

        monitor.poll_rate = 0.01
        assert monitor.poll_rate >= 0.1

    def test_monitor_start_stop(self):
        """Test PortMonitor can be started and stopped."""
        queue: Queue[list[PortEntity]] = Queue()
        monitor = PortMonitor(queue, CountingInspector(), poll_rate=0.1)

        monitor.start()
        assert monitor.is_running

        monitor.stop()
        assert not monitor.is_running

    def test_monitor_start_idempotent(self):
        """Test starting an already running monitor is safe."""
        queue: Queue[list[PortEntity]] = Queue()
        monitor = PortMonitor(queue, CountingInspector(), poll_rate=0.1)

        monitor.start()
        thread1 = monitor._thread
        monitor.start()
        thread2 = monitor._thread

        assert thread1 is thread2
        monitor.stop()

    def test_first_snapshot_is_immediate(self):
        """Test a snapshot is queued right after start, not after one interval."""
        queue: Queue[list[PortEntity]] = Queue()
        monitor = PortMonitor(queue, CountingInspector(), poll_rate=30.0)

        monitor.start()
        try:
            assert queue.get(timeout=2.0) == PORTS
        finally:
            monitor.stop()

    def test_monitor_polls_repeatedly(self):
        """Test the monitor keeps queueing snapshots."""
        queue: Queue[list[PortEntity]] = Queue()
        monitor = PortMonitor(queue, CountingInspector(), poll_rate=0.1)

        monitor.start()
        try:
            assert queue.get(timeout=2.0) == PORTS
            assert queue.get(timeout=2.0) == PORTS
        finally:
            monitor.stop()

    def test_request_refresh_wakes_the_loop(self):
        """Test an on-demand refresh does not wait out a long interval."""
        queue: Queue[list[PortEntity]] = Queue()
        inspector = CountingInspector()
        monitor = PortMonitor(queue, inspector, poll_rate=30.0)

        monitor.start()
        try:
            queue.get(timeout=2.0)
            monitor.request_refresh()
            assert queue.get(timeout=2.0) == PORTS
            assert inspector.calls >= 2
        finally:
            monitor.stop()

    def test_monitor_survives_inspector_errors(self):
        """Test one failing snapshot does not stop the loop."""
        queue: Queue[list[PortEntity]] = Queue()
        inspector = FlakyInspector()
        monitor = PortMonitor(queue, inspector, poll_rate=0.1)

        monitor.start()
        try:
            assert queue.get(timeout=2.0) == PORTS
            assert monitor.is_running
        finally:
            monitor.stop()

    def test_stop_ends_polling(self):
        """Test no snapshots arrive after stop."""
        queue: Queue[list[PortEntity]] = Queue()
        inspector = CountingInspector()
        monitor = PortMonitor(queue, inspector, poll_rate=0.1)

        monitor.start()
        queue.get(timeout=2.0)
        monitor.stop()
        while True:
            try:
                queue.get_nowait()
            except Empty:
                break

        calls = inspector.calls
        time.sleep(0.3)
        assert inspector.calls == calls
        assert queue.empty()

    def test_daemon_thread(self):
        """Test monitor thread is a daemon thread."""
        queue: Queue[list[PortEntity]] = Queue()
        monitor = PortMonitor(queue, CountingInspector(), poll_rate=0.1)

        monitor.start()
        try:
            assert monitor._thread is not None
            assert monitor._thread.daemon is True
            assert monitor._thread.name == "PortMonitor"
        finally:
            monitor.stop()
