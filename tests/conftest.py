"""Shared fixtures for pyports tests."""

from collections.abc import Callable

import pytest

from pyports.models import KillResult, PortEntity

HEADER = "COMMAND     PID      USER   FD   TYPE DEVICE SIZE/OFF NODE NAME"


def lsof_line(command: str, pid: str, user: str, addr_port: str) -> str:
    """Build one lsof data row with the usual nine-plus columns."""
    return f"{command}  {pid}  {user}  20u  IPv4  0xabc  0t0  TCP  {addr_port} (LISTEN)"


def lsof_output(*lines: str) -> str:
    return "\n".join([HEADER, *lines])


def make_entity(
    port: int,
    name: str = "node",
    pid: str = "100",
    address: str = "127.0.0.1",
    owner: str = "alice",
) -> PortEntity:
    return PortEntity(port=port, process_name=name, pid=pid, address=address, owner=owner)


class FakeTimer:
    """Stand-in for a Textual Timer that fires only when told to."""

    def __init__(self, delay: float, callback: Callable[[], None]) -> None:
        self.delay = delay
        self.callback = callback
        self.stopped = False
        self.fired = False

    def stop(self) -> None:
        self.stopped = True

    def fire(self) -> None:
        if not self.stopped:
            self.fired = True
            self.callback()


class FakeScheduler:
    """Records every one-shot timer a session asks for."""

    def __init__(self) -> None:
        self.timers: list[FakeTimer] = []

    def __call__(self, delay: float, callback: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer(delay, callback)
        self.timers.append(timer)
        return timer

    def live(self) -> list[FakeTimer]:
        return [t for t in self.timers if not t.stopped and not t.fired]

    def with_delay(self, delay: float) -> list[FakeTimer]:
        return [t for t in self.timers if t.delay == delay]


class FakeTerminator:
    """Records kill calls and returns a canned result."""

    def __init__(self, result: KillResult | None = None) -> None:
        self.result = result or KillResult(success=True)
        self.calls: list[str] = []

    def __call__(self, pid: str) -> KillResult:
        self.calls.append(pid)
        return self.result


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def terminator() -> FakeTerminator:
    return FakeTerminator()
