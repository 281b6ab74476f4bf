"""Data models for pyports."""

from dataclasses import dataclass
from enum import Enum


@dataclass(slots=True, frozen=True)
class PortEntity:
    """Immutable snapshot of one listening TCP socket."""

    port: int  # 1 - 65535
    process_name: str  # may be truncated by lsof
    pid: str  # kept as text, validated only before a kill
    address: str  # normalized: dotted IPv4, 0.0.0.0 or 127.0.0.1
    owner: str

    @property
    def key(self) -> tuple[str, int, str]:
        """Deduplication key: one logical entity per (address, port, pid)."""
        return (self.address, self.port, self.pid)


class Mode(Enum):
    """Interaction modes of a session."""

    NAVIGATE = "navigate"
    SEARCH = "search"


class FeedbackKind(Enum):
    """Outcome tag for kill feedback."""

    SUCCESS = "success"
    ERROR = "error"


@dataclass(slots=True, frozen=True)
class Feedback:
    """Transient status text describing the most recent kill attempt."""

    kind: FeedbackKind
    text: str

    @classmethod
    def success(cls, text: str) -> "Feedback":
        return cls(FeedbackKind.SUCCESS, text)

    @classmethod
    def error(cls, text: str) -> "Feedback":
        return cls(FeedbackKind.ERROR, text)


@dataclass(slots=True, frozen=True)
class KillResult:
    """Result of a termination attempt. Never raised, always returned."""

    success: bool
    error: str | None = None


@dataclass(slots=True, frozen=True)
class SessionState:
    """Read-only view of a session, as seen by the input dispatcher and renderer."""

    mode: Mode
    query: str
    selected_index: int
    filtered_count: int
    confirm_pending: bool
    help_visible: bool
    feedback: Feedback | None = None

    @property
    def has_selection(self) -> bool:
        return self.filtered_count > 0
