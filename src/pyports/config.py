"""Runtime settings for pyports.

There are no config files; every session starts from these defaults.
"""

from dataclasses import dataclass, field

DEFAULT_INSPECT_COMMAND = ("lsof", "-nP", "-iTCP", "-sTCP:LISTEN", "+c", "0")


@dataclass
class Config:
    """Timing and command settings for one session."""

    refresh_interval: float = 2.0  # Seconds between periodic snapshots
    kill_refresh_delay: float = 0.3  # Let a killed process exit before re-reading
    feedback_timeout: float = 2.0  # Seconds kill feedback stays on screen
    inspect_timeout: float = 5.0  # Hard limit on one lsof call
    queue_check_interval: float = 0.1  # How often the UI drains the snapshot queue
    inspect_command: tuple[str, ...] = field(default=DEFAULT_INSPECT_COMMAND)
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        for name in (
            "refresh_interval",
            "kill_refresh_delay",
            "feedback_timeout",
            "inspect_timeout",
            "queue_check_interval",
        ):
            value = getattr(self, name)
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value!r}")
        if not self.inspect_command:
            raise ValueError("inspect_command must not be empty")
        self.inspect_command = tuple(self.inspect_command)
        self.log_level = self.log_level.upper()
