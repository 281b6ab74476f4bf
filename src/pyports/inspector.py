"""Read listening TCP sockets from lsof."""

import subprocess

from pyports.config import DEFAULT_INSPECT_COMMAND
from pyports.logging import get_logger
from pyports.models import PortEntity
from pyports.normalizer import normalize

log = get_logger(__name__)


class ProcessInspector:
    """
    Runs the socket-inspection command and returns its raw stdout.

    Every failure (missing binary, timeout, OS error) is logged and turned
    into empty output, so callers always get a usable, possibly empty, result.
    """

    def __init__(
        self,
        command: tuple[str, ...] = DEFAULT_INSPECT_COMMAND,
        timeout: float = 5.0,
    ) -> None:
        self._command = tuple(command)
        self._timeout = timeout

    @property
    def command(self) -> tuple[str, ...]:
        return self._command

    @property
    def timeout(self) -> float:
        return self._timeout

    def read(self) -> str:
        """Run the command once and return stdout, or "" on failure."""
        try:
            result = subprocess.run(
                self._command,
                capture_output=True,
                text=True,
                timeout=self._timeout,
                check=False,
            )
        except subprocess.TimeoutExpired:
            log.warning("inspect_timeout", command=self._command[0], timeout=self._timeout)
            return ""
        except (OSError, ValueError, UnicodeDecodeError) as exc:
            log.warning("inspect_failed", command=self._command[0], error=str(exc))
            return ""

        # lsof exits 1 when nothing matches; stdout is still authoritative
        if result.returncode not in (0, 1):
            log.warning(
                "inspect_exit_status",
                command=self._command[0],
                returncode=result.returncode,
            )
        return result.stdout or ""

    def snapshot(self) -> list[PortEntity]:
        """Return the current listening sockets as normalized entities."""
        return normalize(self.read())

    def __call__(self) -> list[PortEntity]:
        return self.snapshot()
