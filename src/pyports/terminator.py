"""Terminate the process that owns a port."""

import psutil

from pyports.logging import get_logger
from pyports.models import KillResult

log = get_logger(__name__)

INVALID_PID = "Invalid PID"


def parse_pid(pid: str) -> int | None:
    """
    Parse a pid string as a positive base-10 integer.

    Zero and negative values are rejected: the kill primitive treats them as
    process groups rather than a single process.
    """
    text = pid.strip() if isinstance(pid, str) else ""
    if not (text.isascii() and text.isdigit()):
        return None
    value = int(text, 10)
    return value if value > 0 else None


def terminate(pid: str) -> KillResult:
    """
    Kill a process immediately (SIGKILL on POSIX).

    Returns a KillResult instead of raising; the reason on failure is short
    enough to show inline in the status bar.
    """
    safe_pid = parse_pid(pid)
    if safe_pid is None:
        log.warning("kill_rejected", pid=pid, reason=INVALID_PID)
        return KillResult(success=False, error=INVALID_PID)

    try:
        psutil.Process(safe_pid).kill()
    except psutil.NoSuchProcess:
        log.info("kill_failed", pid=safe_pid, reason="no such process")
        return KillResult(success=False, error=f"No such process ({safe_pid})")
    except psutil.AccessDenied:
        log.info("kill_failed", pid=safe_pid, reason="access denied")
        return KillResult(success=False, error=f"Permission denied ({safe_pid})")
    except (psutil.Error, OSError) as exc:
        log.warning("kill_failed", pid=safe_pid, reason=str(exc))
        return KillResult(success=False, error=str(exc) or exc.__class__.__name__)

    log.info("kill_sent", pid=safe_pid)
    return KillResult(success=True)
