"""Session state machine for pyports.

A Session owns everything that changes while the app runs: the entity list,
the interaction mode, the search query, the selection, the confirmation and
help flags, and the transient kill feedback. All mutation happens through
the methods below, on one thread; the selection is re-clamped inside every
transition that can change the filtered list.
"""

from collections.abc import Callable
from typing import Protocol

from pyports.config import Config
from pyports.dispatcher import Action, ActionKind
from pyports.logging import get_logger
from pyports.models import Feedback, KillResult, Mode, PortEntity, SessionState
from pyports.terminator import INVALID_PID, parse_pid, terminate
from pyports.viewport import Window, clamp_index, filter_entities, visible_window

log = get_logger(__name__)


class TimerHandle(Protocol):
    """Anything that can be stopped, e.g. a Textual Timer."""

    def stop(self) -> None: ...


Scheduler = Callable[[float, Callable[[], None]], TimerHandle]
Terminator = Callable[[str], KillResult]


class Session:
    """Single-writer state machine behind the port list UI."""

    def __init__(
        self,
        scheduler: Scheduler,
        request_refresh: Callable[[], None],
        terminator: Terminator = terminate,
        config: Config | None = None,
    ) -> None:
        """
        Initialize the Session.

        Args:
            scheduler: Creates one-shot timers, ``scheduler(delay, callback)``.
            request_refresh: Asks the snapshot source for a fresh entity list.
            terminator: Kills a process by pid and reports the outcome.
            config: Timing settings. Defaults to ``Config()``.
        """
        self._scheduler = scheduler
        self._request_refresh = request_refresh
        self._terminator = terminator
        self._config = config or Config()

        self._entities: list[PortEntity] = []
        self._filtered: list[PortEntity] = []
        self._mode = Mode.NAVIGATE
        self._query = ""
        self._selected_index = 0
        self._confirm_pending = False
        self._help_visible = False
        self._feedback: Feedback | None = None
        self._quit_requested = False

        self._refresh_timer: TimerHandle | None = None
        self._feedback_timer: TimerHandle | None = None

        self._handlers: dict[ActionKind, Callable[[Action], None]] = {
            ActionKind.NONE: lambda action: None,
            ActionKind.QUIT: lambda action: self.quit(),
            ActionKind.DIRECT_KILL: lambda action: self.execute_kill(),
            ActionKind.TOGGLE_HELP: lambda action: self.toggle_help(),
            ActionKind.DISMISS_HELP: lambda action: self.dismiss_help(),
            ActionKind.CONFIRM_KILL: lambda action: self.confirm_kill(),
            ActionKind.DECLINE_KILL: lambda action: self.decline_kill(),
            ActionKind.MOVE_UP: lambda action: self.move_selection(-1),
            ActionKind.MOVE_DOWN: lambda action: self.move_selection(1),
            ActionKind.ENTER_SEARCH: lambda action: self.enter_search(),
            ActionKind.REQUEST_KILL: lambda action: self.request_kill(),
            ActionKind.REFRESH: lambda action: self.refresh(),
            ActionKind.CLEAR_FILTER: lambda action: self.clear_filter(),
            ActionKind.CANCEL_SEARCH: lambda action: self.cancel_search(),
            ActionKind.BACKSPACE: lambda action: self.backspace(),
            ActionKind.COMMIT_SEARCH: lambda action: self.commit_search(),
            ActionKind.APPEND: lambda action: self.append_query(action.text),
        }

    # -- read surface -------------------------------------------------------

    @property
    def entities(self) -> list[PortEntity]:
        return self._entities

    @property
    def filtered(self) -> list[PortEntity]:
        return self._filtered

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def query(self) -> str:
        return self._query

    @property
    def selected_index(self) -> int:
        return self._selected_index

    @property
    def selected(self) -> PortEntity | None:
        """The entity under the cursor, or None when the filtered list is empty."""
        if not self._filtered:
            return None
        return self._filtered[self._selected_index]

    @property
    def confirm_pending(self) -> bool:
        return self._confirm_pending

    @property
    def help_visible(self) -> bool:
        return self._help_visible

    @property
    def feedback(self) -> Feedback | None:
        return self._feedback

    @property
    def quit_requested(self) -> bool:
        return self._quit_requested

    @property
    def refresh_pending(self) -> bool:
        return self._refresh_timer is not None

    def state(self) -> SessionState:
        """Snapshot of the current state for dispatch and rendering."""
        return SessionState(
            mode=self._mode,
            query=self._query,
            selected_index=self._selected_index,
            filtered_count=len(self._filtered),
            confirm_pending=self._confirm_pending,
            help_visible=self._help_visible,
            feedback=self._feedback,
        )

    def visible(self, capacity: int) -> tuple[Window, list[PortEntity]]:
        """Window over the filtered list that fits in ``capacity`` rows."""
        window = visible_window(len(self._filtered), self._selected_index, capacity)
        return window, self._filtered[window.start : window.end]

    # -- derivation ---------------------------------------------------------

    def _rederive(self) -> None:
        """Recompute the filtered view and clamp the selection against it."""
        self._filtered = filter_entities(self._entities, self._query)
        self._selected_index = clamp_index(self._selected_index, len(self._filtered) - 1)
        if not self._filtered:
            # Nothing left to confirm against
            self._confirm_pending = False

    # -- transitions --------------------------------------------------------

    def apply(self, action: Action) -> None:
        """Run the single transition an action maps to."""
        self._handlers[action.kind](action)

    def apply_snapshot(self, entities: list[PortEntity]) -> None:
        """Replace the entity list wholesale with a fresh snapshot."""
        self._entities = list(entities)
        self._rederive()

    def refresh(self) -> None:
        """Ask for a fresh snapshot; it arrives later through apply_snapshot."""
        self._request_refresh()

    def enter_search(self) -> None:
        self._mode = Mode.SEARCH

    def append_query(self, text: str) -> None:
        if self._mode is not Mode.SEARCH or not text:
            return
        self._query += text
        self._rederive()

    def backspace(self) -> None:
        if self._mode is not Mode.SEARCH or not self._query:
            return
        self._query = self._query[:-1]
        self._rederive()

    def commit_search(self) -> None:
        """Leave search mode, keeping the filter applied."""
        self._mode = Mode.NAVIGATE

    def cancel_search(self) -> None:
        """Leave search mode and drop the filter."""
        self._query = ""
        self._mode = Mode.NAVIGATE
        self._rederive()

    def clear_filter(self) -> None:
        if not self._query:
            return
        self._query = ""
        self._rederive()

    def move_selection(self, delta: int) -> None:
        if not self._filtered:
            return
        self._selected_index = clamp_index(self._selected_index + delta, len(self._filtered) - 1)

    def request_kill(self) -> None:
        """Open the kill confirmation prompt for the selected entity."""
        if self.selected is None or self._help_visible:
            return
        self._confirm_pending = True

    def confirm_kill(self) -> None:
        self.execute_kill()
        self._confirm_pending = False

    def decline_kill(self) -> None:
        self._confirm_pending = False

    def execute_kill(self) -> None:
        """
        Kill the selected entity's process.

        Whatever the outcome, feedback is set and a single post-kill refresh is
        (re)scheduled so the next snapshot reflects the process having exited.
        """
        entity = self.selected
        if entity is None:
            return

        if parse_pid(entity.pid) is None:
            log.warning("kill_rejected", pid=entity.pid, process=entity.process_name)
            result = KillResult(success=False, error=INVALID_PID)
        else:
            result = self._terminator(entity.pid)

        if result.success:
            self._set_feedback(Feedback.success(f"Killed {entity.process_name} ({entity.pid})"))
        else:
            self._set_feedback(Feedback.error(f"Failed: {result.error}"))

        self._schedule_refresh()

    def toggle_help(self) -> None:
        if self._mode is not Mode.NAVIGATE or self._confirm_pending:
            return
        self._help_visible = not self._help_visible

    def dismiss_help(self) -> None:
        self._help_visible = False

    def expire_feedback(self) -> None:
        self._feedback_timer = None
        self._feedback = None

    def quit(self) -> None:
        """Flag the session as finished; the owner tears it down with shutdown()."""
        self._quit_requested = True

    def shutdown(self) -> None:
        """Stop every pending one-shot timer so nothing fires after teardown."""
        self._cancel_refresh()
        self._cancel_feedback_timer()
        log.debug("session_shutdown")

    # -- timers -------------------------------------------------------------

    def _set_feedback(self, feedback: Feedback) -> None:
        self._feedback = feedback
        self._cancel_feedback_timer()
        self._feedback_timer = self._scheduler(self._config.feedback_timeout, self.expire_feedback)

    def _schedule_refresh(self) -> None:
        self._cancel_refresh()
        self._refresh_timer = self._scheduler(self._config.kill_refresh_delay, self._post_kill_refresh)

    def _post_kill_refresh(self) -> None:
        self._refresh_timer = None
        self.refresh()

    def _cancel_refresh(self) -> None:
        if self._refresh_timer is not None:
            self._refresh_timer.stop()
            self._refresh_timer = None

    def _cancel_feedback_timer(self) -> None:
        if self._feedback_timer is not None:
            self._feedback_timer.stop()
            self._feedback_timer = None
