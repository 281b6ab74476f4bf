"""pyports - Main Textual application."""

from collections.abc import Callable
from functools import partial
from queue import Empty, Queue

import structlog
from rich.table import Table
from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.css.query import NoMatches
from textual.timer import Timer
from textual.widgets import Static

from pyports.config import Config
from pyports.dispatcher import KeyEvent, dispatch
from pyports.inspector import ProcessInspector
from pyports.logging import configure, get_logger
from pyports.models import Feedback, FeedbackKind, Mode, PortEntity
from pyports.monitor import PortMonitor, Snapshotter
from pyports.session import Session, Terminator
from pyports.terminator import terminate
from pyports.viewport import (
    COL_PID,
    COL_PORT,
    COL_PREFIX,
    COL_USER,
    list_capacity,
    process_column_width,
)

log = get_logger(__name__)

SELECTION_ARROW = "▶ "

KEYBINDINGS = [
    ("↑ / k", "Move up"),
    ("↓ / j", "Move down"),
    ("enter", "Kill selected port (with confirm)"),
    ("ctrl+k", "Kill selected port (no confirm)"),
    ("/ + type", "Filter by name, port, or address"),
    ("ESC", "Clear filter / exit search"),
    ("r / R", "Refresh port list"),
    ("?", "Toggle this help"),
    ("q", "Quit"),
    ("ctrl+c", "Quit"),
]


def format_row(entity: PortEntity, process_width: int, selected: bool) -> Text:
    """Render one port row with fixed-width columns."""
    style = "cyan on blue" if selected else ""
    row = Text(SELECTION_ARROW if selected else " " * COL_PREFIX, style=style)
    row.append(str(entity.port).ljust(COL_PORT), style=style)
    row.append(entity.process_name[:process_width].ljust(process_width), style=style)
    row.append(entity.owner[:COL_USER].ljust(COL_USER), style=style or "dim")
    row.append(entity.pid.ljust(COL_PID), style=style)
    row.append(entity.address, style=style or "dim")
    return row


class SearchBar(Static):
    """Shows the current filter and whether search mode is active."""

    DEFAULT_CSS = """
    SearchBar {
        height: 3;
        border: solid $panel;
        padding: 0 1;
    }

    SearchBar.-active {
        border: solid cyan;
    }

    SearchBar.-filtered {
        border: solid yellow;
    }
    """

    def show(self, query: str, active: bool) -> None:
        """Update the bar for the current query and mode."""
        self.set_class(active, "-active")
        self.set_class(bool(query) and not active, "-filtered")

        text = Text("/ ", style="cyan" if active else "grey50")
        if active:
            if query:
                text.append(query)
            else:
                text.append("type to filter...", style="dim")
            text.append("█", style="cyan")
        elif query:
            text.append(query, style="yellow")
        else:
            text.append("to search", style="dim")
        self.update(text)


class PortList(Static):
    """The visible window of the filtered port list."""

    DEFAULT_CSS = """
    PortList {
        height: 1fr;
        border: solid $primary;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize PortList."""
        super().__init__(*args, **kwargs)
        self._rows: list[PortEntity] = []
        self._selected_offset: int | None = None

    @property
    def rows(self) -> list[PortEntity]:
        """Entities currently drawn, top to bottom."""
        return self._rows

    @property
    def selected_offset(self) -> int | None:
        """Position of the highlighted row inside ``rows``."""
        return self._selected_offset

    def show(self, rows: list[PortEntity], selected_offset: int | None, width: int) -> None:
        """Redraw the table from a window of entities."""
        self._rows = rows
        self._selected_offset = selected_offset
        process_width = process_column_width(width)

        table = Table.grid(padding=0)
        table.add_column()

        header = Text(" " * COL_PREFIX, style="bold grey50")
        header.append("PORT".ljust(COL_PORT))
        header.append("PROCESS".ljust(process_width))
        header.append("USER".ljust(COL_USER))
        header.append("PID".ljust(COL_PID))
        header.append("ADDRESS")
        table.add_row(header)

        if not rows:
            table.add_row(Text("  No listening ports found.", style="dim"))
        for offset, entity in enumerate(rows):
            table.add_row(format_row(entity, process_width, offset == selected_offset))
        self.update(table)


class StatusBar(Static):
    """Key hints on the left, confirmation prompt or kill feedback on the right."""

    DEFAULT_CSS = """
    StatusBar {
        height: 1;
        padding: 0 1;
    }
    """

    def show(
        self,
        mode: Mode,
        confirm_pending: bool,
        feedback: Feedback | None,
        selected: PortEntity | None,
    ) -> None:
        """Rebuild the bar; the confirmation prompt takes over the whole line."""
        if confirm_pending and selected is not None:
            self.update(
                Text.assemble(
                    ("Kill ", "red"),
                    (selected.process_name, "bold"),
                    (f":{selected.port}?  ", "red"),
                    ("y ", "green"),
                    ("confirm  ", "dim"),
                    ("n/ESC ", "grey50"),
                    ("cancel", "dim"),
                )
            )
            return

        if mode is Mode.SEARCH:
            hints = Text.assemble(
                ("type to filter  ", "dim"),
                ("↑↓", "cyan"),
                (" navigate  ", "dim"),
                ("enter", "cyan"),
                (" done  ", "dim"),
                ("ESC", "cyan"),
                (" clear", "dim"),
            )
        else:
            hints = Text.assemble(
                ("↑↓/j k", "cyan"),
                (" navigate  ", "dim"),
                ("/", "cyan"),
                (" search  ", "dim"),
                ("enter", "cyan"),
                (" kill  ", "dim"),
                ("r", "cyan"),
                (" refresh  ", "dim"),
                ("?", "cyan"),
                (" help  ", "dim"),
                ("q", "cyan"),
                (" quit", "dim"),
            )

        if feedback is not None:
            color = "green" if feedback.kind is FeedbackKind.SUCCESS else "red"
            right = Text(feedback.text, style=color)
        elif selected is not None:
            right = Text(f"{selected.process_name}:{selected.port}", style="dim")
        else:
            right = Text("")

        table = Table.grid(expand=True)
        table.add_column(justify="left")
        table.add_column(justify="right")
        table.add_row(hints, right)
        self.update(table)


class HelpOverlay(Static):
    """Keybinding reference; any key closes it."""

    DEFAULT_CSS = """
    HelpOverlay {
        display: none;
        height: auto;
        border: round cyan;
        padding: 1 2;
    }
    """

    def on_mount(self) -> None:
        """Fill in the keybinding table once."""
        text = Text("Keybindings\n\n", style="bold cyan")
        for keys, description in KEYBINDINGS:
            text.append(keys.ljust(15), style="bold cyan")
            text.append(f"{description}\n")
        text.append("\nPress any key to close", style="dim")
        self.update(text)


class PortsApp(App, inherit_bindings=False):
    """Main pyports application."""

    TITLE = "pyports"
    SUB_TITLE = "Listening TCP ports"
    ENABLE_COMMAND_PALETTE = False

    CSS = """
    Screen {
        layout: vertical;
    }
    """

    def __init__(
        self,
        config: Config | None = None,
        inspector: Snapshotter | None = None,
        terminator: Terminator = terminate,
    ) -> None:
        """Initialize the PortsApp."""
        super().__init__()
        self._config = config or Config()
        if not structlog.is_configured():
            configure(self._config)
        self._background_stopped = False
        if inspector is None:
            inspector = ProcessInspector(
                self._config.inspect_command,
                timeout=self._config.inspect_timeout,
            )
        self._update_queue: Queue[list[PortEntity]] = Queue()
        self._monitor = PortMonitor(
            self._update_queue,
            inspector,
            poll_rate=self._config.refresh_interval,
        )
        self._session = Session(
            scheduler=self._schedule,
            request_refresh=self._monitor.request_refresh,
            terminator=terminator,
            config=self._config,
        )

    @property
    def session(self) -> Session:
        return self._session

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield SearchBar(id="search-bar")
        yield PortList(id="port-list")
        yield HelpOverlay(id="help")
        yield StatusBar(id="status-bar")

    def on_mount(self) -> None:
        """Start the port monitor when the app is mounted."""
        self._monitor.start()
        # Snapshots are applied on this loop only, one at a time
        self.set_interval(self._config.queue_check_interval, self._check_for_updates)
        self.refresh_view()

    def on_unmount(self) -> None:
        """Stop background work before the app goes away."""
        self._stop_background()

    def on_resize(self, event: events.Resize) -> None:
        """Recompute the visible window for the new terminal size."""
        self.refresh_view()

    def on_key(self, event: events.Key) -> None:
        """Route every keystroke through the dispatcher to the session."""
        event.stop()
        event.prevent_default()

        key_event = KeyEvent.parse(event.key, event.character)
        action = dispatch(key_event, self._session.state())
        self._session.apply(action)

        if self._session.quit_requested:
            self.action_quit()
            return
        self.refresh_view()

    def _schedule(self, delay: float, callback: Callable[[], None]) -> Timer:
        """One-shot timer for the session that redraws after it fires."""
        return self.set_timer(delay, partial(self._run_timer, callback))

    def _run_timer(self, callback: Callable[[], None]) -> None:
        callback()
        self.refresh_view()

    def _check_for_updates(self) -> None:
        """Check the queue for port snapshots and apply the latest one."""
        snapshot = None
        while True:
            try:
                snapshot = self._update_queue.get_nowait()
            except Empty:
                break

        if snapshot is not None:
            self._session.apply_snapshot(snapshot)
            self.refresh_view()

    def refresh_view(self) -> None:
        """Push the current session state to every widget."""
        session = self._session
        window, rows = session.visible(list_capacity(self.size.height))
        selected_offset = session.selected_index - window.start if rows else None

        try:
            search_bar = self.query_one(SearchBar)
        except NoMatches:
            return  # Not composed yet

        search_bar.show(session.query, session.mode is Mode.SEARCH)
        self.query_one(PortList).show(rows, selected_offset, self.size.width)
        self.query_one(HelpOverlay).display = session.help_visible
        self.query_one(StatusBar).show(
            session.mode,
            session.confirm_pending,
            session.feedback,
            session.selected,
        )

    def _stop_background(self) -> None:
        """Cancel session timers and stop the monitor, once."""
        if self._background_stopped:
            return
        self._background_stopped = True
        self._session.shutdown()
        self._monitor.stop(timeout=1.0)

    def action_quit(self) -> None:
        """Handle quit action with graceful cleanup."""
        log.debug("quit_requested", ports=len(self._session.entities))
        self._stop_background()
        self.exit()
