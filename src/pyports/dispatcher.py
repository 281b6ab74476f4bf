"""Map keystrokes to session actions.

Dispatch is a pure function of (key event, session state). Precedence,
first match wins:

1. Global chords: ctrl+c quits, ctrl+k kills without confirmation.
2. ``?`` toggles help, in navigate mode with no confirmation pending.
3. While help is visible, any other key only closes it.
4. While a kill confirmation is pending, ``y`` confirms, ``n``/escape
   declines, everything else is swallowed.
5. Navigate-mode bindings.
6. Search-mode bindings.
"""

from dataclasses import dataclass
from enum import Enum

from pyports.models import Mode, SessionState

MODIFIERS = frozenset({"ctrl", "alt", "meta", "super", "shift"})


class ActionKind(Enum):
    """Every transition a keystroke can request."""

    NONE = "none"
    QUIT = "quit"
    DIRECT_KILL = "direct_kill"
    TOGGLE_HELP = "toggle_help"
    DISMISS_HELP = "dismiss_help"
    CONFIRM_KILL = "confirm_kill"
    DECLINE_KILL = "decline_kill"
    MOVE_UP = "move_up"
    MOVE_DOWN = "move_down"
    ENTER_SEARCH = "enter_search"
    REQUEST_KILL = "request_kill"
    REFRESH = "refresh"
    CLEAR_FILTER = "clear_filter"
    CANCEL_SEARCH = "cancel_search"
    BACKSPACE = "backspace"
    COMMIT_SEARCH = "commit_search"
    APPEND = "append"


@dataclass(slots=True, frozen=True)
class Action:
    """One resolved action; ``text`` is only used by APPEND."""

    kind: ActionKind
    text: str = ""

    @classmethod
    def none(cls) -> "Action":
        return cls(ActionKind.NONE)

    @classmethod
    def append(cls, text: str) -> "Action":
        return cls(ActionKind.APPEND, text)


@dataclass(slots=True, frozen=True)
class KeyEvent:
    """A keystroke reduced to logical key name, printable character and modifiers."""

    key: str
    character: str | None = None
    ctrl: bool = False
    meta: bool = False

    @classmethod
    def parse(cls, key: str, character: str | None = None) -> "KeyEvent":
        """
        Build a KeyEvent from a Textual key name such as ``ctrl+k`` or ``up``.

        Control characters are dropped from ``character`` so only printable
        text can ever reach the search query.
        """
        parts = key.split("+")
        modifiers = {part for part in parts[:-1] if part in MODIFIERS}
        name = parts[-1] if parts[-1] else key
        if character is not None and not character.isprintable():
            character = None
        return cls(
            key=name,
            character=character or None,
            ctrl="ctrl" in modifiers,
            meta=bool(modifiers & {"alt", "meta", "super"}),
        )

    @property
    def chord(self) -> bool:
        return self.ctrl or self.meta

    def is_char(self, *chars: str) -> bool:
        return not self.chord and self.character in chars


QUIT = Action(ActionKind.QUIT)
DIRECT_KILL = Action(ActionKind.DIRECT_KILL)
TOGGLE_HELP = Action(ActionKind.TOGGLE_HELP)
DISMISS_HELP = Action(ActionKind.DISMISS_HELP)
CONFIRM_KILL = Action(ActionKind.CONFIRM_KILL)
DECLINE_KILL = Action(ActionKind.DECLINE_KILL)
MOVE_UP = Action(ActionKind.MOVE_UP)
MOVE_DOWN = Action(ActionKind.MOVE_DOWN)
ENTER_SEARCH = Action(ActionKind.ENTER_SEARCH)
REQUEST_KILL = Action(ActionKind.REQUEST_KILL)
REFRESH = Action(ActionKind.REFRESH)
CLEAR_FILTER = Action(ActionKind.CLEAR_FILTER)
CANCEL_SEARCH = Action(ActionKind.CANCEL_SEARCH)
BACKSPACE = Action(ActionKind.BACKSPACE)
COMMIT_SEARCH = Action(ActionKind.COMMIT_SEARCH)
NO_ACTION = Action.none()


def _global_chord(event: KeyEvent) -> Action | None:
    if event.ctrl and event.key == "c":
        return QUIT
    if event.ctrl and event.key == "k":
        return DIRECT_KILL
    return None


def _confirm(event: KeyEvent) -> Action:
    if event.is_char("y"):
        return CONFIRM_KILL
    if event.key == "escape" or event.is_char("n"):
        return DECLINE_KILL
    return NO_ACTION


def _navigate(event: KeyEvent, state: SessionState) -> Action:
    if event.key == "up" or event.is_char("k"):
        return MOVE_UP
    if event.key == "down" or event.is_char("j"):
        return MOVE_DOWN
    if event.is_char("/"):
        return ENTER_SEARCH
    if event.key == "enter":
        return REQUEST_KILL if state.has_selection else NO_ACTION
    if event.is_char("r", "R"):
        return REFRESH
    if event.key == "escape":
        return CLEAR_FILTER if state.query else NO_ACTION
    if event.is_char("q"):
        return QUIT
    return NO_ACTION


def _search(event: KeyEvent) -> Action:
    if event.key == "escape":
        return CANCEL_SEARCH
    if event.key in ("backspace", "delete"):
        return BACKSPACE
    if event.key == "up":
        return MOVE_UP
    if event.key == "down":
        return MOVE_DOWN
    if event.key == "enter":
        return COMMIT_SEARCH
    if event.chord:
        return NO_ACTION
    if event.character:
        return Action.append(event.character)
    return NO_ACTION


def dispatch(event: KeyEvent, state: SessionState) -> Action:
    """Resolve one keystroke into exactly one action."""
    chord = _global_chord(event)
    if chord is not None:
        return chord

    if event.is_char("?") and state.mode is Mode.NAVIGATE and not state.confirm_pending:
        return TOGGLE_HELP

    if state.help_visible:
        return DISMISS_HELP

    if state.confirm_pending:
        return _confirm(event)

    if state.mode is Mode.NAVIGATE:
        return _navigate(event, state)

    if state.mode is Mode.SEARCH:
        return _search(event)

    raise AssertionError(f"Unhandled mode: {state.mode!r}")
