"""Filtering, selection clamping and windowing over the entity list."""

from dataclasses import dataclass

from pyports.models import PortEntity

# Fixed column widths shared by the port list header and rows
COL_PREFIX = 2
COL_PORT = 8
COL_PID = 8
COL_USER = 14
ADDRESS_RESERVE = 20

# Search bar (3) + column header (1) + status bar (1) + list border (2)
CHROME_ROWS = 7


@dataclass(slots=True, frozen=True)
class Window:
    """Half-open slice [start, end) of the filtered list that is on screen."""

    start: int
    end: int

    def __len__(self) -> int:
        return self.end - self.start

    def __contains__(self, index: object) -> bool:
        return isinstance(index, int) and self.start <= index < self.end


def filter_entities(entities: list[PortEntity], query: str) -> list[PortEntity]:
    """Return entities whose name, port or address contains the query."""
    if not query:
        return entities

    needle = query.lower()
    return [
        entity
        for entity in entities
        if needle in entity.process_name.lower()
        or needle in str(entity.port)
        or needle in entity.address.lower()
    ]


def clamp_index(index: int, max_index: int) -> int:
    """
    Clamp index into [0, max(0, max_index)].

    An empty list has max_index == -1 and always yields 0.
    """
    if max_index < 0 or index < 0:
        return 0
    if index > max_index:
        return max_index
    return index


def visible_window(length: int, selected: int, capacity: int) -> Window:
    """
    Compute which rows fit on screen, centred on the selection.

    The window always contains ``selected`` when the list is non-empty.
    """
    capacity = max(1, capacity)
    if length <= capacity:
        return Window(0, length)

    half = capacity // 2
    start = max(0, selected - half)
    end = start + capacity
    if end > length:
        end = length
        start = max(0, end - capacity)
    return Window(start, end)


def list_capacity(height: int) -> int:
    """Rows available for port entries in a terminal of the given height."""
    return max(1, height - CHROME_ROWS)


def process_column_width(width: int) -> int:
    """Width of the PROCESS column; grows with the terminal between 16 and 40."""
    remaining = width - COL_PREFIX - COL_PORT - COL_USER - COL_PID - ADDRESS_RESERVE
    return min(40, max(16, remaining))
