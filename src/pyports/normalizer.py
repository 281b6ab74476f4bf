"""Turn raw lsof output into a canonical list of PortEntity values."""

from pyports.models import PortEntity

# lsof columns: COMMAND PID USER FD TYPE DEVICE SIZE/OFF NODE NAME
MIN_FIELDS = 9
NAME_FIELD = 8

MAX_PORT = 65535

WILDCARD_ADDRESSES = frozenset({"*", "0.0.0.0", "[::]", "::"})
LOOPBACK_ADDRESSES = frozenset({"[::1]", "::1"})


def normalize_address(raw: str) -> str:
    """Map the wildcard and IPv6 loopback spellings to their IPv4 forms."""
    if raw in WILDCARD_ADDRESSES:
        return "0.0.0.0"
    if raw in LOOPBACK_ADDRESSES:
        return "127.0.0.1"
    return raw


def parse_line(line: str) -> PortEntity | None:
    """
    Parse one lsof data row.

    Returns None for anything malformed: too few fields, no colon in the
    NAME field, or a port that is not a base-10 number in range.
    """
    parts = line.split()
    if len(parts) < MIN_FIELDS:
        return None

    process_name, pid, owner = parts[0], parts[1], parts[2]
    addr_port = parts[NAME_FIELD]

    # Last colon: the address half may be IPv6 and contain colons itself
    address, sep, port_text = addr_port.rpartition(":")
    if not sep:
        return None
    if not (port_text.isascii() and port_text.isdigit()):
        return None

    port = int(port_text, 10)
    if not 1 <= port <= MAX_PORT:
        return None

    return PortEntity(
        port=port,
        process_name=process_name,
        pid=pid,
        address=normalize_address(address),
        owner=owner,
    )


def normalize(raw_text: str) -> list[PortEntity]:
    """
    Build a deduplicated, port-sorted entity list from lsof output.

    The first line is the header row and is always discarded. Malformed
    rows are skipped individually; this function never raises.
    """
    if not isinstance(raw_text, str):
        return []

    seen: set[tuple[str, int, str]] = set()
    entities: list[PortEntity] = []

    for line in raw_text.strip().splitlines()[1:]:
        if not line.strip():
            continue
        entity = parse_line(line)
        if entity is None or entity.key in seen:
            continue
        seen.add(entity.key)
        entities.append(entity)

    # sorted() is stable, equal ports keep lsof order
    return sorted(entities, key=lambda e: e.port)
