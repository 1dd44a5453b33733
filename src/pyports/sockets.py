"""Parsing of the kernel's per-protocol socket tables (/proc/net/tcp, /proc/net/udp)."""

import logging
import re
from collections.abc import Iterator

from pyports.models import Protocol, ScanConfig, SocketRecord

logger = logging.getLogger(__name__)

LISTEN = "LISTEN"
UDP_STATE = "OPEN"
UNKNOWN_STATE = "UNKNOWN"

TCP_STATES = {
    "01": "ESTABLISHED",
    "02": "SYN_SENT",
    "03": "SYN_RECV",
    "04": "FIN_WAIT1",
    "05": "FIN_WAIT2",
    "06": "TIME_WAIT",
    "07": "CLOSE",
    "08": "CLOSE_WAIT",
    "09": "LAST_ACK",
    "0A": LISTEN,
    "0B": "CLOSING",
}

LOCAL_ADDRESSES = frozenset({"127.0.0.1", "0.0.0.0"})

# sl, local_address, rem_address, st, tx:rx queue, tr:when, retrnsmt, uid, timeout, inode
MIN_FIELDS = 10
LOCAL_ADDRESS_FIELD = 1
STATE_FIELD = 3
INODE_FIELD = 9

_HEX_RE = re.compile(r"[0-9A-Fa-f]+")
_DEC_RE = re.compile(r"[0-9]+")


def _parse_hex(value: str, limit: int) -> int:
    """Parse a hex field, returning 0 when it is malformed or exceeds limit."""
    if not _HEX_RE.fullmatch(value):
        return 0
    number = int(value, 16)
    return number if number <= limit else 0


def decode_port(hex_port: str) -> int:
    """Port number from its hex encoding, 0 if unparsable."""
    return _parse_hex(hex_port, 0xFFFF)


def decode_address(hex_addr: str) -> str:
    """
    Dotted IPv4 address from the table's little-endian hex encoding.

    The lowest byte is the first octet, so "0100007F" is 127.0.0.1.
    Unparsable input decodes as 0.0.0.0.
    """
    addr = _parse_hex(hex_addr, 0xFFFFFFFF)
    return ".".join(str((addr >> shift) & 0xFF) for shift in (0, 8, 16, 24))


def decode_state(protocol: Protocol, code: str) -> str:
    """Human state label. UDP has no connection state and is always OPEN."""
    if protocol is Protocol.UDP:
        return UDP_STATE
    return TCP_STATES.get(code.upper(), UNKNOWN_STATE)


def _parse_inode(fields: list[str]) -> int:
    try:
        value = fields[INODE_FIELD]
    except IndexError:
        return 0
    return int(value) if _DEC_RE.fullmatch(value) else 0


def parse_row(protocol: Protocol, line: str) -> SocketRecord | None:
    """
    Parse one data row of a socket table.

    Returns None for truncated rows and rows whose local address is not
    of the form HEXADDR:HEXPORT. Bad hex values parse as 0 instead.
    """
    fields = line.split()
    if len(fields) < MIN_FIELDS:
        return None

    parts = fields[LOCAL_ADDRESS_FIELD].split(":")
    if len(parts) != 2:
        return None
    hex_addr, hex_port = parts

    return SocketRecord(
        protocol=protocol,
        address=decode_address(hex_addr),
        port=decode_port(hex_port),
        state=decode_state(protocol, fields[STATE_FIELD]),
        inode=_parse_inode(fields),
    )


def parse_socket_table(protocol: Protocol, text: str) -> Iterator[SocketRecord]:
    """Yield a record for every well-formed row after the header."""
    lines = text.splitlines()
    for lineno, line in enumerate(lines[1:], start=2):
        record = parse_row(protocol, line)
        if record is None:
            if line.strip():
                logger.debug("%s table line %d dropped: %r", protocol.value, lineno, line)
            continue
        yield record


def admit(record: SocketRecord, config: ScanConfig) -> bool:
    """
    Decide whether a parsed socket belongs in the output.

    By default, TCP output is restricted to listening sockets; UDP has no
    such restriction since UDP has no listen state. A specific-port lookup
    lifts the listening restriction so any state on that port is shown.
    """
    if config.localhost_only and record.address not in LOCAL_ADDRESSES:
        return False
    if config.specific_port is not None and record.port != config.specific_port:
        return False
    if (
        record.protocol is Protocol.TCP
        and config.specific_port is None
        and record.state != LISTEN
    ):
        return False
    return True
