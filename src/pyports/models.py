"""Data models for pyports."""

from dataclasses import dataclass
from enum import Enum

UNKNOWN = "unknown"
UNRESOLVED = "-"


class Protocol(Enum):
    """Transport protocols with a socket table under /proc/net."""

    TCP = "tcp"
    UDP = "udp"

    @property
    def label(self) -> str:
        """Upper-case display label."""
        return self.value.upper()


@dataclass(slots=True, frozen=True)
class ProcessRecord:
    """Immutable metadata for one process, read once per scan."""

    pid: int
    name: str
    command: str
    working_dir: str  # absolute path or "unknown"


@dataclass(slots=True, frozen=True)
class SocketRecord:
    """One parsed row of a socket table."""

    protocol: Protocol
    address: str  # dotted IPv4
    port: int
    state: str  # 'LISTEN', 'ESTABLISHED', ..., 'OPEN' for UDP
    inode: int  # 0 means no owning socket


@dataclass(slots=True, frozen=True)
class PortRecord:
    """An open port joined with its owning process, ready for display."""

    port: int
    protocol: str
    state: str
    pid: str
    process_name: str
    command: str
    working_dir: str

    @classmethod
    def from_socket(
        cls,
        sock: SocketRecord,
        pid: int | None = None,
        process: ProcessRecord | None = None,
    ) -> "PortRecord":
        """Build a record, substituting "-" for every unresolved process field."""
        if pid is None or process is None:
            return cls(
                port=sock.port,
                protocol=sock.protocol.label,
                state=sock.state,
                pid=UNRESOLVED,
                process_name=UNRESOLVED,
                command=UNRESOLVED,
                working_dir=UNRESOLVED,
            )
        return cls(
            port=sock.port,
            protocol=sock.protocol.label,
            state=sock.state,
            pid=str(pid),
            process_name=process.name,
            command=process.command,
            working_dir=process.working_dir,
        )


@dataclass(slots=True, frozen=True)
class ScanConfig:
    """Scan scope. The only configuration the scanner reads."""

    localhost_only: bool = False
    specific_port: int | None = None

    def __post_init__(self) -> None:
        if self.specific_port is not None and not 0 <= self.specific_port <= 0xFFFF:
            raise ValueError(f"port out of range: {self.specific_port}")
