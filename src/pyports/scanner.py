"""Port snapshot engine for pyports."""

import logging

import psutil

from pyports.models import PortRecord, Protocol, ScanConfig
from pyports.procinfo import build_process_table
from pyports.resolver import SocketOwnerIndex, find_owner
from pyports.sockets import admit, parse_socket_table
from pyports.sysview import LiveSystemView, SystemView

logger = logging.getLogger(__name__)


class ScanError(Exception):
    """The system could not be scanned at all."""


class PortScanner:
    """
    Builds a sorted snapshot of open ports and their owning processes.

    Each call to scan() starts from a fresh read of the process namespace and
    the TCP and UDP socket tables. Processes or descriptors that vanish mid
    scan leave the affected ports unresolved instead of failing the scan.
    """

    def __init__(
        self,
        view: SystemView | None = None,
        config: ScanConfig | None = None,
        indexed: bool = True,
    ) -> None:
        """
        Initialize the PortScanner.

        Args:
            view: Source of process and socket data. Default LiveSystemView().
            config: Scan scope. Default ScanConfig() (all addresses, all ports).
            indexed: Resolve owners through a reverse inode index built once
                per scan instead of rescanning descriptors for every socket.
        """
        self._view = view if view is not None else LiveSystemView()
        self._config = config if config is not None else ScanConfig()
        self._indexed = indexed

    @property
    def config(self) -> ScanConfig:
        """Get the scan configuration."""
        return self._config

    @property
    def view(self) -> SystemView:
        """Get the system view."""
        return self._view

    def scan(self) -> list[PortRecord]:
        """
        Collect admitted sockets from every protocol table, sorted by port.

        Raises:
            ScanError: neither socket table is readable, or processes
                cannot be enumerated.
        """
        tables = {protocol: self._view.read_socket_table(protocol) for protocol in Protocol}
        if all(text is None for text in tables.values()):
            raise ScanError("no socket tables available (is /proc mounted?)")

        try:
            process_table = build_process_table(self._view)
        except (psutil.Error, OSError) as exc:
            raise ScanError(f"cannot enumerate processes: {exc}") from exc

        index = SocketOwnerIndex(process_table, self._view) if self._indexed else None

        ports: list[PortRecord] = []
        for protocol, text in tables.items():
            if text is None:
                continue
            for sock in parse_socket_table(protocol, text):
                if not admit(sock, self._config):
                    continue
                if sock.inode == 0:
                    ports.append(PortRecord.from_socket(sock))
                    continue
                if index is not None:
                    pid, process = index.lookup(sock.inode)
                else:
                    pid, process = find_owner(sock.inode, process_table, self._view)
                ports.append(PortRecord.from_socket(sock, pid, process))

        # Stable, so equal ports keep table order (TCP before UDP)
        ports.sort(key=lambda p: p.port)
        if index is not None and index.is_built:
            logger.debug("resolved owners from %d indexed socket inodes", len(index))
        logger.debug("scan found %d ports", len(ports))
        return ports
