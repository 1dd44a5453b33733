"""Mapping socket inodes to the processes that hold them."""

import logging
import re
from collections.abc import Iterator, Mapping

import psutil

from pyports.models import ProcessRecord
from pyports.sysview import SystemView

logger = logging.getLogger(__name__)

SOCKET_LINK_RE = re.compile(r"socket:\[(\d+)\]")


def socket_inode(link: str) -> int | None:
    """Inode of a descriptor link of the form socket:[<digits>], else None."""
    match = SOCKET_LINK_RE.fullmatch(link)
    return int(match.group(1)) if match else None


def _socket_inodes(view: SystemView, pid: int) -> Iterator[int]:
    """Yield socket inodes held by pid, stopping quietly if it goes away."""
    try:
        for link in view.fd_links(pid):
            inode = socket_inode(link)
            if inode is not None:
                yield inode
    except (psutil.Error, OSError) as exc:
        logger.debug("pid %d: descriptors unreadable (%s)", pid, exc)


def find_owner(
    inode: int,
    table: Mapping[int, ProcessRecord],
    view: SystemView,
) -> tuple[int | None, ProcessRecord | None]:
    """
    Find the process holding a socket by scanning descriptor tables.

    The first process with a matching descriptor wins. Returns (None, None)
    when no process in the table holds the inode.
    """
    for pid, process in table.items():
        if inode in _socket_inodes(view, pid):
            return pid, process
    return None, None


class SocketOwnerIndex:
    """
    Reverse index from socket inode to owning process.

    Sweeps every descriptor table once, on the first lookup, then answers
    each lookup without rescanning. Ownership follows the same first-match
    order as find_owner.
    """

    def __init__(self, table: Mapping[int, ProcessRecord], view: SystemView) -> None:
        """
        Initialize the SocketOwnerIndex.

        Args:
            table: Process table the owners are drawn from.
            view: System view used to list descriptors.
        """
        self._table = table
        self._view = view
        self._owners: dict[int, int] | None = None

    @property
    def is_built(self) -> bool:
        """Check if the descriptor sweep has run."""
        return self._owners is not None

    def __len__(self) -> int:
        return len(self._build())

    def _build(self) -> dict[int, int]:
        if self._owners is None:
            owners: dict[int, int] = {}
            for pid in self._table:
                for inode in _socket_inodes(self._view, pid):
                    owners.setdefault(inode, pid)
            logger.debug(
                "indexed %d socket inodes across %d processes", len(owners), len(self._table)
            )
            self._owners = owners
        return self._owners

    def lookup(self, inode: int) -> tuple[int | None, ProcessRecord | None]:
        """Owner of inode as (pid, record), or (None, None) if unowned."""
        pid = self._build().get(inode)
        if pid is None:
            return None, None
        return pid, self._table[pid]
