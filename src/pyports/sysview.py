"""Access to the kernel's process and socket tables."""

import logging
import os
import typing
from collections.abc import Iterable, Iterator
from pathlib import Path

import psutil

from pyports.models import Protocol

logger = logging.getLogger(__name__)


class SystemView(typing.Protocol):
    """
    Read-only view of the process namespace and the socket tables.

    Process reads raise psutil.Error or OSError when the process is gone or
    inaccessible; callers decide how to degrade.
    """

    def pids(self) -> Iterable[int]:
        """Identifiers of all currently visible processes."""
        ...

    def read_name(self, pid: int) -> str:
        """Short executable name."""
        ...

    def read_cmdline(self, pid: int) -> list[str]:
        """Argument vector."""
        ...

    def read_cwd(self, pid: int) -> str:
        """Target of the current-directory link."""
        ...

    def fd_links(self, pid: int) -> Iterator[str]:
        """
        Link targets of the process's open descriptors.

        Unreadable links are skipped. A descriptor directory that cannot be
        listed raises OSError.
        """
        ...

    def read_socket_table(self, protocol: Protocol) -> str | None:
        """Raw text of a socket table, or None if it is unavailable."""
        ...


class LiveSystemView:
    """
    SystemView over the running kernel.

    The short process name, socket tables and descriptor links are read from
    proc_root directly: psutil widens long names from the command line and
    exposes neither the raw tables nor socket inodes. Process enumeration,
    command lines and working directories come from psutil.
    """

    def __init__(self, proc_root: str | os.PathLike[str] = "/proc") -> None:
        """
        Initialize the LiveSystemView.

        Args:
            proc_root: Mount point of procfs. Default "/proc". Only the
                name, socket table and descriptor reads honour it; psutil
                always enumerates processes and reads command lines and
                working directories from the system's own /proc.
        """
        self._root = Path(proc_root)

    def pids(self) -> list[int]:
        return psutil.pids()

    def read_name(self, pid: int) -> str:
        # comm holds the kernel's name, truncated to 15 characters
        return (self._root / str(pid) / "comm").read_text().rstrip("\n")

    def read_cmdline(self, pid: int) -> list[str]:
        return psutil.Process(pid).cmdline()

    def read_cwd(self, pid: int) -> str:
        return psutil.Process(pid).cwd()

    def fd_links(self, pid: int) -> Iterator[str]:
        fd_dir = self._root / str(pid) / "fd"
        with os.scandir(fd_dir) as entries:
            for entry in entries:
                try:
                    yield os.readlink(entry.path)
                except OSError:
                    # Descriptor closed between listing and readlink
                    continue

    def read_socket_table(self, protocol: Protocol) -> str | None:
        path = self._root / "net" / protocol.value
        try:
            return path.read_text()
        except FileNotFoundError:
            logger.debug("socket table %s not present", path)
            return None
        except OSError as exc:
            logger.warning("cannot read socket table %s: %s", path, exc)
            return None
