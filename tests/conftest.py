"""Shared fixtures: an in-memory stand-in for /proc."""

from collections.abc import Iterator

import psutil
import pytest

from pyports.models import Protocol

TABLE_HEADER = (
    "  sl  local_address rem_address   st tx_queue rx_queue tr tm->when "
    "retrnsmt   uid  timeout inode"
)


def socket_row(
    local: str,
    state: str = "0A",
    inode: int | str = 0,
    remote: str = "00000000:0000",
    sl: int = 0,
) -> str:
    """One /proc/net/{tcp,udp} data row."""
    return (
        f"{sl:4d}: {local} {remote} {state} 00000000:00000000 00:00000000 "
        f"00000000  1000        0 {inode} 1 0000000000000000 100 0 0 10 0"
    )


def socket_table(*rows: str) -> str:
    return "\n".join([TABLE_HEADER, *rows]) + "\n"


class FakeSystemView:
    """
    SystemView backed by dictionaries.

    Missing processes raise psutil.NoSuchProcess; entries listed in
    `denied` raise psutil.AccessDenied for metadata and PermissionError for
    descriptors.
    """

    def __init__(self) -> None:
        self.processes: dict[int, dict] = {}
        self.tables: dict[Protocol, str | None] = {Protocol.TCP: None, Protocol.UDP: None}
        self.denied: set[int] = set()
        self.extra_pids: list[int] = []
        self.fd_calls: list[int] = []
        self.pids_error: Exception | None = None

    def add_process(
        self,
        pid: int,
        name: str,
        cmdline: list[str] | None = None,
        cwd: str = "/",
        fds: list[str] | None = None,
    ) -> None:
        self.processes[pid] = {
            "name": name,
            "cmdline": cmdline if cmdline is not None else [name],
            "cwd": cwd,
            "fds": fds or [],
        }

    def _lookup(self, pid: int) -> dict:
        if pid in self.denied:
            raise psutil.AccessDenied(pid)
        try:
            return self.processes[pid]
        except KeyError:
            raise psutil.NoSuchProcess(pid) from None

    def pids(self) -> list[int]:
        if self.pids_error is not None:
            raise self.pids_error
        return list(self.processes) + self.extra_pids

    def read_name(self, pid: int) -> str:
        return self._lookup(pid)["name"]

    def read_cmdline(self, pid: int) -> list[str]:
        return self._lookup(pid)["cmdline"]

    def read_cwd(self, pid: int) -> str:
        return self._lookup(pid)["cwd"]

    def fd_links(self, pid: int) -> Iterator[str]:
        self.fd_calls.append(pid)
        if pid in self.denied:
            raise PermissionError(13, "Permission denied", f"/proc/{pid}/fd")
        if pid not in self.processes:
            raise FileNotFoundError(2, "No such file or directory", f"/proc/{pid}/fd")
        yield from self.processes[pid]["fds"]

    def read_socket_table(self, protocol: Protocol) -> str | None:
        return self.tables.get(protocol)


@pytest.fixture
def view() -> FakeSystemView:
    """Fake system with empty (but present) socket tables and no processes."""
    fake = FakeSystemView()
    fake.tables[Protocol.TCP] = socket_table()
    fake.tables[Protocol.UDP] = socket_table()
    return fake
