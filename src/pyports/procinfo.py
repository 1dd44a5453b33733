"""Per-process metadata and the process table."""

import logging

import psutil

from pyports.models import UNKNOWN, ProcessRecord
from pyports.sysview import SystemView

logger = logging.getLogger(__name__)

# Processes exit, turn into zombies or deny access between listing and reading
_TRANSIENT_ERRORS = (psutil.Error, OSError)


def read_process(view: SystemView, pid: int) -> ProcessRecord:
    """
    Read name, command line and working directory of a process.

    Never raises for a single process: each field that cannot be read
    degrades to "unknown" on its own.
    """
    try:
        name = view.read_name(pid).strip() or UNKNOWN
    except _TRANSIENT_ERRORS as exc:
        logger.debug("pid %d: name unreadable (%s)", pid, exc)
        name = UNKNOWN

    try:
        argv = view.read_cmdline(pid)
    except _TRANSIENT_ERRORS as exc:
        logger.debug("pid %d: cmdline unreadable (%s)", pid, exc)
        command = UNKNOWN
    else:
        command = " ".join(arg.replace("\0", " ") for arg in argv).strip()
        if not command:
            # Kernel threads have an empty argument vector
            command = name

    try:
        working_dir = view.read_cwd(pid) or UNKNOWN
    except _TRANSIENT_ERRORS as exc:
        logger.debug("pid %d: cwd unreadable (%s)", pid, exc)
        working_dir = UNKNOWN

    return ProcessRecord(pid=pid, name=name, command=command, working_dir=working_dir)


def build_process_table(view: SystemView) -> dict[int, ProcessRecord]:
    """
    Map every visible process identifier to its metadata.

    Raises OSError (or psutil.Error) only when the process namespace itself
    cannot be listed. An empty namespace yields an empty mapping.
    """
    table: dict[int, ProcessRecord] = {}
    for pid in view.pids():
        if pid <= 0:
            continue
        table[pid] = read_process(view, pid)

    logger.debug("process table built with %d entries", len(table))
    return table
