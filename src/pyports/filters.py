"""Text filters over scan results."""

from collections.abc import Iterable

from pyports.models import PortRecord


def _matches(port: PortRecord, needle: str) -> bool:
    return (
        needle in port.process_name.lower()
        or needle in port.command.lower()
        or needle in port.working_dir.lower()
    )


def filter_ports(ports: Iterable[PortRecord], text: str) -> list[PortRecord]:
    """Keep ports whose process name, command or working dir contains text."""
    needle = text.lower()
    return [p for p in ports if _matches(p, needle)]


def exclude_ports(ports: Iterable[PortRecord], text: str) -> list[PortRecord]:
    """Drop ports whose process name, command or working dir contains text."""
    needle = text.lower()
    return [p for p in ports if not _matches(p, needle)]
