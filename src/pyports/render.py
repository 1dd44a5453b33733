"""Terminal rendering of scan results."""

from collections.abc import Sequence

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from pyports.models import PortRecord

NO_PORTS_MESSAGE = "No open ports found."
COLUMNS = ("PORT", "PROTOCOL", "STATE", "PID", "PROCESS", "COMMAND", "WORKING_DIR")
TRUNCATE_WIDTH = 30
WRAP_WIDTH = 50
RULE_WIDTH = 60


def truncate(text: str, max_len: int = TRUNCATE_WIDTH) -> str:
    """Cut text to max_len characters, marking the cut with '...'."""
    if len(text) <= max_len:
        return text
    return text[: max(max_len - 3, 0)] + "..."


def _row(port: PortRecord, command: str, working_dir: str) -> list[Text]:
    # Text cells so brackets in command lines are not read as markup
    values = (
        str(port.port),
        port.protocol,
        port.state,
        port.pid,
        port.process_name,
        command,
        working_dir,
    )
    return [Text(value) for value in values]


def build_standard_table(ports: Sequence[PortRecord]) -> Table:
    """ASCII table with long command and directory values truncated."""
    table = Table(box=box.ASCII, show_lines=False)
    for name in COLUMNS:
        table.add_column(name, no_wrap=True)
    for port in ports:
        table.add_row(*_row(port, truncate(port.command), truncate(port.working_dir)))
    return table


def build_compact_table(ports: Sequence[PortRecord]) -> Table:
    """Box-drawing table with command and directory wrapped instead of cut."""
    table = Table(box=box.SQUARE)
    for name in COLUMNS[:5]:
        table.add_column(name, no_wrap=True)
    for name in COLUMNS[5:]:
        table.add_column(name, max_width=WRAP_WIDTH, overflow="fold")
    for port in ports:
        table.add_row(*_row(port, port.command, port.working_dir))
    return table


def print_detailed(ports: Sequence[PortRecord], console: Console) -> None:
    """One block per port with full, untruncated values."""
    for i, port in enumerate(ports):
        if i > 0:
            console.print()
        lines = (
            f"Port: {port.port} ({port.protocol})",
            f"State: {port.state}",
            f"PID: {port.pid}",
            f"Process: {port.process_name}",
            f"Command: {port.command}",
            f"Working Dir: {port.working_dir}",
            "-" * RULE_WIDTH,
        )
        for line in lines:
            console.print(line, markup=False, highlight=False, soft_wrap=True)


def render_ports(
    ports: Sequence[PortRecord],
    console: Console | None = None,
    detailed: bool = False,
    compact: bool = False,
) -> None:
    """Print ports in the selected layout. Detailed takes precedence over compact."""
    console = console if console is not None else Console()

    if not ports:
        console.print(NO_PORTS_MESSAGE, markup=False, highlight=False)
        return

    if detailed:
        print_detailed(ports, console)
    elif compact:
        console.print(build_compact_table(ports))
    else:
        console.print(build_standard_table(ports))
