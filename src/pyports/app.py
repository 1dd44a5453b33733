"""pyports - Textual viewer for a port snapshot."""

from enum import Enum
from queue import Empty, Queue

from rich.text import Text
from textual.app import App, ComposeResult
from textual.containers import Container
from textual.timer import Timer
from textual.widgets import DataTable, Footer, Static

from pyports.filters import exclude_ports, filter_ports
from pyports.models import UNRESOLVED, PortRecord
from pyports.scanner import PortScanner
from pyports.worker import ScanResult, ScanWorker


class SortKey(Enum):
    """Sort keys for the port table."""

    PORT = "port"
    PID = "pid"
    PROCESS = "process"
    PROTOCOL = "protocol"


def _pid_sort_value(port: PortRecord) -> int:
    # Unresolved owners sort after every real pid
    return int(port.pid) if port.pid != UNRESOLVED else 1 << 31


class SummaryBar(Static):
    """Header line with the scan outcome."""

    DEFAULT_CSS = """
    SummaryBar {
        height: auto;
        padding: 0 1;
        background: $surface;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize SummaryBar."""
        super().__init__(*args, **kwargs)
        self.summary: str = ""

    def _show(self, summary: str, style: str = "") -> None:
        self.summary = summary
        self.update(Text(summary, style=style))

    def show_scanning(self) -> None:
        self._show("Scanning...")

    def show_result(self, result: ScanResult, shown: list[PortRecord]) -> None:
        """Summarize the ports currently displayed."""
        if not result.ok:
            self._show(f"Scan failed: {result.error}", style="red")
            return
        if not shown:
            self._show("No open ports found.")
            return
        tcp = sum(1 for p in shown if p.protocol == "TCP")
        udp = len(shown) - tcp
        self._show(f"{len(shown)} ports ({tcp} TCP, {udp} UDP)")


class PortTable(Container):
    """Container for the port data table."""

    DEFAULT_CSS = """
    PortTable {
        height: 1fr;
        border: solid $primary;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize PortTable."""
        super().__init__(*args, **kwargs)
        self._ports: list[PortRecord] = []
        self._sort_key: SortKey = SortKey.PORT

    @property
    def sort_key(self) -> SortKey:
        """Get current sort key."""
        return self._sort_key

    @property
    def ports(self) -> list[PortRecord]:
        """Get the displayed ports in display order."""
        return self._sort_ports(self._ports)

    def cycle_sort(self) -> SortKey:
        """Cycle to the next sort key, redraw, and return it."""
        keys = list(SortKey)
        current_index = keys.index(self._sort_key)
        self._sort_key = keys[(current_index + 1) % len(keys)]
        self._redraw()
        return self._sort_key

    def compose(self) -> ComposeResult:
        """Compose the port table."""
        yield DataTable(id="port-table")

    def on_mount(self) -> None:
        """Initialize the data table when mounted."""
        table = self.query_one("#port-table", DataTable)
        table.cursor_type = "row"

        table.add_column("PORT", key="port", width=7)
        table.add_column("PROTO", key="protocol", width=6)
        table.add_column("STATE", key="state", width=12)
        table.add_column("PID", key="pid", width=8)
        table.add_column("PROCESS", key="process", width=16)
        table.add_column("COMMAND", key="command")
        table.add_column("WORKING_DIR", key="cwd")

    def update_ports(self, ports: list[PortRecord]) -> None:
        """Replace the table contents with a new snapshot."""
        self._ports = list(ports)
        self._redraw()

    def _sort_ports(self, ports: list[PortRecord]) -> list[PortRecord]:
        """Sort ports based on the current sort key; ties keep port order."""
        key_func = {
            SortKey.PORT: lambda p: p.port,
            SortKey.PID: _pid_sort_value,
            SortKey.PROCESS: lambda p: p.process_name.lower(),
            SortKey.PROTOCOL: lambda p: p.protocol,
        }
        return sorted(ports, key=key_func[self._sort_key])

    def _redraw(self) -> None:
        table = self.query_one("#port-table", DataTable)
        table.clear()
        for i, port in enumerate(self._sort_ports(self._ports)):
            # Text cells: process names and command lines may contain brackets
            table.add_row(
                Text(str(port.port)),
                Text(port.protocol),
                Text(port.state),
                Text(port.pid),
                Text(port.process_name),
                Text(port.command),
                Text(port.working_dir),
                key=f"{i}:{port.protocol}:{port.port}",
            )


class PortsApp(App):
    """Main pyports application."""

    TITLE = "pyports"
    SUB_TITLE = "Open ports and their processes"

    CSS = """
    Screen {
        layout: vertical;
    }

    #summary {
        dock: top;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("f6", "sort", "Sort"),
    ]

    def __init__(
        self,
        scanner: PortScanner | None = None,
        include: str | None = None,
        exclude: str | None = None,
    ) -> None:
        """
        Initialize the PortsApp.

        Args:
            scanner: Scanner producing the snapshot. Default PortScanner().
            include: Keep only ports whose process matches this text.
            exclude: Drop ports whose process matches this text.
        """
        super().__init__()
        self._include = include
        self._exclude = exclude
        self._result_queue: Queue[ScanResult] = Queue()
        self._worker = ScanWorker(scanner or PortScanner(), self._result_queue)
        self._poll_timer: Timer | None = None
        self.result: ScanResult | None = None

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield SummaryBar(id="summary")
        yield PortTable()
        yield Footer()

    def on_mount(self) -> None:
        """Start the one-shot scan when the app is mounted."""
        self.query_one("#summary", SummaryBar).show_scanning()
        self._worker.start()
        self._poll_timer = self.set_interval(0.1, self._check_for_result)

    def _check_for_result(self) -> None:
        """Pick up the scan result once the worker delivers it."""
        try:
            result = self._result_queue.get_nowait()
        except Empty:
            return

        if self._poll_timer is not None:
            self._poll_timer.stop()
            self._poll_timer = None
        self._show_result(result)

    def _show_result(self, result: ScanResult) -> None:
        """Update the UI with a finished scan."""
        self.result = result
        ports = result.ports
        if self._include:
            ports = filter_ports(ports, self._include)
        if self._exclude:
            ports = exclude_ports(ports, self._exclude)

        self.query_one(PortTable).update_ports(ports)
        self.query_one("#summary", SummaryBar).show_result(result, ports)
        if not result.ok:
            self.notify(result.error or "Scan failed", severity="error")

    def action_sort(self) -> None:
        """Handle sort action - cycle through sort keys."""
        port_table = self.query_one(PortTable)
        new_sort_key = port_table.cycle_sort()
        self.notify(f"Sort: {new_sort_key.value.upper()}")

    def action_quit(self) -> None:
        """Handle quit action, letting an in-flight scan finish briefly."""
        self._worker.join(timeout=1.0)
        self.exit()
