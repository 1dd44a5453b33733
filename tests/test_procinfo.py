"""Tests for process metadata reading and the process table."""

import psutil
import pytest
from conftest import FakeSystemView

from pyports.models import ProcessRecord
from pyports.procinfo import build_process_table, read_process


class TestReadProcess:
    """Tests for read_process."""

    def test_reads_all_fields(self):
        """Test a readable process yields its real metadata."""
        view = FakeSystemView()
        view.add_process(42, "nginx\n", ["nginx", "-g", "daemon off;"], cwd="/srv/www")

        assert read_process(view, 42) == ProcessRecord(
            pid=42,
            name="nginx",
            command="nginx -g daemon off;",
            working_dir="/srv/www",
        )

    def test_embedded_nuls_become_spaces(self):
        """Test NUL separators inside arguments are replaced and the result trimmed."""
        view = FakeSystemView()
        view.add_process(7, "python3", ["python3\0-m\0http.server\0", ""])

        assert read_process(view, 7).command == "python3 -m http.server"

    def test_empty_cmdline_falls_back_to_name(self):
        """Test kernel threads show their name as the command."""
        view = FakeSystemView()
        view.add_process(2, "kthreadd", [])

        assert read_process(view, 2).command == "kthreadd"

    def test_vanished_process_degrades_to_unknown(self):
        """Test a process that exited yields sentinels instead of raising."""
        record = read_process(FakeSystemView(), 999)

        assert record == ProcessRecord(
            pid=999, name="unknown", command="unknown", working_dir="unknown"
        )

    def test_access_denied_degrades_to_unknown(self):
        """Test permission errors degrade to sentinels."""
        view = FakeSystemView()
        view.add_process(1, "systemd", ["/sbin/init"])
        view.denied.add(1)

        record = read_process(view, 1)
        assert record.name == "unknown"
        assert record.command == "unknown"
        assert record.working_dir == "unknown"

    def test_fields_degrade_independently(self):
        """Test one unreadable field does not hide the others."""

        class CwdDenied(FakeSystemView):
            def read_cwd(self, pid):
                raise psutil.AccessDenied(pid)

        view = CwdDenied()
        view.add_process(100, "sshd", ["sshd: user@pts/0"])

        record = read_process(view, 100)
        assert record.name == "sshd"
        assert record.command == "sshd: user@pts/0"
        assert record.working_dir == "unknown"

    def test_os_error_degrades(self):
        """Test raw OSError from the view is handled like psutil errors."""

        class Broken(FakeSystemView):
            def read_name(self, pid):
                raise FileNotFoundError(2, "No such file", f"/proc/{pid}/comm")

        view = Broken()
        view.add_process(5, "ignored", ["/usr/bin/app"])

        record = read_process(view, 5)
        assert record.name == "unknown"
        assert record.command == "/usr/bin/app"


class TestBuildProcessTable:
    """Tests for build_process_table."""

    def test_maps_every_pid(self):
        """Test every visible process is in the table."""
        view = FakeSystemView()
        view.add_process(1, "init")
        view.add_process(42, "nginx")

        table = build_process_table(view)
        assert set(table) == {1, 42}
        assert table[42].name == "nginx"

    def test_empty_namespace(self):
        """Test no visible processes yields an empty mapping."""
        assert build_process_table(FakeSystemView()) == {}

    def test_vanished_and_denied_processes_do_not_abort(self):
        """Test processes that exit or deny access mid-scan are tolerated."""
        view = FakeSystemView()
        view.add_process(1, "init")
        view.add_process(2, "secret")
        view.denied.add(2)
        view.extra_pids.append(3)  # listed, then exited

        table = build_process_table(view)
        assert table[1].name == "init"
        assert table[2].name == "unknown"
        assert table[3].working_dir == "unknown"

    def test_non_positive_pids_ignored(self):
        """Test pid 0 and negative identifiers never enter the table."""
        view = FakeSystemView()
        view.add_process(10, "app")
        view.extra_pids.extend([0, -1])

        assert set(build_process_table(view)) == {10}

    def test_unlistable_namespace_raises(self):
        """Test failure to enumerate processes propagates."""
        view = FakeSystemView()
        view.pids_error = PermissionError(13, "Permission denied", "/proc")

        with pytest.raises(OSError):
            build_process_table(view)
