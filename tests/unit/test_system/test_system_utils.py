"""
Unit tests for terminal geometry, dependency checks and process termination.
"""

import os
from unittest.mock import MagicMock, patch

import psutil
import pytest

from nfsiotop.system import (
    DEFAULT_GEOMETRY,
    TerminalGeometry,
    check_bpftrace_installed,
    find_bpftrace,
    get_terminal_geometry,
    terminate_process_tree,
)

# Captured before any test patches psutil.Process.
_PROCESS_SPEC = psutil.Process


@pytest.mark.unit
class TestTerminalGeometry:
    """Test cases for get_terminal_geometry."""

    @patch("nfsiotop.system.terminal.shutil.get_terminal_size")
    def test_reports_terminal_size(self, mock_size):
        mock_size.return_value = os.terminal_size((132, 50))

        assert get_terminal_geometry() == TerminalGeometry(columns=132, rows=50)
        mock_size.assert_called_once_with(fallback=(80, 24))

    @patch("nfsiotop.system.terminal.shutil.get_terminal_size")
    def test_non_positive_values_use_defaults(self, mock_size):
        mock_size.return_value = os.terminal_size((0, -1))

        assert get_terminal_geometry() == DEFAULT_GEOMETRY

    @patch("nfsiotop.system.terminal.shutil.get_terminal_size")
    def test_detection_failure_uses_defaults(self, mock_size):
        mock_size.side_effect = OSError("not a terminal")

        assert get_terminal_geometry() == TerminalGeometry(80, 24)

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("COLUMNS", "100")
        monkeypatch.setenv("LINES", "30")

        assert get_terminal_geometry() == TerminalGeometry(100, 30)


@pytest.mark.unit
class TestCommands:
    """Test cases for bpftrace discovery."""

    @patch("nfsiotop.system.commands.shutil.which")
    def test_find_bpftrace(self, mock_which):
        mock_which.return_value = "/usr/bin/bpftrace"

        assert find_bpftrace() == "/usr/bin/bpftrace"
        assert check_bpftrace_installed()
        mock_which.assert_called_with("bpftrace")

    @patch("nfsiotop.system.commands.shutil.which", return_value=None)
    def test_missing_bpftrace(self, mock_which):
        assert find_bpftrace("/opt/missing/bpftrace") is None
        assert not check_bpftrace_installed("/opt/missing/bpftrace")


@pytest.mark.unit
class TestTerminateProcessTree:
    """Test cases for terminate_process_tree with mocked psutil."""

    def _process(self, pid):
        process = MagicMock(spec=_PROCESS_SPEC)
        process.pid = pid
        process.is_running.return_value = True
        process.status.return_value = psutil.STATUS_RUNNING
        process.children.return_value = []
        return process

    def test_invalid_pid(self):
        assert terminate_process_tree(0, "bpftrace") is True

    @patch("nfsiotop.system.processes.psutil.Process")
    def test_already_gone(self, mock_process_cls):
        mock_process_cls.side_effect = psutil.NoSuchProcess(1234)

        assert terminate_process_tree(1234, "bpftrace") is True

    @patch("nfsiotop.system.processes.psutil.wait_procs")
    @patch("nfsiotop.system.processes.psutil.Process")
    def test_graceful_termination(self, mock_process_cls, mock_wait):
        parent = self._process(100)
        child = self._process(101)
        parent.children.return_value = [child]
        mock_process_cls.return_value = parent
        mock_wait.return_value = ([parent, child], [])

        assert terminate_process_tree(100, "bpftrace") is True

        parent.terminate.assert_called_once()
        child.terminate.assert_called_once()
        parent.kill.assert_not_called()

    @patch("nfsiotop.system.processes.psutil.wait_procs")
    @patch("nfsiotop.system.processes.psutil.Process")
    def test_escalates_to_kill(self, mock_process_cls, mock_wait):
        parent = self._process(100)
        mock_process_cls.return_value = parent
        mock_wait.side_effect = [([], [parent]), ([parent], [])]

        assert terminate_process_tree(100, "bpftrace", graceful_timeout=0.1) is True

        parent.terminate.assert_called_once()
        parent.kill.assert_called_once()

    @patch("nfsiotop.system.processes.psutil.wait_procs")
    @patch("nfsiotop.system.processes.psutil.Process")
    def test_reports_survivors(self, mock_process_cls, mock_wait):
        parent = self._process(100)
        mock_process_cls.return_value = parent
        mock_wait.return_value = ([], [parent])

        assert terminate_process_tree(100, "bpftrace") is False
