"""
Unit tests for the tracer event sources.
"""

import io
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from nfsiotop.collectors import BpftraceCollector, StreamCollector, build_bpftrace_program
from nfsiotop.monitoring.parser import EventStreamParser
from nfsiotop.validation import TracerError


def _fake_process(output: str, returncode: int = 0, running: bool = True):
    proc = MagicMock()
    proc.pid = 4242
    proc.stdout = io.StringIO(output)
    proc.wait.return_value = returncode
    proc.poll.return_value = None if running else returncode
    return proc


@pytest.mark.unit
class TestBpftraceProgram:
    """Test cases for the generated probe program."""

    def test_program_contains_maps_and_markers(self):
        program = build_bpftrace_program(3.0)

        assert "@nfs_read[uid, gid] = sum(retval);" in program
        assert "@nfs_write[uid, gid] = sum(retval);" in program
        assert "interval:us:3000000" in program
        assert 'printf("===\\n");' in program
        assert 'printf("---\\n");' in program
        assert 'comm == "nfsd"' in program
        assert "clear(@nfs_read);" in program

    def test_fractional_interval(self):
        program = build_bpftrace_program(0.25)

        assert "interval:us:250000" in program
        assert "every 0.25s" in program

    @pytest.mark.parametrize(
        "interval,expected",
        [(0.0001, "interval:us:100\n"), (0.0015, "interval:us:1500\n"), (0.1, "interval:us:100000\n")],
    )
    def test_probe_period_matches_interval_exactly(self, interval, expected):
        assert expected in build_bpftrace_program(interval)

    def test_long_interval(self):
        assert "interval:us:7200000000\n" in build_bpftrace_program(7200)

    def test_startup_banner_is_an_info_line(self):
        program = build_bpftrace_program(1.0)

        assert 'printf("info|Tracing NFS server' in program


@pytest.mark.unit
class TestStreamCollector:
    """Test cases for StreamCollector."""

    def test_reads_until_end_of_stream(self, test_utils):
        text = "".join(test_utils.window_lines([("nfs_read", 1, 1, 10)]))
        collector = StreamCollector(io.StringIO(text))

        with collector:
            lines = list(collector.read_lines())

        assert lines == ["===\n", "@nfs_read[1, 1]: 10\n", "---\n"]
        assert collector.lines_read == 3

    def test_output_is_parseable(self, test_utils):
        text = "".join(test_utils.window_lines([("nfs_write", 7, 8, 9)]))
        collector = StreamCollector(io.StringIO(text))

        events = list(EventStreamParser().parse(collector.read_lines()))

        assert len(events) == 3

    def test_stream_left_open_by_default(self):
        stream = io.StringIO("")
        collector = StreamCollector(stream)
        collector.start()
        collector.stop()

        assert not stream.closed
        assert list(collector.read_lines()) == []

    def test_close_on_stop(self):
        stream = io.StringIO("")
        collector = StreamCollector(stream, close_on_stop=True)
        collector.stop()

        assert stream.closed


@pytest.mark.unit
class TestBpftraceCollector:
    """Test cases for BpftraceCollector with a mocked subprocess."""

    def test_build_command(self):
        collector = BpftraceCollector(interval_seconds=2.0, bpftrace_path="/usr/bin/bpftrace")

        command = collector.build_command()

        assert command[:4] == ["/usr/bin/bpftrace", "-B", "line", "-e"]
        assert "interval:us:2000000" in command[4]

    @patch("nfsiotop.collectors.bpftrace_collector.subprocess.Popen")
    def test_start_and_read(self, mock_popen):
        mock_popen.return_value = _fake_process("===\n@nfs_read[1, 1]: 5\n---\n")
        collector = BpftraceCollector(interval_seconds=1.0)

        collector.start()
        lines = list(collector.read_lines())

        assert lines == ["===\n", "@nfs_read[1, 1]: 5\n", "---\n"]
        kwargs = mock_popen.call_args.kwargs
        assert kwargs["stdout"] == subprocess.PIPE
        assert kwargs["stderr"] == subprocess.DEVNULL
        assert kwargs["stdin"] == subprocess.DEVNULL
        assert kwargs["text"] is True
        assert kwargs["env"]["LC_ALL"] == "C"

    @patch("nfsiotop.collectors.bpftrace_collector.subprocess.Popen")
    def test_failed_exit_raises_tracer_error(self, mock_popen):
        mock_popen.return_value = _fake_process("", returncode=1)
        collector = BpftraceCollector(interval_seconds=1.0)
        collector.start()

        with pytest.raises(TracerError) as exc_info:
            list(collector.read_lines())
        assert exc_info.value.returncode == 1

    @patch("nfsiotop.collectors.bpftrace_collector.subprocess.Popen")
    def test_exit_status_ignored_while_stopping(self, mock_popen):
        mock_popen.return_value = _fake_process("", returncode=-15)
        collector = BpftraceCollector(interval_seconds=1.0)
        collector.start()
        collector._stopping = True

        assert list(collector.read_lines()) == []

    @patch("nfsiotop.collectors.bpftrace_collector.subprocess.Popen")
    def test_launch_failure(self, mock_popen):
        mock_popen.side_effect = FileNotFoundError("no such file: bpftrace")
        collector = BpftraceCollector(interval_seconds=1.0)

        with pytest.raises(TracerError, match="Failed to start bpftrace"):
            collector.start()

    @patch("nfsiotop.collectors.bpftrace_collector.terminate_process_tree")
    @patch("nfsiotop.collectors.bpftrace_collector.subprocess.Popen")
    def test_stop_terminates_running_tracer(self, mock_popen, mock_terminate):
        proc = _fake_process("", running=True)
        mock_popen.return_value = proc
        collector = BpftraceCollector(interval_seconds=1.0)
        collector.start()

        collector.stop()
        collector.stop()

        mock_terminate.assert_called_once_with(4242, "bpftrace")
        assert proc.stdout.closed
        assert collector.bpftrace_proc is None

    @patch("nfsiotop.collectors.bpftrace_collector.terminate_process_tree")
    @patch("nfsiotop.collectors.bpftrace_collector.subprocess.Popen")
    def test_stop_skips_exited_tracer(self, mock_popen, mock_terminate):
        mock_popen.return_value = _fake_process("", running=False)
        collector = BpftraceCollector(interval_seconds=1.0)
        collector.start()

        collector.stop()

        mock_terminate.assert_not_called()

    @patch("nfsiotop.collectors.bpftrace_collector.terminate_process_tree")
    @patch("nfsiotop.collectors.bpftrace_collector.subprocess.Popen")
    def test_stderr_redirected_to_file(self, mock_popen, mock_terminate, temp_dir):
        mock_popen.return_value = _fake_process("", running=False)
        stderr_path = temp_dir / "bpftrace.err"
        collector = BpftraceCollector(interval_seconds=1.0, tracer_stderr_file=stderr_path)

        collector.start()
        handle = mock_popen.call_args.kwargs["stderr"]
        collector.stop()

        assert str(handle.name) == str(stderr_path)
        assert handle.closed
        assert stderr_path.exists()
