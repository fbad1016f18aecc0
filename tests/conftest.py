"""
Pytest configuration and shared fixtures for the nfsiotop test suite.

This module provides common fixtures, test utilities, and configuration
for all test modules in the project.
"""

import io
import shutil
import sys
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Iterable, List

import pytest

# Add src to Python path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "e2e: mark test as an end-to-end test")


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def passwd_map(temp_dir):
    """passwd-style map file with a short line, a non-numeric id and a long name."""
    path = temp_dir / "passwd"
    path.write_text(
        "root:x:0:0:root:/root:/bin/bash\n"
        "alice:x:1001:1001:Alice:/home/alice:/bin/bash\n"
        "bob:x:1002:1002:Bob:/home/bob:/bin/bash\n"
        "broken-line-without-fields\n"
        "nobody:x:notanumber:65534::/:/usr/sbin/nologin\n"
        "a-very-long-user-name-indeed:x:1003:1003::/home/long:/bin/sh\n"
    )
    return path


@pytest.fixture
def group_map(temp_dir):
    """group-style map file."""
    path = temp_dir / "group"
    path.write_text(
        "root:x:0:\n"
        "staff:x:50:alice,bob\n"
        "research:x:2000:alice\n"
    )
    return path


@pytest.fixture
def sample_monitor_data():
    """Sample [monitor] table for configuration tests."""
    return {
        "interval_seconds": 1.5,
        "view": "group",
        "resolve_names": False,
        "passwd_map": "/srv/maps/passwd",
        "group_map": "/srv/maps/group",
        "source": "stdin",
        "bpftrace_path": "/usr/local/bin/bpftrace",
        "render_thread": True,
        "render_queue_size": 8,
        "log_level": "info",
    }


@pytest.fixture
def config_file(temp_dir, sample_monitor_data):
    """Create a temporary config.toml."""
    import toml

    path = temp_dir / "config.toml"
    with open(path, "w") as f:
        toml.dump({"monitor": sample_monitor_data}, f)
    return path


# ============================================================================
# Test Utilities
# ============================================================================


class ListEventSource:
    """In-memory event source yielding a fixed list of tracer lines."""

    def __init__(self, lines: Iterable[str]):
        self.lines: List[str] = list(lines)
        self.started = False
        self.stopped = False

    def start(self) -> None:
        self.started = True

    def stop(self) -> None:
        self.stopped = True

    def read_lines(self):
        for line in self.lines:
            yield line

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()


class TestUtils:
    """Utility functions for testing."""

    @staticmethod
    def window_lines(entries, reset: bool = True) -> List[str]:
        """
        Build the tracer lines of one window.

        Args:
            entries: Iterable of (map_name, uid, gid, value)
            reset: Prefix the window with a reset marker
        """
        lines = ["===\n"] if reset else []
        lines.extend(f"@{name}[{uid}, {gid}]: {value}\n" for name, uid, gid, value in entries)
        lines.append("---\n")
        return lines

    @staticmethod
    def fixed_clock():
        return datetime(2024, 3, 1, 12, 30, 45)

    @staticmethod
    def make_renderer(group_view: bool = False, interval_seconds: float = 1.0):
        from nfsiotop.monitoring.renderer import Renderer

        stream = io.StringIO()
        renderer = Renderer(
            stream,
            group_view=group_view,
            interval_seconds=interval_seconds,
            clock=TestUtils.fixed_clock,
        )
        return renderer, stream


@pytest.fixture
def test_utils():
    """Provide test utility functions."""
    return TestUtils


@pytest.fixture
def list_source():
    """Factory for in-memory event sources."""
    return ListEventSource


@pytest.fixture(autouse=True)
def clear_config_after_test():
    """Automatically reset the configuration singleton after each test."""
    yield

    from nfsiotop.config import reset_config_path

    reset_config_path()
