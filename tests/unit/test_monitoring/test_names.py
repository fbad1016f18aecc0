"""
Unit tests for uid/gid name resolution.
"""

from unittest.mock import patch

import pytest

from nfsiotop.monitoring.names import NameResolver, load_name_table


@pytest.mark.unit
class TestLoadNameTable:
    """Test cases for map file loading."""

    def test_loads_name_and_id_fields(self, passwd_map):
        table = load_name_table(passwd_map)

        assert table[0] == "root"
        assert table[1001] == "alice"
        assert table[1002] == "bob"

    def test_skips_short_and_non_numeric_lines(self, passwd_map):
        table = load_name_table(passwd_map)

        assert "broken-line-without-fields" not in table.values()
        assert "nobody" not in table.values()

    def test_last_duplicate_wins(self, temp_dir):
        path = temp_dir / "passwd"
        path.write_text("first:x:500:\nsecond:x:500:\n")

        assert load_name_table(path) == {500: "second"}

    def test_missing_file_is_not_fatal(self, temp_dir, caplog):
        table = load_name_table(temp_dir / "does-not-exist")

        assert table == {}
        assert "ids will be shown numerically" in caplog.text


@pytest.mark.unit
class TestNameResolver:
    """Test cases for NameResolver."""

    def test_resolves_known_and_unknown_uids(self, passwd_map, group_map):
        resolver = NameResolver(enabled=True)
        resolver.load(passwd_map, group_map)

        assert resolver.resolve(1001) == "alice"
        assert resolver.resolve(9999) == "9999"

    def test_group_view_uses_group_table(self, passwd_map, group_map):
        resolver = NameResolver()
        resolver.load(passwd_map, group_map)

        assert resolver.resolve(50, is_group_view=True) == "staff"
        assert resolver.resolve(1001, is_group_view=True) == "1001"

    def test_disabled_returns_numeric_ids(self, passwd_map, group_map):
        resolver = NameResolver(enabled=False)
        resolver.load(passwd_map, group_map)

        assert resolver.resolve(1001) == "1001"
        assert resolver.resolve(50, is_group_view=True) == "50"

    def test_disabled_never_opens_map_files(self, passwd_map, group_map):
        resolver = NameResolver(enabled=False)

        with patch("nfsiotop.monitoring.names.open", create=True) as mock_open:
            resolver.load(passwd_map, group_map)

        mock_open.assert_not_called()
        assert resolver.users == {}
        assert resolver.groups == {}

    def test_missing_files_degrade_to_numeric(self, temp_dir):
        resolver = NameResolver()
        resolver.load(temp_dir / "nope-passwd", temp_dir / "nope-group")

        assert resolver.resolve(1001) == "1001"
        assert resolver.resolve(50, is_group_view=True) == "50"
