"""Tests for core.sysctl — settings parsing, path mapping, batch apply."""

import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from hostinit.core.sysctl import (
    ApplyResult,
    SysctlSetting,
    apply_settings,
    parse_settings,
    sysctl_path,
)


@pytest.fixture
def sys_root(tmp_path):
    """A fake /proc/sys with the directories the tests write into."""
    root = tmp_path / "sys"
    (root / "net" / "ipv4").mkdir(parents=True)
    (root / "vm").mkdir()
    return root


# ------------------------------------------------------------------
# parse_settings
# ------------------------------------------------------------------

class TestParseSettings:
    def test_single_pair(self):
        assert parse_settings("vm.swappiness=10") == [SysctlSetting("vm.swappiness", "10")]

    def test_entries_without_equals_are_skipped(self):
        settings = parse_settings("a=1,b,c=3")
        assert [s.key for s in settings] == ["a", "c"]
        assert [s.value for s in settings] == ["1", "3"]

    def test_splits_on_first_equals(self):
        assert parse_settings("kernel.x=a=b") == [SysctlSetting("kernel.x", "a=b")]

    def test_empty_value_kept(self):
        assert parse_settings("kernel.x=") == [SysctlSetting("kernel.x", "")]

    def test_no_trimming(self):
        settings = parse_settings("a=1, b=2")
        assert settings[1].key == " b"

    def test_empty_string(self):
        assert parse_settings("") == []

    def test_duplicates_preserved_in_order(self):
        settings = parse_settings("a=1,a=2")
        assert [s.value for s in settings] == ["1", "2"]


# ------------------------------------------------------------------
# sysctl_path
# ------------------------------------------------------------------

class TestSysctlPath:
    def test_dotted_key(self):
        assert sysctl_path("net.ipv4.ip_forward", Path("/proc/sys")) == Path("/proc/sys/net/ipv4/ip_forward")

    def test_single_segment(self):
        assert sysctl_path("foo", Path("/proc/sys")) == Path("/proc/sys/foo")

    def test_absolute_key_stays_under_root(self):
        assert sysctl_path("/etc/hostname", Path("/proc/sys")) == Path("/proc/sys/etc/hostname")

    def test_absolute_segment_stays_under_root(self, tmp_path):
        root = tmp_path / "sys"
        path = sysctl_path("net.//ipv4", root)
        assert path == root / "net" / "ipv4"
        assert path.is_relative_to(root)


# ------------------------------------------------------------------
# apply_settings
# ------------------------------------------------------------------

class TestApplySettings:
    def test_writes_each_value(self, sys_root):
        result = apply_settings("net.ipv4.ip_forward=1,vm.swappiness=10", sys_root)
        assert (sys_root / "net" / "ipv4" / "ip_forward").read_bytes() == b"1"
        assert (sys_root / "vm" / "swappiness").read_bytes() == b"10"
        assert result.all_succeeded
        assert len(result.succeeded) == 2

    def test_no_trailing_newline(self, sys_root):
        apply_settings("vm.overcommit_memory=1", sys_root)
        assert (sys_root / "vm" / "overcommit_memory").read_text() == "1"

    def test_truncates_existing_value(self, sys_root):
        target = sys_root / "vm" / "swappiness"
        target.write_text("60\n")
        apply_settings("vm.swappiness=1", sys_root)
        assert target.read_text() == "1"

    def test_malformed_entries_do_not_block_others(self, sys_root):
        result = apply_settings("vm.a=1,vm.b,vm.c=3", sys_root)
        assert (sys_root / "vm" / "a").read_text() == "1"
        assert not (sys_root / "vm" / "b").exists()
        assert (sys_root / "vm" / "c").read_text() == "3"
        assert [s.key for s in result.succeeded] == ["vm.a", "vm.c"]

    def test_non_utf8_value_written_as_raw_bytes(self, sys_root):
        result = apply_settings("vm.a=\udcff,vm.b=2", sys_root)
        assert (sys_root / "vm" / "a").read_bytes() == b"\xff"
        assert (sys_root / "vm" / "b").read_text() == "2"
        assert result.all_succeeded

    def test_absolute_key_written_under_root(self, sys_root):
        (sys_root / "etc").mkdir()
        apply_settings("/etc/hostname=x", sys_root)
        assert (sys_root / "etc" / "hostname").read_text() == "x"

    def test_duplicate_key_last_write_wins(self, sys_root):
        apply_settings("vm.swappiness=1,vm.swappiness=2", sys_root)
        assert (sys_root / "vm" / "swappiness").read_text() == "2"

    def test_failure_is_logged_and_batch_continues(self, sys_root, caplog):
        with caplog.at_level(logging.ERROR):
            result = apply_settings("missing.dir.key=1,vm.swappiness=5", sys_root)
        assert (sys_root / "vm" / "swappiness").read_text() == "5"
        assert not result.all_succeeded
        assert result.failed[0][0].key == "missing.dir.key"
        assert "missing.dir.key" in caplog.text

    def test_does_not_raise_on_write_error(self, sys_root):
        with patch("hostinit.core.sysctl.write_file", side_effect=PermissionError("denied")):
            result = apply_settings("vm.a=1,vm.b=2", sys_root)
        assert len(result.failed) == 2
        assert result.failed[0][1] == "denied"

    def test_one_write_per_setting(self, sys_root):
        with patch("hostinit.core.sysctl.write_file") as mock_write:
            apply_settings("a.b=1,c=2", sys_root)
        assert mock_write.call_count == 2
        first = mock_write.call_args_list[0].args
        assert first[0] == sys_root / "a" / "b"
        assert first[1] == b"1"
        assert first[2] == 0o644


class TestApplyResult:
    def test_summary(self):
        result = ApplyResult(
            succeeded=[SysctlSetting("a", "1")],
            failed=[(SysctlSetting("b", "2"), "boom")],
        )
        assert result.summary == "1 applied, 1 failed"
        assert not result.all_succeeded
