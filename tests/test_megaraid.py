"""Tests for MegaCli output parsing and RAID enumeration."""
import subprocess

import pytest

from hwinv.core.errors import ProcessLaunchFailure
from hwinv.discovery.megaraid import (
    ParserState,
    PDListParser,
    RAIDDiskEnumerator,
    parse_pdlist,
)
from hwinv.discovery.scanner import TextScanner


class TestTextScanner:
    """Line scanning over command output."""

    def test_trims_lines(self):
        assert list(TextScanner(b"  a \n\tb\t\n")) == ["a", "b"]

    def test_text_input(self):
        assert list(TextScanner("one\ntwo")) == ["one", "two"]

    def test_invalid_utf8_replaced(self):
        assert list(TextScanner(b"Slot Number: \xff1\n")) == ["Slot Number: \ufffd1"]

    def test_value_after(self):
        assert TextScanner.value_after("Raw Size: 1 TB", "Raw Size:") == " 1 TB"
        assert TextScanner.value_after("Coerced Size: 1 TB", "Raw Size:") is None


class TestParsePDList:
    """Record reconstruction from -PDList output."""

    def test_two_drives(self, megacli_output):
        disks = parse_pdlist(megacli_output)

        assert len(disks) == 2
        first, second = disks
        assert first.slot == "0"
        assert first.size == "1.090 TB"
        assert first.manufacturer == "Seagate"
        assert first.model == "ST1200MM0088"
        assert first.serial_number == "N004W3D0ABCD"
        assert first.name == ""
        assert second.slot == "1"
        assert second.size == "3.638 TB"

    def test_serial_first_inquiry_data_is_taken_positionally(self, megacli_output):
        """SATA inquiry data starts with the serial; tokens are not reordered."""
        second = parse_pdlist(megacli_output)[1]

        assert second.manufacturer == "Wd-wcc7k1234567wdc"
        assert second.model == "WD40EFRX-68WT0N0"
        assert second.serial_number == "80.00A80"

    def test_raw_size_and_inquiry_lines(self):
        output = (
            "Slot Number: 4\n"
            "Raw Size: 1.090 TB [0x1ba0f3a0 Sectors]\n"
            "Inquiry Data: SEAGATE ST4000 Z1234567\n"
        )
        disk = parse_pdlist(output)[0]
        assert disk.size == "1.090 TB"
        assert (disk.manufacturer, disk.model, disk.serial_number) == ("Seagate", "ST4000", "Z1234567")

    def test_record_count_matches_non_empty_slot_lines(self):
        output = "\n".join([
            "Slot Number: 0", "Raw Size: 1 TB [x]",
            "Slot Number:", "Raw Size: 2 TB [x]",
            "Slot Number: 2", "Inquiry Data: A B C",
            "Slot Number: 3", "PD Type: SAS",
        ])
        assert [disk.slot for disk in parse_pdlist(output)] == ["0", "2", "3"]

    def test_slot_only_record(self):
        disks = parse_pdlist("Slot Number: 7\n")
        assert len(disks) == 1
        assert disks[0].slot == "7"
        assert disks[0].size == ""

    def test_short_inquiry_data_leaves_identity_unset(self):
        disk = parse_pdlist("Slot Number: 1\nInquiry Data: SEAGATE ST4000\n")[0]
        assert disk.manufacturer == disk.model == disk.serial_number == ""

    def test_properties_before_first_slot_are_discarded(self):
        output = "Raw Size: 9 TB [x]\nInquiry Data: A B C\nSlot Number: 1\n"
        disk = parse_pdlist(output)[0]
        assert disk.size == ""
        assert disk.manufacturer == ""

    def test_no_slots(self):
        assert parse_pdlist("Adapter #0\n\nExit Code: 0x00\n") == []
        assert parse_pdlist(b"") == []


class TestPDListParser:
    """State transitions."""

    def test_states(self):
        parser = PDListParser()
        assert parser.state is ParserState.IDLE

        parser.feed("Slot Number: 0")
        assert parser.state is ParserState.RECORD_OPEN
        assert parser.disks == []

        parser.feed("Slot Number: 1")
        assert parser.state is ParserState.RECORD_OPEN
        assert [disk.slot for disk in parser.disks] == ["0"]

        disks = parser.close()
        assert parser.state is ParserState.IDLE
        assert [disk.slot for disk in disks] == ["0", "1"]


class TestRAIDDiskEnumerator:
    """Running MegaCli."""

    def test_runs_pdlist(self, megacli_output):
        calls = []

        def run_cmd(cmd):
            calls.append(cmd)
            return megacli_output.encode()

        enumerator = RAIDDiskEnumerator("/opt/MegaRAID/MegaCli/MegaCli64", run_cmd=run_cmd)
        disks = enumerator.enumerate()

        assert calls == [["/opt/MegaRAID/MegaCli/MegaCli64", "-PDList", "-aALL"]]
        assert len(disks) == 2

    def test_nonzero_exit_raises(self, monkeypatch):
        def fake_run(cmd, **kwargs):
            raise subprocess.CalledProcessError(1, cmd)

        monkeypatch.setattr(subprocess, "run", fake_run)

        with pytest.raises(ProcessLaunchFailure, match="exit status 1"):
            RAIDDiskEnumerator("/opt/MegaRAID/MegaCli/MegaCli64").enumerate()

    def test_missing_binary_raises(self, tmp_path):
        enumerator = RAIDDiskEnumerator(tmp_path / "MegaCli64")

        with pytest.raises(ProcessLaunchFailure):
            enumerator.enumerate()

    def test_timeout_raises(self, monkeypatch):
        def fake_run(cmd, **kwargs):
            assert kwargs["timeout"] == 5
            raise subprocess.TimeoutExpired(cmd, kwargs["timeout"])

        monkeypatch.setattr(subprocess, "run", fake_run)

        with pytest.raises(ProcessLaunchFailure, match="timed out"):
            RAIDDiskEnumerator("/opt/MegaRAID/MegaCli/MegaCli64", timeout=5).enumerate()
