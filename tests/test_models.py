"""Unit tests for data models.

Tests verify:
- ScannerStatus display defaults
- Snapshot independence
- Screen kind mapping
- Sentinel detection
- Command immutability
"""
import unittest
from dataclasses import FrozenInstanceError

from scanner_sdk.models import (
    DISCONNECTED,
    TIMEOUT,
    KeyMode,
    KeyPress,
    ListQuery,
    ScannerStatus,
    ScreenKind,
    is_sentinel,
)


class TestScannerStatus(unittest.TestCase):
    """Tests for the mutable status record."""

    def test_defaults(self):
        """A fresh status has a display value for every field."""
        status = ScannerStatus()
        self.assertEqual(status.system_name, "SCANNING")
        self.assertEqual(status.department_name, "...")
        self.assertEqual(status.channel_name, "...")
        self.assertEqual(status.talkgroup_id, "---")
        self.assertEqual(status.rssi_label, "S0")
        self.assertEqual(status.rssi_numeric, 0)
        self.assertEqual(status.mute, "Unmute")
        self.assertEqual(status.hold, "Off")
        self.assertEqual(status.p25_status, "---")
        self.assertEqual(status.last_command_sent, "None")
        self.assertEqual(status.frequency_display, "0.0000")

    def test_snapshot_is_independent(self):
        status = ScannerStatus(system_name="FDNY")
        snap = status.snapshot()

        status.system_name = "Other"

        self.assertEqual(snap.system_name, "FDNY")
        self.assertIsNot(snap, status)

    def test_copy_from(self):
        status = ScannerStatus()
        other = ScannerStatus(system_name="FDNY", frequency_mhz=154.28, volume=9)

        status.copy_from(other)

        self.assertEqual(status, other)

    def test_frequency_display(self):
        self.assertEqual(ScannerStatus(frequency_mhz=6000.0).frequency_display, "6000.0000")
        self.assertEqual(ScannerStatus(frequency_mhz=154.28).frequency_display, "154.2800")


class TestScreenKind(unittest.TestCase):
    """Tests for V_Screen mapping."""

    def test_known_values(self):
        self.assertIs(ScreenKind.from_value("trunk_scan"), ScreenKind.TRUNK_SCAN)
        self.assertIs(ScreenKind.from_value("wx_alert"), ScreenKind.WX_ALERT)

    def test_unknown_value(self):
        self.assertIs(ScreenKind.from_value("menu_tree"), ScreenKind.UNKNOWN)
        self.assertIs(ScreenKind.from_value("---"), ScreenKind.UNKNOWN)


class TestSentinels(unittest.TestCase):

    def test_is_sentinel(self):
        self.assertTrue(is_sentinel(TIMEOUT))
        self.assertTrue(is_sentinel(DISCONNECTED))
        self.assertFalse(is_sentinel("MDL,SDS200"))
        self.assertFalse(is_sentinel(""))


class TestCommands(unittest.TestCase):
    """Tests for immutable command objects."""

    def test_key_press_defaults(self):
        cmd = KeyPress("M")
        self.assertEqual(cmd.mode, KeyMode.PRESS)

    def test_immutable(self):
        cmd = ListQuery()
        with self.assertRaises(FrozenInstanceError):
            cmd.list_type = "SYS"


if __name__ == '__main__':
    unittest.main()
