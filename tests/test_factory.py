"""Unit tests for bridge construction."""

import unittest

from scanner_sdk.bridge import (
    SerialScannerBridge,
    TransportKind,
    UdpScannerBridge,
    create_bridge,
)
from scanner_sdk.errors import ScannerError, UnsupportedTransportError


class TestCreateBridge(unittest.TestCase):
    """Tests for create_bridge."""

    def test_by_kind(self):
        self.assertIsInstance(create_bridge(TransportKind.UDP), UdpScannerBridge)
        self.assertIsInstance(create_bridge(TransportKind.SERIAL), SerialScannerBridge)

    def test_by_name(self):
        self.assertIsInstance(create_bridge("udp"), UdpScannerBridge)
        self.assertIsInstance(create_bridge(" Serial "), SerialScannerBridge)

    def test_bridges_start_unconnected(self):
        for kind in TransportKind:
            bridge = create_bridge(kind)
            self.assertFalse(bridge.is_connected)
            bridge.dispose()

    def test_unknown_kind(self):
        with self.assertRaises(UnsupportedTransportError) as ctx:
            create_bridge("bluetooth")

        self.assertEqual(ctx.exception.kind, "bluetooth")
        self.assertIsInstance(ctx.exception, ScannerError)


if __name__ == '__main__':
    unittest.main()
