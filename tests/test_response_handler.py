"""Unit tests for ResponseHandler."""

import unittest
from datetime import datetime
from unittest.mock import MagicMock, patch

from scanner_sdk.models import ScannerStatus
from scanner_sdk.monitor.response_handler import ResponseHandler


GSI_DOCUMENT = (
    'GSI,<XML>,<?xml version="1.0" encoding="utf-8"?>\n'
    '<ScannerInfo Mode="Scan" V_Screen="conventional_scan">\n'
    '<System Name="FDNY" />\n'
    '<ConvFrequency Name="Dispatch" Freq="154.2800MHz" Mod="FM" />\n'
    '<Property Rssi="3" VOL="15" SQL="10" />\n'
    '</ScannerInfo>'
)


def fixed_clock():
    return datetime(2024, 1, 1, 12, 34, 56)


class TestResponseHandler(unittest.TestCase):
    """Tests for traffic logging and document assembly."""

    def setUp(self):
        self.status = ScannerStatus()
        self.handler = ResponseHandler(self.status, clock=fixed_clock)

    def test_sent_data_logged(self):
        self.handler.on_data_sent("GSI,0")
        self.assertEqual(self.handler.raw_log, ["[12:34:56] >> GSI,0"])

    def test_received_data_logged_before_processing(self):
        self.handler.on_data_received("MDL,SDS200")

        self.assertEqual(self.handler.raw_log, ["[12:34:56] << MDL,SDS200"])
        self.assertEqual(self.handler.debug_log, [])

    def test_complete_document_decoded(self):
        self.handler.on_data_received(GSI_DOCUMENT)

        results = self.handler.process_pending()

        self.assertEqual(len(results), 1)
        self.assertTrue(results[0].ok)
        self.assertEqual(self.status.system_name, "FDNY")
        self.assertEqual(self.handler.debug_log, ["[12:34:56] GSI parsed"])
        self.assertEqual(self.handler.buffer_contents, "")

    def test_document_split_across_messages(self):
        lines = GSI_DOCUMENT.split("\n")
        for line in lines[:-1]:
            self.handler.on_data_received(line)
        self.assertEqual(self.handler.process_pending(), [])
        self.assertEqual(self.status.system_name, "SCANNING")

        self.handler.on_data_received(lines[-1])
        results = self.handler.process_pending()

        self.assertTrue(results[0].ok)
        self.assertAlmostEqual(self.status.frequency_mhz, 154.28, places=4)

    def test_parse_failure_logged(self):
        self.handler.on_data_received("GSI,<XML>,<ScannerInfo><Broken></ScannerInfo>")

        results = self.handler.process_pending()

        self.assertFalse(results[0].ok)
        self.assertEqual(self.handler.debug_log, ["[12:34:56] Parse failed"])
        self.assertEqual(self.status, ScannerStatus())

    def test_logs_are_capped(self):
        handler = ResponseHandler(ScannerStatus(), clock=fixed_clock,
                                  max_raw_log_size=3, max_debug_log_size=2)
        for i in range(5):
            handler.on_data_sent(f"CMD{i}")
            handler.on_data_received(GSI_DOCUMENT)
        handler.process_pending()

        self.assertEqual(len(handler.raw_log), 3)
        self.assertEqual(handler.raw_log[-1], f"[12:34:56] << {GSI_DOCUMENT}")
        self.assertEqual(len(handler.debug_log), 2)

    def test_default_caps(self):
        for i in range(40):
            self.handler.on_data_sent(f"CMD{i}")
        self.assertEqual(len(self.handler.raw_log), 30)
        self.assertEqual(self.handler.raw_log[0], "[12:34:56] >> CMD10")

    def test_clear_buffer(self):
        self.handler.on_data_received("GSI,<XML>,<ScannerInfo>")
        self.handler.process_pending()
        self.assertNotEqual(self.handler.buffer_contents, "")

        self.handler.clear_buffer()
        self.assertEqual(self.handler.buffer_contents, "")

    def test_buffer_is_trimmed_oldest_first(self):
        with patch.object(ResponseHandler, 'MAX_BUFFER_SIZE', 20):
            for i in range(10):
                self.handler.on_data_received(f"KEY,OK{i}")
            self.handler.process_pending()

        self.assertEqual(self.handler.buffer_contents, "KEY,OK8\nKEY,OK9")

    def test_default_buffer_cap(self):
        for i in range(20000):
            self.handler.on_data_received("KEY,OK")
            if i % 500 == 0:
                self.handler.process_pending()
        self.handler.process_pending()

        contents = self.handler.buffer_contents
        self.assertLessEqual(len(contents.replace("\n", "")), ResponseHandler.MAX_BUFFER_SIZE)
        self.assertGreater(len(contents), ResponseHandler.MAX_BUFFER_SIZE - 10)

    def test_document_decodes_after_trim(self):
        with patch.object(ResponseHandler, 'MAX_BUFFER_SIZE', 20):
            for i in range(10):
                self.handler.on_data_received(f"KEY,OK{i}")
            self.handler.process_pending()

        self.handler.on_data_received(GSI_DOCUMENT)
        results = self.handler.process_pending()

        self.assertTrue(results[0].ok)
        self.assertEqual(self.handler.buffer_contents, "")

    def test_attach_and_detach(self):
        bridge = MagicMock()
        unsub_received, unsub_sent = MagicMock(), MagicMock()
        bridge.subscribe_data_received.return_value = unsub_received
        bridge.subscribe_data_sent.return_value = unsub_sent

        self.handler.attach(bridge)
        bridge.subscribe_data_received.assert_called_once_with(self.handler.on_data_received)
        bridge.subscribe_data_sent.assert_called_once_with(self.handler.on_data_sent)

        self.handler.detach()
        unsub_received.assert_called_once()
        unsub_sent.assert_called_once()


if __name__ == '__main__':
    unittest.main()
