"""Unit tests for PendingResponse and ResponseCorrelator."""

import threading
import time
import unittest

from scanner_sdk.models import TIMEOUT
from scanner_sdk.protocol.correlator import PendingResponse, ResponseCorrelator


class TestPendingResponse(unittest.TestCase):
    """Tests for the single-use completion token."""

    def test_resolves_once(self):
        pending = PendingResponse("MDL")

        self.assertTrue(pending.resolve("MDL,SDS200"))
        self.assertFalse(pending.resolve("second"))
        self.assertTrue(pending.resolved)
        self.assertEqual(pending.wait(0.1), "MDL,SDS200")

    def test_wait_times_out(self):
        pending = PendingResponse("MDL")
        self.assertIsNone(pending.wait(0.01))


class TestResponseCorrelator(unittest.TestCase):
    """Tests for the single pending slot."""

    def setUp(self):
        self.correlator = ResponseCorrelator()

    def test_resolve_without_pending_is_noop(self):
        self.assertFalse(self.correlator.resolve("unsolicited"))
        self.assertIsNone(self.correlator.pending)

    def test_resolve_fulfils_and_clears_slot(self):
        pending = PendingResponse("MDL")
        self.correlator.expect_response(pending)

        self.assertTrue(self.correlator.resolve("MDL,SDS200"))
        self.assertIsNone(self.correlator.pending)
        self.assertEqual(self.correlator.wait(pending, 0.1), "MDL,SDS200")

    def test_new_pending_replaces_previous(self):
        first = PendingResponse("MDL")
        second = PendingResponse("GSI,0")
        self.correlator.expect_response(first)
        self.correlator.expect_response(second)

        self.correlator.resolve("reply")

        self.assertFalse(first.resolved)
        self.assertEqual(second.wait(0.1), "reply")
        self.assertEqual(self.correlator.wait(first, 0.01), TIMEOUT)

    def test_wait_returns_timeout_and_drops_late_reply(self):
        pending = PendingResponse("MDL")
        self.correlator.expect_response(pending)

        start = time.monotonic()
        result = self.correlator.wait(pending, 0.05)
        elapsed = time.monotonic() - start

        self.assertEqual(result, TIMEOUT)
        self.assertGreaterEqual(elapsed, 0.04)
        self.assertIsNone(self.correlator.pending)

        # Late reply finds nothing to resolve
        self.assertFalse(self.correlator.resolve("MDL,SDS200"))
        self.assertFalse(pending.resolved)

    def test_resolved_from_another_thread(self):
        pending = PendingResponse("MDL")
        self.correlator.expect_response(pending)

        timer = threading.Timer(0.02, self.correlator.resolve, args=("MDL,SDS200",))
        timer.start()
        try:
            self.assertEqual(self.correlator.wait(pending, 1.0), "MDL,SDS200")
        finally:
            timer.cancel()

    def test_discard_only_removes_matching_pending(self):
        first = PendingResponse("MDL")
        second = PendingResponse("GSI,0")
        self.correlator.expect_response(second)

        self.correlator.discard(first)
        self.assertIs(self.correlator.pending, second)

        self.correlator.discard(second)
        self.assertIsNone(self.correlator.pending)


if __name__ == '__main__':
    unittest.main()
