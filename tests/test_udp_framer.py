"""Unit tests for UdpFramer datagram classification and reassembly."""

import unittest

from scanner_sdk.models import TIMEOUT
from scanner_sdk.protocol.correlator import PendingResponse
from scanner_sdk.protocol.udp_framer import (
    UdpFramer,
    extract_fragment_body,
    is_xml_packet,
    parse_footer,
)


XML_DECL = '<?xml version="1.0" encoding="utf-8"?>'


def fragment(body, number, eot):
    return f'GLT,<XML>,{XML_DECL}{body}<Footer No="{number}" EOT="{1 if eot else 0}"/>'


class TestUdpHelpers(unittest.TestCase):
    """Tests for the stateless packet helpers."""

    def test_is_xml_packet(self):
        self.assertTrue(is_xml_packet("GSI,<XML>,<ScannerInfo/>"))
        self.assertTrue(is_xml_packet(XML_DECL + "<GLT/>"))
        self.assertTrue(is_xml_packet('<footer no="1" eot="1"/>'))
        self.assertFalse(is_xml_packet("MDL,SDS200"))

    def test_parse_footer(self):
        self.assertEqual(parse_footer('<GLT/><Footer No="3" EOT="1"/>'), (3, True))
        self.assertEqual(parse_footer('<Footer  No="12"  EOT="0" />'), (12, False))
        self.assertEqual(parse_footer('<footer no="1" eot="0"/>'), (1, False))
        self.assertIsNone(parse_footer("<GLT/>"))
        self.assertIsNone(parse_footer('<Footer No="x" EOT="1"/>'))

    def test_extract_fragment_body(self):
        packet = fragment("<GLT><FL Name=\"A\"/>", 1, False)
        self.assertEqual(extract_fragment_body(packet), XML_DECL + '<GLT><FL Name="A"/>')

    def test_extract_fragment_body_without_declaration(self):
        self.assertEqual(
            extract_fragment_body('GLT,<FL Name="B"/></GLT><Footer No="2" EOT="1"/>'),
            '<FL Name="B"/></GLT>',
        )


class TestUdpFramerSinglePacket(unittest.TestCase):
    """Single-datagram replies."""

    def setUp(self):
        self.framer = UdpFramer()
        self.messages = []
        self.framer.subscribe_message(self.messages.append)

    def test_plain_reply_resolves_exactly(self):
        pending = PendingResponse("MDL")
        self.framer.expect_response(pending)

        self.framer.process_datagram(b"MDL,SDS200\r")

        self.assertEqual(pending.wait(0.1), "MDL,SDS200")
        self.assertEqual(self.messages, ["MDL,SDS200"])

    def test_single_packet_xml_resolves_in_full(self):
        reply = f'GSI,<XML>,{XML_DECL}<ScannerInfo Mode="Scan"></ScannerInfo>'
        pending = PendingResponse("GSI,0")
        self.framer.expect_response(pending)

        self.framer.process_datagram(reply.encode("ascii"))

        self.assertEqual(pending.wait(0.1), reply)

    def test_empty_datagram_ignored(self):
        pending = PendingResponse("MDL")
        self.framer.expect_response(pending)

        self.framer.process_datagram(b"  \r\n")

        self.assertFalse(pending.resolved)
        self.assertEqual(self.messages, [])


class TestUdpFramerMultiFragment(unittest.TestCase):
    """Footer-sequenced reassembly."""

    def setUp(self):
        self.framer = UdpFramer()
        self.messages = []
        self.framer.subscribe_message(self.messages.append)
        self.pending = PendingResponse("GLT,FL", expect_multi_fragment=True)
        self.framer.expect_response(self.pending)

    def test_reassembles_in_fragment_order(self):
        bodies = ['<GLT><FL Name="A"/>', '<FL Name="B"/>', '<FL Name="C"/></GLT>']

        self.framer.process_datagram(fragment(bodies[0], 1, False))
        self.framer.process_datagram(fragment(bodies[1], 2, False))
        self.assertFalse(self.pending.resolved)
        self.framer.process_datagram(fragment(bodies[2], 3, True))

        expected = "GLT," + "".join(XML_DECL + body for body in bodies)
        self.assertEqual(self.pending.wait(0.1), expected)
        self.assertEqual(self.messages, [expected])
        self.assertEqual(self.framer.gap_count, 0)
        self.assertFalse(self.framer.awaiting_multi_fragment)

    def test_gap_is_counted_and_assembly_continues(self):
        self.framer.process_datagram(fragment("<GLT>", 1, False))
        with self.assertLogs("scanner_sdk.protocol.udp_framer", level="WARNING"):
            self.framer.process_datagram(fragment("</GLT>", 3, True))

        self.assertEqual(self.framer.gap_count, 1)
        self.assertEqual(
            self.pending.wait(0.1),
            "GLT," + XML_DECL + "<GLT>" + XML_DECL + "</GLT>",
        )

    def test_fragment_without_footer_is_content(self):
        self.framer.process_datagram(f"GLT,<XML>,{XML_DECL}<GLT>")
        self.assertFalse(self.pending.resolved)

        self.framer.process_datagram(fragment("</GLT>", 1, True))

        self.assertEqual(self.framer.gap_count, 0)
        self.assertEqual(
            self.pending.wait(0.1),
            "GLT," + XML_DECL + "<GLT>" + XML_DECL + "</GLT>",
        )

    def test_plain_datagram_during_assembly_passes_through(self):
        self.framer.process_datagram(fragment("<GLT>", 1, False))
        self.framer.process_datagram(b"STS,idle")

        # Non-XML traffic resolves the slot like any plain reply
        self.assertEqual(self.pending.wait(0.1), "STS,idle")

    def test_abandon_after_timeout_clears_fragments(self):
        self.framer.process_datagram(fragment("<GLT>", 1, False))
        self.assertEqual(self.framer.correlator.wait(self.pending, 0.05), TIMEOUT)

        self.framer.abandon(self.pending)

        self.assertFalse(self.framer.awaiting_multi_fragment)
        # A straggler is now passed through as-is rather than joined to stale state
        straggler = fragment("</GLT>", 2, True)
        self.framer.process_datagram(straggler)
        self.assertEqual(self.messages, [straggler])
        self.assertEqual(self.framer.gap_count, 0)


if __name__ == '__main__':
    unittest.main()
