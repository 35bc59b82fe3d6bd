"""Datagram framer for the UDP transport.

Most replies fit in one datagram and are delivered as-is. List replies (GLT)
are split across datagrams, each ending in a Footer element:

    GLT,<XML>,<?xml version="1.0" encoding="utf-8"?><GLT>...<Footer No="2" EOT="0"/>

The framer strips each fragment down to its XML body, joins the bodies in
arrival order, and resolves with "<prefix>,<bodies>" once EOT="1" arrives.
Sequence gaps are logged and counted; nothing is retransmitted.
"""
from __future__ import annotations

import logging
import re
from typing import List, Optional, Tuple, Union

from .base import FramedEvent, Framer
from .correlator import PendingResponse, ResponseCorrelator

logger = logging.getLogger(__name__)

DATAGRAM_ENCODING = "ascii"

FOOTER_PATTERN = re.compile(
    r'<Footer\s+No="(?P<no>\d+)"\s+EOT="(?P<eot>[01])"\s*/>',
    re.IGNORECASE,
)

_XML_MARKERS = ("<xml>", "<?xml", "<footer")


def is_xml_packet(message: str) -> bool:
    """Check if a datagram carries an XML document or fragment."""
    lowered = message.lower()
    return any(marker in lowered for marker in _XML_MARKERS)


def parse_footer(packet: str) -> Optional[Tuple[int, bool]]:
    """Parse the Footer element of a fragment.

    Returns:
        (sequence number, end-of-transmission flag), or None if the packet
        has no parseable Footer

    Examples:
        >>> parse_footer('<GLT/><Footer No="3" EOT="1"/>')
        (3, True)
    """
    match = FOOTER_PATTERN.search(packet)
    if match is None:
        return None
    return int(match.group("no")), match.group("eot") == "1"


def extract_fragment_body(packet: str) -> str:
    """Strip the command/envelope prefix and the Footer from a fragment."""
    lowered = packet.lower()

    xml_start = lowered.find("<?xml")
    if xml_start >= 0:
        footer_start = lowered.find("<footer")
        if footer_start > xml_start:
            return packet[xml_start:footer_start]
        return packet[xml_start:]

    comma = packet.find(",")
    if comma >= 0:
        content = packet[comma + 1:]
        footer_start = content.lower().find("<footer")
        if footer_start >= 0:
            return content[:footer_start]
        return content

    return packet


class UdpFramer(Framer):
    """Classifies datagrams and reassembles multi-fragment replies.

    Attributes:
        gap_count: Number of sequence gaps (lost fragments) seen since creation
    """

    def __init__(self, correlator: Optional[ResponseCorrelator] = None):
        super().__init__(correlator)
        self._fragments: List[str] = []
        self._last_fragment_no = 0
        self._command_prefix: Optional[str] = None
        self._awaiting_multi_fragment = False
        self.gap_count = 0

    @property
    def awaiting_multi_fragment(self) -> bool:
        return self._awaiting_multi_fragment

    def process_datagram(self, data: Union[bytes, str]) -> None:
        """Feed one received datagram.

        Args:
            data: Raw datagram bytes, or already-decoded text
        """
        if isinstance(data, bytes):
            data = data.decode(DATAGRAM_ENCODING, errors="replace")
        message = data.strip()
        if not message:
            return

        events: List[FramedEvent] = []
        with self._lock:
            if self._awaiting_multi_fragment and is_xml_packet(message):
                response = self._add_fragment(message)
                if response is not None:
                    events.append((response, response))
            else:
                events.append((message, message))

        self._dispatch(events)

    def _add_fragment(self, packet: str) -> Optional[str]:
        """Accumulate a fragment; return the full reply once EOT arrives."""
        if self._command_prefix is None:
            comma = packet.find(",")
            if comma > 0:
                self._command_prefix = packet[:comma]

        self._fragments.append(extract_fragment_body(packet))

        footer = parse_footer(packet)
        if footer is None:
            # Command echo or other content without sequencing
            return None

        number, end_of_transmission = footer
        expected = self._last_fragment_no + 1
        if number != expected:
            self.gap_count += 1
            logger.warning(f"UDP packet loss detected: expected fragment {expected}, got {number}")
        self._last_fragment_no = number

        if not end_of_transmission:
            return None

        body = "".join(self._fragments)
        response = f"{self._command_prefix},{body}" if self._command_prefix else body
        logger.debug(f"Reassembled {number} fragment(s) for {self._command_prefix!r}")

        self._clear()
        return response

    def _begin_response(self, pending: PendingResponse) -> None:
        self._clear()
        self._awaiting_multi_fragment = pending.expect_multi_fragment

    def _clear(self) -> None:
        self._fragments.clear()
        self._last_fragment_no = 0
        self._command_prefix = None
        self._awaiting_multi_fragment = False
