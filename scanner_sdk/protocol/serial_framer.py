"""Line framer for the serial character stream.

Every message from the scanner ends with a carriage return. Plain replies
are one line; XML replies (GSI, PSI, MSI, GLT) arrive as many lines and end
with the document's closing tag.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from .base import FramedEvent, Framer
from .commands import STATUS_CLOSING_TAG
from .correlator import PendingResponse, ResponseCorrelator

logger = logging.getLogger(__name__)

LINE_TERMINATOR = "\r"


class SerialFramer(Framer):
    """Accumulates characters into lines and lines into XML documents.

    Each completed line is published to message listeners. If the pending
    command expects a plain reply the line resolves it directly; if it
    expects XML, lines are collected until one contains the closing tag
    (case-insensitive) and the trimmed document resolves it.

    Example:
        >>> framer = SerialFramer()
        >>> unsubscribe = framer.subscribe_message(print)
        >>> framer.process_chunk("MDL,SDS")
        >>> framer.process_chunk("200\\r")
        MDL,SDS200
    """

    def __init__(self, correlator: Optional[ResponseCorrelator] = None):
        super().__init__(correlator)
        self._line_buffer: List[str] = []
        self._xml_buffer: List[str] = []
        self._awaiting_multiline_xml = False
        self._closing_tag = STATUS_CLOSING_TAG

    @property
    def awaiting_multiline_xml(self) -> bool:
        return self._awaiting_multiline_xml

    @property
    def pending_line(self) -> str:
        """Characters received since the last carriage return."""
        with self._lock:
            return "".join(self._line_buffer)

    def process_chunk(self, chunk: str) -> None:
        """Feed a chunk of decoded characters from the port.

        Args:
            chunk: Any number of characters, possibly ending mid-line
        """
        events: List[FramedEvent] = []

        with self._lock:
            for char in chunk:
                if char == LINE_TERMINATOR:
                    line = "".join(self._line_buffer)
                    self._line_buffer.clear()
                    events.append((line, self._complete_line(line)))
                else:
                    self._line_buffer.append(char)

        self._dispatch(events)

    def _complete_line(self, line: str) -> Optional[str]:
        """Return the payload that resolves the pending slot, if any."""
        if not self._awaiting_multiline_xml:
            return line

        self._xml_buffer.append(line + "\n")
        if self._closing_tag.lower() not in line.lower():
            return None

        document = "".join(self._xml_buffer).strip()
        self._xml_buffer.clear()
        self._line_buffer.clear()
        self._awaiting_multiline_xml = False
        logger.debug(f"Assembled XML document ({len(document)} chars)")
        return document

    def _begin_response(self, pending: PendingResponse) -> None:
        self._xml_buffer.clear()
        self._awaiting_multiline_xml = pending.expect_xml
        self._closing_tag = pending.closing_tag or STATUS_CLOSING_TAG

    def _clear(self) -> None:
        self._line_buffer.clear()
        self._xml_buffer.clear()
        self._awaiting_multiline_xml = False
        self._closing_tag = STATUS_CLOSING_TAG
