"""Request/response correlation for the single-outstanding-command protocol.

The scanner never pipelines commands and carries no sequence numbers, so a
bridge holds at most one pending response. The next complete message framed
by the receive loop resolves it.
"""
from __future__ import annotations

import logging
import threading
from typing import Optional

from ..models import TIMEOUT

logger = logging.getLogger(__name__)


class PendingResponse:
    """Correlation token for one send-and-wait call.

    Created by the caller thread, resolved at most once by the receive loop,
    and discarded after the caller stops waiting.

    Attributes:
        command: Normalized command that is awaiting a reply
        expect_xml: Reply is a multi-line XML document (serial framing)
        expect_multi_fragment: Reply spans Footer-sequenced datagrams (UDP framing)
        closing_tag: Tag that ends the XML document, if expect_xml
    """

    def __init__(
        self,
        command: str = "",
        *,
        expect_xml: bool = False,
        expect_multi_fragment: bool = False,
        closing_tag: Optional[str] = None,
    ):
        self.command = command
        self.expect_xml = expect_xml
        self.expect_multi_fragment = expect_multi_fragment
        self.closing_tag = closing_tag

        self._event = threading.Event()
        self._payload: Optional[str] = None
        self._lock = threading.Lock()

    @property
    def resolved(self) -> bool:
        return self._event.is_set()

    def resolve(self, payload: str) -> bool:
        """Complete the token. Returns False if it was already resolved."""
        with self._lock:
            if self._event.is_set():
                return False
            self._payload = payload
            self._event.set()
            return True

    def wait(self, timeout: float) -> Optional[str]:
        """Block until resolved or the timeout elapses.

        Returns:
            The payload, or None on timeout
        """
        if self._event.wait(timeout):
            return self._payload
        return None

    def __repr__(self) -> str:
        return f"PendingResponse(command={self.command!r}, resolved={self.resolved})"


class ResponseCorrelator:
    """Single pending-response slot shared by a bridge and its framer.

    The caller thread is the only creator of pending responses; the receive
    loop is the only resolver. The slot itself is swapped under a short lock.

    Registering a new pending response while another is still unresolved
    replaces it: the earlier caller simply times out. This matches the
    device's own one-command-at-a-time discipline.
    """

    def __init__(self):
        self._pending: Optional[PendingResponse] = None
        self._lock = threading.Lock()

    @property
    def pending(self) -> Optional[PendingResponse]:
        """The currently registered pending response, if any."""
        with self._lock:
            return self._pending

    def expect_response(self, pending: PendingResponse) -> None:
        """Register the pending slot, replacing any earlier one."""
        with self._lock:
            previous = self._pending
            self._pending = pending

        if previous is not None and not previous.resolved:
            logger.debug(f"Orphaned pending response for {previous.command!r}")

    def resolve(self, payload: str) -> bool:
        """Fulfil the pending slot with a framed message.

        Returns:
            True if a waiting caller received the payload, False if nothing
            was pending (unsolicited traffic)
        """
        with self._lock:
            pending = self._pending
            self._pending = None

        if pending is None:
            return False
        return pending.resolve(payload)

    def discard(self, pending: PendingResponse) -> None:
        """Release the slot if it still holds this pending response."""
        with self._lock:
            if self._pending is pending:
                self._pending = None

    def wait(self, pending: PendingResponse, timeout: float) -> str:
        """Race resolution of a pending response against a timer.

        The timer never cancels in-flight I/O. A reply that arrives after the
        deadline finds the slot empty and is dropped.

        Returns:
            The payload, or TIMEOUT
        """
        payload = pending.wait(timeout)
        if payload is not None:
            return payload

        self.discard(pending)
        logger.debug(f"No response to {pending.command!r} within {timeout:.2f}s")
        return TIMEOUT
