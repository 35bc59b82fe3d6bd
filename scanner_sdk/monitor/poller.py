"""Status polling loop.

One poll cycle sends GSI,0, waits briefly for the reply, and decodes it into
the shared ScannerStatus. The loop can be driven by the caller with
poll_once() or run on a background thread with start()/stop().
"""
from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Callable, List, Optional, Tuple

from ..bridge.base import ScannerBridge
from ..models import DISCONNECTED, TIMEOUT, ScannerStatus, StatusQuery
from ..protocol.commands import SERIAL_XML_TIMEOUT_FLOOR
from ..protocol.decoder import StatusDecoder
from ..protocol.serializer import serialize_command
from .response_handler import ResponseHandler

logger = logging.getLogger(__name__)

DEFAULT_POLL_TIMEOUT = 0.5  # seconds
DEFAULT_POLL_INTERVAL = 0.1  # seconds


class PollOutcome(Enum):
    """Result of one poll cycle; the value is written to last_command_sent."""
    UPDATED = "OK"
    TIMEOUT = "TIMEOUT"
    DISCONNECTED = "DISCONNECTED"
    UNRECOGNIZED = "UNRECOGNIZED"


PollCallback = Callable[[PollOutcome, ScannerStatus], None]


class StatusPoller:
    """Polls the scanner for status and keeps a ScannerStatus current.

    With a ResponseHandler, documents are decoded from the bridge's
    data-received stream (the handler must be attached to the bridge).
    Without one, the poller decodes each GSI reply itself.

    Subscribers receive (outcome, snapshot) after every cycle. The snapshot
    is an independent copy, safe to read on any thread.

    Example:
        >>> poller = StatusPoller(bridge)
        >>> poller.subscribe(lambda outcome, s: print(outcome, s.channel_name))
        >>> poller.start()
        >>> # Later...
        >>> poller.stop()
    """

    def __init__(self,
                 bridge: ScannerBridge,
                 status: Optional[ScannerStatus] = None,
                 decoder: Optional[StatusDecoder] = None,
                 handler: Optional[ResponseHandler] = None,
                 timeout: float = DEFAULT_POLL_TIMEOUT,
                 interval: float = DEFAULT_POLL_INTERVAL):
        self._bridge = bridge
        self._status = status if status is not None else ScannerStatus()
        self._decoder = decoder or StatusDecoder()
        self._handler = handler
        self._timeout = timeout
        self._interval = interval
        self._command = serialize_command(StatusQuery())

        self._callbacks: List[PollCallback] = []
        self._callback_lock = threading.Lock()

        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def status(self) -> ScannerStatus:
        """Live status record; only the polling thread should read it directly."""
        return self._status

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def poll_once(self) -> Tuple[PollOutcome, ScannerStatus]:
        """Run one poll cycle.

        Returns:
            (outcome, snapshot of the status after the cycle)
        """
        response = self._bridge.send_and_receive(self._command, self._timeout)

        if response == DISCONNECTED:
            outcome = PollOutcome.DISCONNECTED
        elif response == TIMEOUT:
            outcome = PollOutcome.TIMEOUT
        elif self._decode(response):
            outcome = PollOutcome.UPDATED
        else:
            outcome = PollOutcome.UNRECOGNIZED

        # Late replies may still be queued after a timeout
        if self._handler is not None and outcome is not PollOutcome.UPDATED:
            self._handler.process_pending()

        self._status.last_command_sent = outcome.value
        snapshot = self._status.snapshot()
        self._notify(outcome, snapshot)
        return outcome, snapshot

    def start(self) -> None:
        """Start polling on a background thread."""
        if self.is_running:
            return

        self._stop.clear()
        self._thread = threading.Thread(
            target=self._poll_loop,
            daemon=True,
            name="StatusPoller"
        )
        self._thread.start()
        logger.debug(f"Status poller started (interval={self._interval}s)")

    def stop(self) -> None:
        """Stop the background thread."""
        self._stop.set()
        if self._thread and self._thread.is_alive():
            # A serial GSI wait is raised to the XML floor
            self._thread.join(timeout=max(self._timeout, SERIAL_XML_TIMEOUT_FLOOR) + 1.0)
        self._thread = None
        logger.debug("Status poller stopped")

    def subscribe(self, callback: PollCallback) -> Callable[[], None]:
        """Subscribe to poll results.

        Returns:
            Unsubscribe function
        """
        with self._callback_lock:
            self._callbacks.append(callback)

        def unsubscribe():
            with self._callback_lock:
                if callback in self._callbacks:
                    self._callbacks.remove(callback)

        return unsubscribe

    def _decode(self, response: str) -> bool:
        if self._handler is None:
            result = self._decoder.decode(self._status, response)
            if not result.ok:
                logger.debug(f"Unrecognized poll reply ({result.error}): {response[:60]!r}")
            return result.ok

        results = self._handler.process_pending()
        return any(result.ok for result in results)

    def _poll_loop(self) -> None:
        while not self._stop.is_set():
            try:
                self.poll_once()
            except Exception as e:
                logger.error(f"Error in status poll: {e}")
            self._stop.wait(self._interval)

    def _notify(self, outcome: PollOutcome, snapshot: ScannerStatus) -> None:
        with self._callback_lock:
            callbacks = list(self._callbacks)

        for callback in callbacks:
            try:
                callback(outcome, snapshot)
            except Exception as e:
                logger.error(f"Error in poll callback: {e}")
