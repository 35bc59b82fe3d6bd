"""Response handler that observes bridge traffic for status documents.

The ResponseHandler subscribes to a bridge's data-received and data-sent
notifications. It keeps a capped, timestamped log of raw traffic, collects
received text until a complete ScannerInfo document has arrived, decodes it
into a shared ScannerStatus, and keeps a short log of decode events.

Received text is queued by the receive thread and decoded on whichever
thread calls process_pending(), so the status record has a single writer.
"""
from __future__ import annotations

import logging
import queue
import threading
from collections import deque
from datetime import datetime
from typing import Callable, Deque, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..bridge.base import ScannerBridge

from ..models import ScannerStatus
from ..protocol.commands import STATUS_CLOSING_TAG
from ..protocol.decoder import DecodeResult, StatusDecoder

logger = logging.getLogger(__name__)

MAX_RAW_LOG_SIZE = 30
MAX_DEBUG_LOG_SIZE = 5
MAX_QUEUE_SIZE = 1000
RESPONSE_HANDLER_MAX_BUFFER_SIZE = 64 * 1024  # characters
TIMESTAMP_FORMAT = "%H:%M:%S"


class ResponseHandler:
    """Assembles and decodes status documents from bridge traffic.

    Example:
        >>> status = ScannerStatus()
        >>> handler = ResponseHandler(status)
        >>> handler.attach(bridge)
        >>> bridge.send_and_receive("GSI,0", 0.5)
        >>> handler.process_pending()
        [DecodeResult(error=None, detail='')]
        >>> handler.debug_log
        ['[12:00:01] GSI parsed']
    """

    MAX_BUFFER_SIZE = RESPONSE_HANDLER_MAX_BUFFER_SIZE

    def __init__(self,
                 status: ScannerStatus,
                 decoder: Optional[StatusDecoder] = None,
                 clock: Optional[Callable[[], datetime]] = None,
                 max_raw_log_size: int = MAX_RAW_LOG_SIZE,
                 max_debug_log_size: int = MAX_DEBUG_LOG_SIZE):
        """Initialize response handler.

        Args:
            status: Status record updated when a document decodes
            decoder: Status decoder (default: a new StatusDecoder)
            clock: Returns the current time for log timestamps (default: datetime.now)
            max_raw_log_size: Raw traffic entries kept
            max_debug_log_size: Decode event entries kept
        """
        self._status = status
        self._decoder = decoder or StatusDecoder()
        self._clock = clock or datetime.now

        self._raw_log: Deque[str] = deque(maxlen=max_raw_log_size)
        self._debug_log: Deque[str] = deque(maxlen=max_debug_log_size)
        self._log_lock = threading.Lock()

        self._buffer: Deque[str] = deque()
        self._buffer_size = 0
        self._data_queue: queue.Queue[str] = queue.Queue(maxsize=MAX_QUEUE_SIZE)

        self._unsubscribers: List[Callable[[], None]] = []

    @property
    def raw_log(self) -> List[str]:
        """Recent traffic, oldest first ("[HH:MM:SS] >> cmd" / "[HH:MM:SS] << data")."""
        with self._log_lock:
            return list(self._raw_log)

    @property
    def debug_log(self) -> List[str]:
        """Recent decode events, oldest first."""
        with self._log_lock:
            return list(self._debug_log)

    @property
    def buffer_contents(self) -> str:
        """Text accumulated toward the next document."""
        return "\n".join(self._buffer)

    def attach(self, bridge: ScannerBridge) -> None:
        """Subscribe to a bridge's traffic notifications."""
        self._unsubscribers.append(bridge.subscribe_data_received(self.on_data_received))
        self._unsubscribers.append(bridge.subscribe_data_sent(self.on_data_sent))

    def detach(self) -> None:
        """Remove all bridge subscriptions made by attach()."""
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()

    def on_data_sent(self, data: str) -> None:
        self._append_raw(f">> {data}")

    def on_data_received(self, data: str) -> None:
        """Log received text and queue it for decoding.

        Runs on the bridge's receive thread; does no decoding itself.
        """
        self._append_raw(f"<< {data}")
        try:
            self._data_queue.put(data, block=False)
        except queue.Full:
            logger.warning("Response queue full, dropped received data")

    def process_pending(self) -> List[DecodeResult]:
        """Accumulate queued text and decode every completed document.

        Returns:
            One DecodeResult per document completed by the queued text
        """
        results: List[DecodeResult] = []
        while True:
            try:
                data = self._data_queue.get_nowait()
            except queue.Empty:
                break

            self._buffer.append(data)
            self._buffer_size += len(data)
            if STATUS_CLOSING_TAG not in data:
                self._trim_buffer()
                continue

            accumulated = "\n".join(self._buffer)
            result = self._decoder.decode(self._status, accumulated)
            self._append_debug("GSI parsed" if result.ok else "Parse failed")
            if not result.ok:
                logger.debug(f"Status decode failed: {result.error} {result.detail}")
            self.clear_buffer()
            results.append(result)

        return results

    def clear_buffer(self) -> None:
        self._buffer.clear()
        self._buffer_size = 0

    def _trim_buffer(self) -> None:
        """Drop the oldest messages once the buffer exceeds MAX_BUFFER_SIZE.

        The newest message is always kept, even if it alone is over the limit.
        """
        if self._buffer_size <= self.MAX_BUFFER_SIZE:
            return

        while self._buffer_size > self.MAX_BUFFER_SIZE and len(self._buffer) > 1:
            self._buffer_size -= len(self._buffer.popleft())
        logger.debug(f"Buffer trimmed to {self._buffer_size} characters")

    def _timestamp(self) -> str:
        return self._clock().strftime(TIMESTAMP_FORMAT)

    def _append_raw(self, entry: str) -> None:
        with self._log_lock:
            self._raw_log.append(f"[{self._timestamp()}] {entry}")

    def _append_debug(self, entry: str) -> None:
        with self._log_lock:
            self._debug_log.append(f"[{self._timestamp()}] {entry}")
