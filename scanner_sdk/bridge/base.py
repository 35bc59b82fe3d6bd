"""Abstract base class for scanner bridges.

A bridge owns one physical connection to the scanner (serial port or UDP
socket), runs the background receive loop that feeds its framer, and exposes
a blocking send-and-wait call to the polling loop.

Key principles:
- One command in flight at a time; replies are correlated by arrival order
- Transport failures never raise; they surface as TIMEOUT / DISCONNECTED
- Pub/sub for raw inbound and outbound traffic
"""
from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable, List

from ..models import Command
from ..protocol.commands import normalize_command
from ..protocol.serializer import serialize_command

logger = logging.getLogger(__name__)


class ScannerBridge(ABC):
    """Transport-agnostic scanner connection.

    send_and_receive() and send_command() normalize the command and fire the
    data-sent notification exactly once, then hand the normalized text to the
    transport's _send_and_receive() / _send_command().
    """

    def __init__(self):
        self._received_callbacks: List[Callable[[str], None]] = []
        self._sent_callbacks: List[Callable[[str], None]] = []
        self._callback_lock = threading.Lock()

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """True while the transport is believed to be live."""
        pass

    @abstractmethod
    def connect(self, target: str, port_or_baud: int) -> bool:
        """Open the transport.

        Args:
            target: IP address for UDP, port name for serial
            port_or_baud: UDP port number, or serial baud rate

        Returns:
            True if the bridge is connected
        """
        pass

    @abstractmethod
    def dispose(self) -> None:
        """Stop the receive loop and release the transport.

        Idempotent and safe to call on a bridge that never connected.
        """
        pass

    def send_and_receive(self, command: str, timeout: float = 2.0) -> str:
        """Send a command and wait for its reply.

        Args:
            command: Command text; trimmed and uppercased before sending
            timeout: Seconds to wait for the reply

        Returns:
            The reply text, or the TIMEOUT / DISCONNECTED sentinel

        Example:
            >>> bridge.send_and_receive("mdl")
            'MDL,SDS200'
        """
        normalized = normalize_command(command)
        self._notify_sent(normalized)
        return self._send_and_receive(normalized, timeout)

    def send_command(self, command: str) -> None:
        """Send a command without waiting for a reply."""
        normalized = normalize_command(command)
        self._notify_sent(normalized)
        self._send_command(normalized)

    def query(self, command: Command, timeout: float = 2.0) -> str:
        """Serialize a command object and send it with send_and_receive()."""
        return self.send_and_receive(serialize_command(command), timeout)

    def subscribe_data_received(self, callback: Callable[[str], None]) -> Callable[[], None]:
        """Subscribe to complete inbound messages.

        Fired once per message assembled by the framer, before the waiting
        caller is released.

        Returns:
            Unsubscribe function
        """
        return self._subscribe(self._received_callbacks, callback)

    def subscribe_data_sent(self, callback: Callable[[str], None]) -> Callable[[], None]:
        """Subscribe to outbound commands (normalized text, no terminator).

        Returns:
            Unsubscribe function
        """
        return self._subscribe(self._sent_callbacks, callback)

    @abstractmethod
    def _send_and_receive(self, command: str, timeout: float) -> str:
        pass

    @abstractmethod
    def _send_command(self, command: str) -> None:
        pass

    def _subscribe(
        self,
        callbacks: List[Callable[[str], None]],
        callback: Callable[[str], None],
    ) -> Callable[[], None]:
        with self._callback_lock:
            callbacks.append(callback)

        def unsubscribe():
            with self._callback_lock:
                if callback in callbacks:
                    callbacks.remove(callback)

        return unsubscribe

    def _notify_received(self, message: str) -> None:
        self._notify(self._received_callbacks, message, "data received")

    def _notify_sent(self, command: str) -> None:
        self._notify(self._sent_callbacks, command, "data sent")

    def _notify(self, callbacks: List[Callable[[str], None]], text: str, kind: str) -> None:
        with self._callback_lock:
            targets = list(callbacks)

        for callback in targets:
            try:
                callback(text)
            except Exception as e:
                logger.error(f"Error in {kind} callback: {e}")

    def __enter__(self) -> ScannerBridge:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager support - dispose on exit."""
        self.dispose()
