"""UDP (network) bridge to the scanner.

The scanner listens on UDP port 50536 and answers each command from the
address it came from. Key differences from serial:
- Datagrams are self-contained, so there is no line buffering
- List replies (GLT) are split into Footer-sequenced datagrams
- There is no handshake; an MDL probe right after opening establishes
  liveness

The socket is never connect()ed. Each send targets the scanner endpoint
explicitly, since connected UDP sockets filter inbound datagrams
inconsistently across platforms.
"""
from __future__ import annotations

import logging
import socket
import threading
from typing import Optional, Tuple

from ..models import DISCONNECTED, TIMEOUT, is_sentinel
from ..protocol.commands import (
    MULTI_FRAGMENT_TIMEOUT_FLOOR,
    encode_command,
    is_multi_fragment_command,
)
from ..protocol.correlator import PendingResponse
from ..protocol.udp_framer import UdpFramer
from .base import ScannerBridge

logger = logging.getLogger(__name__)

DEFAULT_UDP_PORT = 50536
PROBE_COMMAND = "MDL"
PROBE_TIMEOUT = 2.0  # seconds
RECEIVE_POLL_INTERVAL = 0.5  # seconds; socket timeout so the loop can see stop requests
SOCKET_ERROR_BACKOFF = 0.25  # seconds
MAX_DATAGRAM_SIZE = 65535


class UdpScannerBridge(ScannerBridge):
    """Scanner bridge over UDP.

    is_connected reflects the most recent evidence: the probe on connect,
    any later successful round trip (sets it), and any send or receive
    socket error (clears it). A plain timeout leaves it unchanged.

    is_connected does not gate sends. While the socket is open, commands
    still go out after a failed probe or a receive error, so a scanner that
    comes back is picked up by the next successful round trip. Only a
    disposed bridge or a failed send returns DISCONNECTED.

    Example:
        >>> bridge = UdpScannerBridge()
        >>> bridge.connect("192.168.1.50", 50536)
        True
        >>> bridge.send_and_receive("GSI,0", 0.5)
        'GSI,<XML>,<?xml version="1.0" ...'
    """

    def __init__(self,
                 framer: Optional[UdpFramer] = None,
                 probe_timeout: float = PROBE_TIMEOUT,
                 poll_interval: float = RECEIVE_POLL_INTERVAL,
                 error_backoff: float = SOCKET_ERROR_BACKOFF):
        """Initialize UDP bridge.

        Args:
            framer: Datagram framer, or None for a fresh UdpFramer
            probe_timeout: How long connect() waits for the MDL probe reply
            poll_interval: Socket receive timeout between stop checks
            error_backoff: Pause after a receive socket error
        """
        super().__init__()
        self._framer = framer or UdpFramer()
        self._framer.subscribe_message(self._notify_received)

        self._probe_timeout = probe_timeout
        self._poll_interval = poll_interval
        self._error_backoff = error_backoff

        self._socket: Optional[socket.socket] = None
        self._endpoint: Optional[Tuple[str, int]] = None
        self._connected = False

        self._stop = threading.Event()
        self._receive_thread: Optional[threading.Thread] = None

    @property
    def framer(self) -> UdpFramer:
        return self._framer

    @property
    def endpoint(self) -> Optional[Tuple[str, int]]:
        """Scanner address every datagram is sent to."""
        return self._endpoint

    @property
    def local_address(self) -> Optional[Tuple[str, int]]:
        """Address the socket is bound to, or None when closed."""
        sock = self._socket
        return sock.getsockname() if sock is not None else None

    @property
    def is_connected(self) -> bool:
        return self._connected and self._socket is not None

    def connect(self, target: str, port_or_baud: int = DEFAULT_UDP_PORT) -> bool:
        """Open the socket, start receiving, and probe the scanner.

        Args:
            target: Scanner IP address or hostname
            port_or_baud: Scanner UDP port

        Returns:
            True if the scanner answered the probe
        """
        if self._socket is not None:
            self.dispose()

        try:
            sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
            sock.bind(("", 0))
            sock.settimeout(self._poll_interval)
        except OSError as e:
            logger.error(f"Failed to open UDP socket: {e}")
            return False

        self._socket = sock
        self._endpoint = (target, port_or_baud)
        self._connected = False
        self._framer.reset()
        self._stop.clear()
        self._start_receive_thread()

        probe = self.send_and_receive(PROBE_COMMAND, self._probe_timeout)
        self._connected = not is_sentinel(probe)

        if self._connected:
            logger.info(f"Connected to scanner at {target}:{port_or_baud} ({probe})")
        else:
            logger.warning(f"No reply to {PROBE_COMMAND} probe from {target}:{port_or_baud}: {probe}")
        return self._connected

    def dispose(self) -> None:
        """Stop the receive loop and close the socket."""
        self._stop.set()
        self._connected = False

        sock, self._socket = self._socket, None
        if sock is not None:
            try:
                sock.close()
            except OSError as e:
                logger.error(f"Error closing UDP socket: {e}")

        if (self._receive_thread and self._receive_thread.is_alive()
                and self._receive_thread is not threading.current_thread()):
            self._receive_thread.join(timeout=1.0)
        self._receive_thread = None

        if sock is not None:
            logger.info(f"Disconnected from {self._endpoint}")

    def _send_and_receive(self, command: str, timeout: float) -> str:
        if self._socket is None or self._endpoint is None:
            return DISCONNECTED

        multi_fragment = is_multi_fragment_command(command)
        if multi_fragment:
            timeout = max(timeout, MULTI_FRAGMENT_TIMEOUT_FLOOR)

        pending = PendingResponse(command, expect_multi_fragment=multi_fragment)
        self._framer.expect_response(pending)

        if not self._send(command):
            self._framer.correlator.discard(pending)
            return DISCONNECTED

        response = self._framer.correlator.wait(pending, timeout)
        if response == TIMEOUT:
            self._framer.abandon(pending)
        elif not is_sentinel(response):
            self._connected = True
        return response

    def _send_command(self, command: str) -> None:
        if self._socket is not None and self._endpoint is not None:
            self._send(command)

    def _send(self, command: str) -> bool:
        sock = self._socket
        if sock is None or self._endpoint is None:
            return False

        try:
            sock.sendto(encode_command(command), self._endpoint)
            logger.debug(f">> {command}")
            return True
        except OSError as e:
            logger.error(f"Send error to {self._endpoint}: {e}")
            self._connected = False
            return False

    def _start_receive_thread(self) -> None:
        self._receive_thread = threading.Thread(
            target=self._receive_loop,
            daemon=True,
            name="ScannerUdpReceiver"
        )
        self._receive_thread.start()

    def _receive_loop(self) -> None:
        """Receive datagrams until disposed."""
        logger.debug("Receive thread started")

        while not self._stop.is_set():
            sock = self._socket
            if sock is None:
                break
            try:
                data, _ = sock.recvfrom(MAX_DATAGRAM_SIZE)
            except socket.timeout:
                continue
            except OSError as e:
                if self._stop.is_set():
                    break
                logger.error(f"UDP receive error: {e}")
                self._connected = False
                self._stop.wait(self._error_backoff)
                continue

            self._framer.process_datagram(data)

        logger.debug("Receive thread exiting")
