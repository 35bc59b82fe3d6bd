"""Serial (USB) bridge to the scanner.

The scanner enumerates as a USB CDC serial port and speaks the remote
command protocol at 115200 8N1. Every inbound message ends in a carriage
return; XML status documents span many lines.

This module handles:
- Opening and closing the pyserial port
- The background reader thread that feeds a SerialFramer
- Send-and-wait with TIMEOUT / DISCONNECTED sentinels
"""
from __future__ import annotations

import logging
import threading
from typing import Optional

import serial

from ..models import DISCONNECTED, TIMEOUT
from ..protocol.commands import (
    SERIAL_XML_TIMEOUT_FLOOR,
    closing_tag_for,
    encode_command,
    is_xml_command,
)
from ..protocol.correlator import PendingResponse
from ..protocol.serial_framer import SerialFramer
from .base import ScannerBridge

logger = logging.getLogger(__name__)

DEFAULT_BAUDRATE = 115200
READ_TIMEOUT = 0.1  # seconds
WRITE_TIMEOUT = 1.0  # seconds
READ_CHUNK_SIZE = 4096  # bytes
RECEIVE_ENCODING = "ascii"


class SerialScannerBridge(ScannerBridge):
    """Scanner bridge over a serial port.

    Example:
        >>> bridge = SerialScannerBridge()
        >>> bridge.connect("/dev/ttyACM0", 115200)
        True
        >>> bridge.send_and_receive("MDL", 1.0)
        'MDL,SDS200'
        >>> bridge.dispose()
    """

    def __init__(self,
                 framer: Optional[SerialFramer] = None,
                 read_timeout: float = READ_TIMEOUT,
                 write_timeout: float = WRITE_TIMEOUT,
                 chunk_size: int = READ_CHUNK_SIZE):
        """Initialize serial bridge.

        Args:
            framer: Line framer, or None for a fresh SerialFramer
            read_timeout: pyserial read timeout; bounds how long dispose waits
            write_timeout: pyserial write timeout
            chunk_size: Maximum bytes to read per call
        """
        super().__init__()
        self._framer = framer or SerialFramer()
        self._framer.subscribe_message(self._notify_received)

        self._read_timeout = read_timeout
        self._write_timeout = write_timeout
        self._chunk_size = chunk_size

        self._serial: Optional[serial.Serial] = None
        self._port_name: Optional[str] = None

        self._stop = threading.Event()
        self._reader_thread: Optional[threading.Thread] = None
        self._write_lock = threading.Lock()

    @property
    def framer(self) -> SerialFramer:
        return self._framer

    @property
    def is_connected(self) -> bool:
        port = self._serial
        return port is not None and port.is_open

    def connect(self, target: str, port_or_baud: int = DEFAULT_BAUDRATE) -> bool:
        """Open a serial port.

        Args:
            target: Port name (e.g. '/dev/ttyACM0', 'COM3')
            port_or_baud: Baud rate

        Returns:
            True if the port opened
        """
        if self.is_connected:
            logger.warning("Already connected")
            return True

        try:
            self._serial = serial.Serial(
                port=target,
                baudrate=port_or_baud,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                timeout=self._read_timeout,
                write_timeout=self._write_timeout,
            )
            self._serial.reset_input_buffer()
            logger.info(f"Connected to scanner on {target} @ {port_or_baud} baud")
        except serial.SerialException as e:
            logger.error(f"Failed to open {target}: {e}")
            self._serial = None
            return False

        self._port_name = target
        self._framer.reset()
        self._stop.clear()
        self._start_reader_thread()
        return True

    def dispose(self) -> None:
        """Stop the reader thread and close the port."""
        self._stop.set()

        if (self._reader_thread and self._reader_thread.is_alive()
                and self._reader_thread is not threading.current_thread()):
            self._reader_thread.join(timeout=1.0)
        self._reader_thread = None

        port, self._serial = self._serial, None
        if port is not None:
            try:
                port.close()
            except (serial.SerialException, OSError) as e:
                logger.error(f"Error closing serial port: {e}")
            logger.info(f"Disconnected from {self._port_name}")

    def _send_and_receive(self, command: str, timeout: float) -> str:
        if not self.is_connected:
            return DISCONNECTED

        expect_xml = is_xml_command(command)
        if expect_xml:
            timeout = max(timeout, SERIAL_XML_TIMEOUT_FLOOR)

        pending = PendingResponse(
            command,
            expect_xml=expect_xml,
            closing_tag=closing_tag_for(command),
        )
        self._framer.expect_response(pending)

        if not self._write(command):
            self._framer.correlator.discard(pending)
            return DISCONNECTED

        response = self._framer.correlator.wait(pending, timeout)
        if response == TIMEOUT:
            self._framer.abandon(pending)
        return response

    def _send_command(self, command: str) -> None:
        if self.is_connected:
            self._write(command)

    def _write(self, command: str) -> bool:
        port = self._serial
        if port is None:
            return False

        try:
            with self._write_lock:
                port.write(encode_command(command))
            logger.debug(f">> {command}")
            return True
        except (serial.SerialException, OSError) as e:
            logger.error(f"Send error: {e}")
            self._handle_error(e)
            return False

    def _start_reader_thread(self) -> None:
        self._reader_thread = threading.Thread(
            target=self._reader_loop,
            daemon=True,
            name="ScannerSerialReader"
        )
        self._reader_thread.start()

    def _reader_loop(self) -> None:
        """Read whatever the port has and feed it to the framer."""
        logger.debug("Reader thread started")

        while not self._stop.is_set():
            port = self._serial
            if port is None:
                break
            try:
                chunk = port.read(min(port.in_waiting or 1, self._chunk_size))
            except (serial.SerialException, OSError) as e:
                if not self._stop.is_set():
                    logger.error(f"Serial read error: {e}")
                    self._handle_error(e)
                break

            if chunk:
                self._framer.process_chunk(chunk.decode(RECEIVE_ENCODING, errors="replace"))

        logger.debug("Reader thread exiting")

    def _handle_error(self, error: Exception) -> None:
        """Close the port after a fatal error (e.g. device unplugged).

        Does not join the reader thread; it may be the caller.
        """
        logger.warning(f"Handling connection error: {error}")
        self._stop.set()

        port, self._serial = self._serial, None
        if port is not None:
            try:
                port.close()
            except (serial.SerialException, OSError):
                logger.debug("Port already closed")
