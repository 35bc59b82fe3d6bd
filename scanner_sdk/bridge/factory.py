"""Bridge construction by connection type."""
from __future__ import annotations

from enum import Enum
from typing import Union

from ..errors import UnsupportedTransportError
from .base import ScannerBridge
from .serial import SerialScannerBridge
from .udp import UdpScannerBridge


class TransportKind(Enum):
    """Supported connection types."""
    UDP = "udp"
    SERIAL = "serial"


def create_bridge(kind: Union[TransportKind, str]) -> ScannerBridge:
    """Create an unconnected bridge for a connection type.

    Args:
        kind: TransportKind or its name ("udp", "serial"; case-insensitive)

    Returns:
        A new bridge; call connect() on it

    Raises:
        UnsupportedTransportError: If kind names no known transport

    Examples:
        >>> create_bridge("udp")
        <scanner_sdk.bridge.udp.UdpScannerBridge object at ...>
    """
    if isinstance(kind, str):
        try:
            kind = TransportKind(kind.strip().lower())
        except ValueError:
            raise UnsupportedTransportError(f"Unsupported transport: {kind!r}", kind) from None

    if kind is TransportKind.UDP:
        return UdpScannerBridge()
    elif kind is TransportKind.SERIAL:
        return SerialScannerBridge()
    else:
        raise UnsupportedTransportError(f"Unsupported transport: {kind!r}", kind)
