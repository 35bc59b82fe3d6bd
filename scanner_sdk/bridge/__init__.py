"""Transport layer: serial and UDP connections to the scanner."""

from .base import ScannerBridge
from .factory import TransportKind, create_bridge
from .serial import SerialScannerBridge
from .udp import UdpScannerBridge

__all__ = [
    "ScannerBridge",
    "TransportKind",
    "create_bridge",
    "SerialScannerBridge",
    "UdpScannerBridge",
]
