"""Protocol layer: command text, inbound framing, correlation and status decoding."""

from .base import Framer
from .commands import (
    normalize_command,
    encode_command,
    base_command,
    is_xml_command,
    is_multi_fragment_command,
    closing_tag_for,
)
from .correlator import PendingResponse, ResponseCorrelator
from .decoder import DecodeError, DecodeResult, StatusDecoder, update_status
from .serial_framer import SerialFramer
from .serializer import CommandSerializer, serialize_command
from .udp_framer import UdpFramer

__all__ = [
    "Framer",
    "normalize_command",
    "encode_command",
    "base_command",
    "is_xml_command",
    "is_multi_fragment_command",
    "closing_tag_for",
    "PendingResponse",
    "ResponseCorrelator",
    "DecodeError",
    "DecodeResult",
    "StatusDecoder",
    "update_status",
    "SerialFramer",
    "CommandSerializer",
    "serialize_command",
    "UdpFramer",
]
