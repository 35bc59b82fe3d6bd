"""Scanner SDK - remote control of Uniden SDS-series scanners over serial or UDP."""

from .models import (
    TIMEOUT,
    DISCONNECTED,
    is_sentinel,
    ScreenKind,
    ScannerStatus,
    KeyMode,
    ModelQuery,
    StatusQuery,
    KeyPress,
    MuteCommand,
    RecordCommand,
    FrequencyEntry,
    ListQuery,
    Command,
)
from .errors import ScannerError, UnsupportedTransportError, CommandError
from .bridge import (
    ScannerBridge,
    SerialScannerBridge,
    UdpScannerBridge,
    TransportKind,
    create_bridge,
)
from .protocol import StatusDecoder, DecodeResult, DecodeError, update_status
from .monitor import ResponseHandler, StatusPoller, PollOutcome

__all__ = [
    "TIMEOUT",
    "DISCONNECTED",
    "is_sentinel",
    "ScreenKind",
    "ScannerStatus",
    "KeyMode",
    "ModelQuery",
    "StatusQuery",
    "KeyPress",
    "MuteCommand",
    "RecordCommand",
    "FrequencyEntry",
    "ListQuery",
    "Command",
    "ScannerError",
    "UnsupportedTransportError",
    "CommandError",
    "ScannerBridge",
    "SerialScannerBridge",
    "UdpScannerBridge",
    "TransportKind",
    "create_bridge",
    "StatusDecoder",
    "DecodeResult",
    "DecodeError",
    "update_status",
    "ResponseHandler",
    "StatusPoller",
    "PollOutcome",
]
