"""Exceptions raised for API misuse.

Transport problems are never raised; bridges report them as the TIMEOUT and
DISCONNECTED sentinels instead.
"""


class ScannerError(RuntimeError):
    """Base class for scanner SDK errors."""
    pass


class UnsupportedTransportError(ScannerError):
    """Raised when a bridge is requested for an unknown connection type."""
    def __init__(self, message, kind):
        super().__init__(message)
        self.kind = kind


class CommandError(ScannerError):
    """Raised when a command object cannot be serialized."""
    pass
