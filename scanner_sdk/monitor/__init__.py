"""Status pipeline: traffic observation, decoding and polling."""

from .poller import PollOutcome, StatusPoller
from .response_handler import ResponseHandler

__all__ = [
    "PollOutcome",
    "StatusPoller",
    "ResponseHandler",
]
