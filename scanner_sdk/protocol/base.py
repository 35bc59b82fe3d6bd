"""Abstract base class for inbound message framers.

A framer turns whatever the transport delivers (a character stream or a
sequence of datagrams) into complete messages, notifies message listeners,
and resolves the correlator's pending slot.
"""
from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Tuple

from .correlator import PendingResponse, ResponseCorrelator

logger = logging.getLogger(__name__)

# (message to publish or None, payload to resolve with or None)
FramedEvent = Tuple[Optional[str], Optional[str]]


class Framer(ABC):
    """Shared plumbing for serial and UDP framers.

    Framing state is only touched by the receive loop and by
    expect_response(), both under the framer lock. Listeners are invoked
    outside the lock, before the pending slot is resolved, so a listener has
    seen a message by the time the waiting caller gets it.
    """

    def __init__(self, correlator: Optional[ResponseCorrelator] = None):
        self._correlator = correlator or ResponseCorrelator()
        self._lock = threading.Lock()

        self._message_callbacks: List[Callable[[str], None]] = []
        self._callback_lock = threading.Lock()

    @property
    def correlator(self) -> ResponseCorrelator:
        return self._correlator

    def expect_response(self, pending: PendingResponse) -> None:
        """Reset assembly state for a new command and register its pending slot."""
        with self._lock:
            self._begin_response(pending)
            self._correlator.expect_response(pending)

    def subscribe_message(self, callback: Callable[[str], None]) -> Callable[[], None]:
        """Subscribe to complete inbound messages.

        Returns:
            Unsubscribe function
        """
        with self._callback_lock:
            self._message_callbacks.append(callback)

        def unsubscribe():
            with self._callback_lock:
                if callback in self._message_callbacks:
                    self._message_callbacks.remove(callback)

        return unsubscribe

    def abandon(self, pending: PendingResponse) -> None:
        """Give up on a pending response after its wait timed out.

        Releases the slot and clears partially assembled data, unless a newer
        command has already registered its own pending response.
        """
        with self._lock:
            current = self._correlator.pending
            if current is not None and current is not pending:
                return
            self._correlator.discard(pending)
            self._clear()

    def reset(self) -> None:
        """Drop all partially assembled data."""
        with self._lock:
            self._clear()

    @abstractmethod
    def _begin_response(self, pending: PendingResponse) -> None:
        """Prepare assembly state for the reply to a new command (lock held)."""
        pass

    @abstractmethod
    def _clear(self) -> None:
        """Clear all assembly state (lock held)."""
        pass

    def _dispatch(self, events: List[FramedEvent]) -> None:
        """Publish framed messages, then resolve the pending slot."""
        for message, payload in events:
            if message is not None:
                self._notify_message(message)
            if payload is not None:
                self._correlator.resolve(payload)

    def _notify_message(self, message: str) -> None:
        with self._callback_lock:
            callbacks = list(self._message_callbacks)

        for callback in callbacks:
            try:
                callback(message)
            except Exception as e:
                logger.error(f"Error in message callback: {e}")
