"""Structured reporting of recoverable cart failures"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class CartEventKind(str, Enum):
    """Kind of degradation the cart recovered from"""
    HYDRATION_FAILED = "hydration_failed"
    PERSIST_FAILED = "persist_failed"
    READ_FAILED = "read_failed"
    INVALID_INPUT = "invalid_input"
    LISTENER_FAILED = "listener_failed"
    ACKNOWLEDGE_FAILED = "acknowledge_failed"


@dataclass
class CartEvent:
    """A recoverable failure, reported instead of raised"""
    kind: CartEventKind
    message: str
    error: Optional[BaseException] = None
    context: dict = field(default_factory=dict)


class CartEventReporter(ABC):
    """Receives cart events"""

    @abstractmethod
    def report(self, event: CartEvent) -> None:
        ...


class LoggingEventReporter(CartEventReporter):
    """Default reporter: writes events to the log"""

    def __init__(self, log: Optional[logging.Logger] = None):
        self._log = log or logger

    def report(self, event: CartEvent) -> None:
        self._log.warning(
            f"{event.kind.value}: {event.message}",
            exc_info=event.error,
            extra={"cart_event": event.kind.value},
        )
