"""Domain Events related to draining pages and retrying operations.

Events are plain dataclasses handed to an optional listener callable; the
emitting code also logs them at DEBUG level.
"""

from dataclasses import dataclass, field
import logging
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)


@dataclass
class DomainEvent:
    """Marker base class for domain events."""
    pass


EventListener = Callable[[DomainEvent], None]

# --- Drain Events ---

@dataclass
class PageFetched(DomainEvent):
    """A non-empty page was returned by the page fetch."""
    offset: int
    size: int
    timestamp: float = field(default_factory=time.time)

@dataclass
class BatchStarted(DomainEvent):
    """A handler task was started for the page at `offset`."""
    offset: int
    size: int
    in_flight: int
    timestamp: float = field(default_factory=time.time)

@dataclass
class BatchCompleted(DomainEvent):
    """A handler task finished successfully."""
    offset: int
    size: int
    latency_ms: float
    timestamp: float = field(default_factory=time.time)

@dataclass
class BatchFailed(DomainEvent):
    """A handler task raised; the error surfaces when the task is reaped."""
    offset: int
    size: int
    error_type: str
    error_message: str
    timestamp: float = field(default_factory=time.time)

@dataclass
class DrainFinished(DomainEvent):
    """The drain loop stopped fetching and every handler completed."""
    pages: int
    items: int
    stop_reason: str
    timestamp: float = field(default_factory=time.time)

# --- Retry Events ---

@dataclass
class RetryScheduled(DomainEvent):
    """A failed attempt will be retried after `delay_seconds`."""
    attempt_number: int
    delay_seconds: float
    error_type: str
    timestamp: float = field(default_factory=time.time)

@dataclass
class RetriesExhausted(DomainEvent):
    """The final attempt failed; its error is re-raised to the caller."""
    attempts: int
    error_type: str
    error_message: str
    timestamp: float = field(default_factory=time.time)


def dispatch_event(event: DomainEvent, listener: Optional[EventListener] = None) -> None:
    """Logs the event and forwards it to `listener` when one is given."""
    logger.debug(f"EVENT: {event}")
    if listener is not None:
        listener(event)
