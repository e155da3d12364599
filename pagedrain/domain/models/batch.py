"""Transient state of a single drain invocation."""

from dataclasses import dataclass
from typing import Optional

STOP_EXHAUSTED = "exhausted"
STOP_CANCELLED = "cancelled"
STOP_MAX_PAGES = "max_pages"


@dataclass(frozen=True)
class DrainOptions:
    """Options recognised by process_in_batches.

    Attributes:
        batch_size: Page size passed to every page fetch.
        max_concurrent_batches: Upper bound on handler tasks in flight.
        max_pages: Optional guard; stop after this many non-empty pages.
            None means drain until the source returns an empty page.
    """
    batch_size: int = 1000
    max_concurrent_batches: int = 3
    max_pages: Optional[int] = None

    def __post_init__(self):
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {self.batch_size}")
        if self.max_concurrent_batches < 1:
            raise ValueError(
                f"max_concurrent_batches must be positive, got {self.max_concurrent_batches}"
            )
        if self.max_pages is not None and self.max_pages < 1:
            raise ValueError(f"max_pages must be positive when set, got {self.max_pages}")


@dataclass
class DrainResult:
    """Summary returned once the drain loop and all handlers have finished."""
    pages_processed: int = 0
    items_processed: int = 0
    final_offset: int = 0
    fetch_calls: int = 0
    peak_in_flight: int = 0
    stop_reason: str = STOP_EXHAUSTED

    @property
    def exhausted(self) -> bool:
        return self.stop_reason == STOP_EXHAUSTED
