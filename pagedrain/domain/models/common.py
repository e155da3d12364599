"""Defines common Value Objects used across different domain contexts.

These objects represent simple values like offsets, queue names and job
identifiers, ensuring consistency and type safety.
"""

from typing import Any, Awaitable, Callable, Dict, List, NewType, Optional, TypedDict

# === Pagination ===

Offset = NewType("Offset", int)              # Running cursor into the source
PageSize = NewType("PageSize", int)          # Limit passed to each page fetch

# A page fetch returns the next page, or an empty page / None at end-of-source.
PageFetch = Callable[[int, int], Awaitable[Optional[List[Any]]]]
PageHandler = Callable[[List[Any]], Awaitable[None]]

# === Job Queue Context ===
QueueName = NewType("QueueName", str)
JobName = NewType("JobName", str)            # Dotted path of the worker function
JobId = NewType("JobId", str)
JobPayload = NewType("JobPayload", Dict[str, Any])


class BackoffPolicy(TypedDict):
    """Value Object representing retry backoff configuration."""
    max_retries: int
    base_delay: float


class JobRetention(TypedDict):
    """How long finished and failed jobs stay in the queue backend (seconds)."""
    result_ttl: int
    failure_ttl: int
