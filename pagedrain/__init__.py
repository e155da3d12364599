"""pagedrain: drain paginated sources with bounded concurrency.

Public entry points for embedding the drainer and the retry executor
inside a larger pipeline.
"""

from pagedrain.core.batch_processor import MAX_CONCURRENT_BATCHES, DEFAULT_BATCH_SIZE, process_in_batches
from pagedrain.domain.models.batch import DrainOptions, DrainResult
from pagedrain.infrastructure.resilience.retry import retry_with_backoff, with_retry

__all__ = [
    "DEFAULT_BATCH_SIZE",
    "MAX_CONCURRENT_BATCHES",
    "DrainOptions",
    "DrainResult",
    "process_in_batches",
    "retry_with_backoff",
    "with_retry",
]

__version__ = "0.1.0"
