"""Bounded batch drainer.

Keeps fetching pages from a caller-supplied `page_fetch(offset, limit)`
until it returns an empty page, handing each page to `handler` as its own
task. At most `max_concurrent_batches` handlers run at once; fetches are
strictly sequential, so read pressure stays decoupled from processing
pressure. Rate limiting, if any, is applied by the caller around
`page_fetch`.

Failure timing is asymmetric: a page-fetch error propagates at once without
waiting for running handlers, while a handler error surfaces only when its
task is reaped (at the throttle point or the final wait). Running handlers
are never cancelled by the drainer.

Without `max_pages` or a `cancel_event`, a source that never returns an
empty page keeps the drain running forever.
"""

import asyncio
import logging
import time
from typing import Any, List, Optional

from pagedrain.domain.events.batch_events import (
    BatchCompleted, BatchFailed, BatchStarted, DrainFinished, EventListener, PageFetched,
    dispatch_event
)
from pagedrain.domain.models.batch import (
    STOP_CANCELLED, STOP_EXHAUSTED, STOP_MAX_PAGES, DrainOptions, DrainResult
)
from pagedrain.domain.models.common import PageFetch, PageHandler
from pagedrain.infrastructure.concurrency.task_pool import BoundedTaskPool

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 1000
MAX_CONCURRENT_BATCHES = 3


async def process_in_batches(
    page_fetch: PageFetch,
    handler: PageHandler,
    options: Optional[DrainOptions] = None,
    *,
    cancel_event: Optional[asyncio.Event] = None,
    on_event: Optional[EventListener] = None,
) -> DrainResult:
    """Drains `page_fetch` page by page, running `handler` on each page.

    Args:
        page_fetch: Async callable `(offset, limit) -> list`. An empty list or
            None ends the drain.
        handler: Async callable invoked once per non-empty page, in fetch
            order. Handlers may complete in any order.
        options: Page size, concurrency limit and optional page guard.
        cancel_event: When set, no further pages are fetched; handlers
            already running are awaited before returning.
        on_event: Optional listener for drain events.

    Returns:
        A DrainResult once fetching stopped and every handler finished.

    Raises:
        Exception: Whatever `page_fetch` raises, immediately; or the first
            handler failure observed while waiting on in-flight tasks.
    """
    options = options or DrainOptions(
        batch_size=DEFAULT_BATCH_SIZE, max_concurrent_batches=MAX_CONCURRENT_BATCHES
    )
    pool = BoundedTaskPool(options.max_concurrent_batches)
    result = DrainResult()
    offset = 0

    logger.info(
        f"Draining source: batch_size={options.batch_size}, "
        f"max_concurrent={options.max_concurrent_batches}, max_pages={options.max_pages or 'unbounded'}"
    )

    try:
        while True:
            if cancel_event is not None and cancel_event.is_set():
                logger.warning(f"Drain cancelled at offset {offset}; waiting for in-flight batches.")
                result.stop_reason = STOP_CANCELLED
                break
            if options.max_pages is not None and result.pages_processed >= options.max_pages:
                logger.warning(
                    f"Reached max_pages={options.max_pages} at offset {offset}; "
                    f"source may not be exhausted."
                )
                result.stop_reason = STOP_MAX_PAGES
                break

            result.fetch_calls += 1
            items = await page_fetch(offset, options.batch_size)
            if not items:
                logger.debug(f"Empty page at offset {offset}; source exhausted.")
                result.stop_reason = STOP_EXHAUSTED
                break

            size = len(items)
            dispatch_event(PageFetched(offset=offset, size=size), on_event)
            await pool.submit(_run_batch(handler, items, offset, on_event))
            dispatch_event(BatchStarted(offset=offset, size=size, in_flight=len(pool)), on_event)

            offset += size
            result.pages_processed += 1
            result.items_processed += size

            if pool.is_full:
                await pool.wait_for_any()

        await pool.wait_all()
    except BaseException:
        # Leftover handlers keep running; their failures are only logged.
        pool.abandon()
        raise

    result.final_offset = offset
    result.peak_in_flight = pool.peak_in_flight
    dispatch_event(
        DrainFinished(pages=result.pages_processed, items=result.items_processed, stop_reason=result.stop_reason),
        on_event,
    )
    logger.info(
        f"Drain finished ({result.stop_reason}): {result.pages_processed} pages, "
        f"{result.items_processed} items, {result.fetch_calls} fetches."
    )
    return result


async def _run_batch(
    handler: PageHandler,
    items: List[Any],
    offset: int,
    on_event: Optional[EventListener],
) -> None:
    """Runs one handler call, reporting its outcome. Errors are re-raised untouched."""
    start_time = time.perf_counter()
    try:
        await handler(items)
    except Exception as e:
        logger.debug(f"Batch at offset {offset} failed: {type(e).__name__}: {e}")
        dispatch_event(
            BatchFailed(offset=offset, size=len(items), error_type=type(e).__name__, error_message=str(e)),
            on_event,
        )
        raise
    latency_ms = (time.perf_counter() - start_time) * 1000
    dispatch_event(BatchCompleted(offset=offset, size=len(items), latency_ms=latency_ms), on_event)
