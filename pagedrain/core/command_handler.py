"""Command Handler: Orchestrates CLI command execution.

Receives commands from the main entry point (main.py), builds the page
fetch and handler callables for the drainer, wraps them in retry, and
reports results through the UserInterface.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from pagedrain.core.batch_processor import process_in_batches
from pagedrain.domain.interfaces.job_queue import JobQueue
from pagedrain.domain.interfaces.user_interface import UserInterface
from pagedrain.domain.models.batch import DrainOptions, DrainResult
from pagedrain.domain.models.common import BackoffPolicy, JobId, JobName, JobPayload, QueueName
from pagedrain.infrastructure.resilience.retry import with_retry
from pagedrain.infrastructure.sources.jsonl_source import JsonLinesPageSource

logger = logging.getLogger(__name__)


class CommandHandler:
    """Handles incoming commands and delegates to the drainer and queue façade."""

    def __init__(self, ui: UserInterface, job_queue: Optional[JobQueue] = None):
        """Initializes the CommandHandler.

        Args:
            ui: Where progress, summaries and errors are shown.
            job_queue: Queue façade used when a drain enqueues pages, and by
                the 'enqueue' command. Optional for dry-run drains.
        """
        self.ui = ui
        self.job_queue = job_queue

    async def handle_drain(
        self,
        source_path: str,
        options: DrainOptions,
        backoff: BackoffPolicy,
        queue_name: Optional[str] = None,
        job_name: Optional[str] = None,
    ) -> DrainResult:
        """Handles the 'drain' command for a JSON-lines file.

        Each page fetch is retried with backoff. With `queue_name` every page
        becomes one job carrying {"offset": ..., "items": [...]}; otherwise
        pages are only counted.
        """
        logger.info(f"Handling 'drain' for {source_path} (queue={queue_name or 'dry-run'})")
        try:
            if (queue_name is None) != (job_name is None):
                raise ValueError("--queue and --job must be given together")

            source = JsonLinesPageSource(Path(source_path))
            # Malformed records fail the same way every time; only I/O errors are retried.
            page_fetch = with_retry(
                source.fetch_page, backoff["max_retries"], backoff["base_delay"],
                retryable_exceptions=(OSError,),
            )

            if queue_name is not None:
                handler = self._enqueue_handler(queue_name, job_name, backoff)
            else:
                self.ui.display_info(f"Dry run: counting records in {source_path}")
                handler = _count_only

            result = await process_in_batches(page_fetch, handler, options)
        except Exception as e:
            logger.error(f"Drain of {source_path} failed: {e}", exc_info=True)
            self.ui.display_error(f"Drain failed: {e}")
            raise

        if not result.exhausted:
            self.ui.display_warning(f"Drain stopped early ({result.stop_reason}) at offset {result.final_offset}.")
        self.ui.display_drain_summary(result, title=f"Drain summary: {source_path}")
        return result

    def _enqueue_handler(self, queue_name: str, job_name: str, backoff: BackoffPolicy):
        if self.job_queue is None:
            raise RuntimeError("No job queue configured")
        job_queue = self.job_queue
        # Offsets are assigned in fetch order, i.e. the order handlers start.
        cursor = {"offset": 0}

        enqueue = with_retry(asyncio.to_thread, backoff["max_retries"], backoff["base_delay"])

        async def enqueue_page(items: List[Any]) -> None:
            payload = JobPayload({"offset": cursor["offset"], "items": items})
            cursor["offset"] += len(items)
            job_id = await enqueue(job_queue.enqueue_job, QueueName(queue_name), JobName(job_name), payload)
            logger.debug(f"Page at offset {payload['offset']} enqueued as job {job_id}")

        return enqueue_page

    async def handle_enqueue(self, queue_name: str, job_name: str, payload_json: Optional[str]) -> JobId:
        """Handles the 'enqueue' command: one job with a JSON object payload."""
        logger.info(f"Handling 'enqueue' of '{job_name}' on '{queue_name}'")
        try:
            if self.job_queue is None:
                raise RuntimeError("No job queue configured")
            payload: Dict[str, Any] = json.loads(payload_json) if payload_json else {}
            if not isinstance(payload, dict):
                raise ValueError("Payload must be a JSON object")
            job_id = await asyncio.to_thread(
                self.job_queue.enqueue_job, QueueName(queue_name), JobName(job_name), JobPayload(payload)
            )
        except Exception as e:
            logger.error(f"Enqueue of '{job_name}' failed: {e}", exc_info=True)
            self.ui.display_error(f"Enqueue failed: {e}")
            raise
        self.ui.display_info(f"Enqueued '{job_name}' on '{queue_name}' as job {job_id}")
        return job_id


async def _count_only(items: List[Any]) -> None:
    logger.debug(f"Dry run: page of {len(items)} records")
