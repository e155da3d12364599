"""Job Queue Façade.

Redis-backed job enqueueing through rq. Jobs are executed by rq workers
elsewhere; this package only creates queues and enqueues jobs.
Bounded Context: Job Queueing
"""

from pagedrain.infrastructure.queue.connection import get_redis_connection, reset_redis_connection
from pagedrain.infrastructure.queue.queue_manager import FAILED_JOB_TTL, JOB_RETENTION, QueueManager

__all__ = [
    "get_redis_connection",
    "reset_redis_connection",
    "FAILED_JOB_TTL",
    "JOB_RETENTION",
    "QueueManager",
]
