"""Queue manager backed by rq.

Creates named rq queues once and enqueues jobs on them with fixed
retention: results of finished jobs are discarded immediately, failed
jobs are kept in the failed-job registry for inspection.
"""

import logging
from typing import Dict, Optional

from redis import Redis
from rq import Queue

from pagedrain.domain.interfaces.job_queue import JobQueue
from pagedrain.domain.models.common import JobId, JobName, JobPayload, JobRetention, QueueName
from pagedrain.infrastructure.queue.connection import get_redis_connection

logger = logging.getLogger(__name__)

FAILED_JOB_TTL = 365 * 24 * 60 * 60  # one year, rq's failed-registry default

JOB_RETENTION = JobRetention(
    result_ttl=0,               # remove on complete
    failure_ttl=FAILED_JOB_TTL,  # keep on fail
)


class QueueManager(JobQueue):
    """Creates rq queues by name and enqueues jobs on them."""

    def __init__(self, connection: Optional[Redis] = None):
        """Initializes the manager.

        Args:
            connection: Redis client to use. Defaults to the shared
                connection from get_redis_connection(), resolved lazily.
        """
        self._connection = connection
        self._queues: Dict[QueueName, Queue] = {}

    @property
    def connection(self) -> Redis:
        if self._connection is None:
            self._connection = get_redis_connection()
        return self._connection

    def create_queue(self, name: QueueName) -> Queue:
        """Returns the queue called `name`, constructing it only once."""
        queue = self._queues.get(name)
        if queue is None:
            queue = Queue(name, connection=self.connection)
            self._queues[name] = queue
            logger.info(f"Created queue '{name}'")
        return queue

    def enqueue_job(self, queue_name: QueueName, job_name: JobName, payload: JobPayload) -> JobId:
        """Enqueues `job_name` (dotted path of the worker function) with `payload`.

        Returns:
            The rq job id.
        """
        queue = self.create_queue(queue_name)
        job = queue.enqueue(job_name, payload, **JOB_RETENTION)
        logger.debug(f"Enqueued job '{job_name}' on '{queue_name}' as {job.id}")
        return JobId(job.id)

    def reset(self) -> None:
        """Forgets every queue handle created so far."""
        self._queues.clear()
