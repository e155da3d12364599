"""Interface for job-queue façades.

Defines how pipeline code hands work to an external queueing system
without knowing how jobs are stored, scheduled or executed.
"""

import abc
from typing import Any

from pagedrain.domain.models.common import JobId, JobName, JobPayload, QueueName


class JobQueue(abc.ABC):
    """Abstract Base Class for enqueueing background jobs."""

    @abc.abstractmethod
    def create_queue(self, name: QueueName) -> Any:
        """Returns the handle for queue `name`, creating it on first use.

        Repeated calls with the same name must return the same handle.
        """
        pass

    @abc.abstractmethod
    def enqueue_job(self, queue_name: QueueName, job_name: JobName, payload: JobPayload) -> JobId:
        """Enqueues `job_name` with `payload` on `queue_name`.

        Returns:
            The identifier assigned to the job by the queue backend.
        """
        pass
