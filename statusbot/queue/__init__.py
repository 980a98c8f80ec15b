"""Serial job queue."""

from statusbot.queue.job_queue import JobQueue, JobRunner, QueueTicket

__all__ = ["JobQueue", "JobRunner", "QueueTicket"]
