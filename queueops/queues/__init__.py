"""
Queue service interface and implementations
"""

from queueops.queues.base import QueueService
from queueops.queues.sqs import SQSQueueService

__all__ = ["QueueService", "SQSQueueService"]
