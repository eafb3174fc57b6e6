"""
Queue Service Interface
Abstract capability set consumed by the consumer and the redrive engine
"""

from abc import ABC, abstractmethod
from typing import List

from queueops.models.batch import BatchResult, DeleteEntry, SendEntry
from queueops.models.message import Message


class QueueService(ABC):
    """
    Abstract base class for queue services

    All queue services must implement:
    - receive(): Fetch up to max_messages deliveries, hiding them for visibility_timeout
    - send_batch(): Enqueue several messages in one request
    - delete_batch(): Delete several deliveries in one request

    Service-level faults raise QueueServiceError. Entry-level rejections
    are reported in the returned BatchResult.
    """

    @abstractmethod
    def receive(
        self,
        queue_url: str,
        max_messages: int,
        visibility_timeout: int,
        wait_time_seconds: int,
    ) -> List[Message]:
        """
        Receive messages from a queue

        Args:
            queue_url: Queue to receive from
            max_messages: Upper bound on messages returned
            visibility_timeout: Seconds the received messages stay hidden
            wait_time_seconds: Seconds to wait for messages to become available

        Returns:
            Received messages (possibly fewer than max_messages, possibly none)

        Raises:
            QueueServiceError: If the service rejects the request
        """
        pass

    @abstractmethod
    def send_batch(self, queue_url: str, entries: List[SendEntry]) -> BatchResult:
        """
        Send several messages to a queue

        Args:
            queue_url: Destination queue
            entries: Entries to send

        Returns:
            BatchResult keyed by SendEntry.entry_id

        Raises:
            QueueServiceError: If the service rejects the request
        """
        pass

    @abstractmethod
    def delete_batch(self, queue_url: str, entries: List[DeleteEntry]) -> BatchResult:
        """
        Delete several deliveries from a queue

        Args:
            queue_url: Queue holding the deliveries
            entries: Entries to delete

        Returns:
            BatchResult keyed by DeleteEntry.entry_id

        Raises:
            QueueServiceError: If the service rejects the request
        """
        pass
