"""
DLQ Redrive Engine
Moves messages from a dead-letter queue back to the main queue in bounded
batches until the dead-letter queue is empty
"""

import time
from typing import Callable, Dict, List, Optional
from uuid import uuid4

import structlog

from queueops.config.settings import AppSettings
from queueops.errors import QueueServiceError, RedriveError
from queueops.models.batch import BatchResult, DeleteEntry, SendEntry
from queueops.models.message import Message
from queueops.models.redrive import BatchRelocation, RedriveState, RedriveSummary
from queueops.observability.logging import (
    bind_context,
    log_redrive_completed,
    log_redrive_iteration,
)
from queueops.observability.metrics import (
    increment_entry_failures,
    increment_messages_redriven,
    observe_redrive_iteration,
)
from queueops.observability.tracing import trace_redrive_iteration
from queueops.queues.base import QueueService
from queueops.queues.sqs import SQSQueueService

logger = structlog.get_logger(__name__)

MAX_BATCH_SIZE = 10

# Total payload accepted by one send_message_batch request
MAX_BATCH_PAYLOAD_BYTES = 262_144


def random_token() -> str:
    """Fresh collision-resistant request token"""
    return str(uuid4())


def entry_payload_size(entry: SendEntry) -> int:
    """Bytes an entry counts against the batch payload limit (body plus attributes)"""
    size = len((entry.body or "").encode("utf-8"))
    for name, attribute in (entry.message_attributes or {}).items():
        size += len(name.encode("utf-8")) + len(attribute.get("DataType", "").encode("utf-8"))
        value = attribute.get("StringValue", attribute.get("BinaryValue", b""))
        size += len(value.encode("utf-8") if isinstance(value, str) else value)
    return size


def split_by_payload(entries: List[SendEntry], limit: int) -> List[List[SendEntry]]:
    """
    Split send entries into consecutive chunks whose payload stays within limit

    An entry larger than limit on its own still gets a chunk of its own.
    """
    chunks: List[List[SendEntry]] = []
    current: List[SendEntry] = []
    current_size = 0
    for entry in entries:
        size = entry_payload_size(entry)
        if current and current_size + size > limit:
            chunks.append(current)
            current, current_size = [], 0
        current.append(entry)
        current_size += size
    if current:
        chunks.append(current)
    return chunks


class RedriveEngine:
    """
    Redrives messages from a DLQ to a destination queue

    Each iteration receives up to batch_size messages, sends them to the
    destination in one batch (split when the bodies exceed the batch payload
    limit), then deletes from the DLQ only the messages the destination
    confirmed. The loop ends on the first empty receive.
    A message whose send fails is never deleted; it becomes visible again
    after the visibility timeout and is retried by a later invocation.
    """

    def __init__(
        self,
        queue_service: QueueService,
        dlq_url: str,
        destination_url: str,
        batch_size: int = MAX_BATCH_SIZE,
        visibility_timeout: int = 30,
        wait_time_seconds: int = 5,
        token_factory: Callable[[], str] = random_token,
        max_payload_bytes: int = MAX_BATCH_PAYLOAD_BYTES,
    ):
        """
        Initialize redrive engine

        Args:
            queue_service: Queue service for both queues
            dlq_url: Dead-letter queue to drain
            destination_url: Queue to redrive messages to
            batch_size: Messages per receive (1-10)
            visibility_timeout: Seconds received messages stay hidden; must
                cover one batch's send and delete
            wait_time_seconds: Receive wait for messages to become available
            token_factory: Generates the request token for each send entry
            max_payload_bytes: Payload limit of one batched send; larger
                batches are sent in several requests
        """
        if not 1 <= batch_size <= MAX_BATCH_SIZE:
            raise ValueError(f"batch_size must be between 1 and {MAX_BATCH_SIZE}")
        if max_payload_bytes < 1:
            raise ValueError("max_payload_bytes must be positive")

        self.queue_service = queue_service
        self.dlq_url = dlq_url
        self.destination_url = destination_url
        self.batch_size = batch_size
        self.visibility_timeout = visibility_timeout
        self.wait_time_seconds = wait_time_seconds
        self.token_factory = token_factory
        self.max_payload_bytes = max_payload_bytes
        self.state = RedriveState.IDLE

    @classmethod
    def from_settings(
        cls,
        settings: AppSettings,
        queue_service: Optional[QueueService] = None,
        token_factory: Callable[[], str] = random_token,
    ) -> "RedriveEngine":
        """
        Build an engine from validated settings

        Args:
            settings: Loaded configuration
            queue_service: Queue service (defaults to SQS in the configured region)
            token_factory: Request token generator

        Returns:
            RedriveEngine instance
        """
        if queue_service is None:
            queue_service = SQSQueueService(
                region_name=settings.queues.aws_region,
                endpoint_url=settings.queues.endpoint_url,
            )

        return cls(
            queue_service=queue_service,
            dlq_url=settings.queues.dlq_url,
            destination_url=settings.queues.source_queue_url,
            batch_size=settings.redrive.batch_size,
            visibility_timeout=settings.redrive.visibility_timeout_seconds,
            wait_time_seconds=settings.redrive.wait_time_seconds,
            token_factory=token_factory,
            max_payload_bytes=settings.redrive.max_batch_payload_bytes,
        )

    def run(self, invocation_id: Optional[str] = None) -> RedriveSummary:
        """
        Drain the DLQ until a receive comes back empty

        Args:
            invocation_id: Correlation id for logs (generated if None)

        Returns:
            Summary of the invocation

        Raises:
            RedriveError: On a service-level fault or unexpected error.
                Relocations from earlier iterations stay committed and
                are reflected in the error's summary.
        """
        summary = RedriveSummary(invocation_id=invocation_id or str(uuid4()))
        bind_context(invocation_id=summary.invocation_id)

        logger.info(
            "Starting redrive",
            dlq_url=self.dlq_url,
            destination_url=self.destination_url,
            batch_size=self.batch_size,
        )

        self.state = RedriveState.DRAINING
        try:
            while self.state != RedriveState.SOURCE_EMPTY:
                self._iterate(summary)

        except QueueServiceError as e:
            self._fail(summary, str(e))
            raise RedriveError(
                f"Failed to redrive messages due to queue service error: {e}", summary
            ) from e
        except Exception as e:
            self._fail(summary, f"{type(e).__name__}: {e}")
            raise RedriveError(
                f"An unexpected error occurred during message redrive: {e}", summary
            ) from e

        summary.state = RedriveState.SOURCE_EMPTY
        self.state = RedriveState.IDLE
        log_redrive_completed(logger, summary)
        return summary

    def _iterate(self, summary: RedriveSummary) -> None:
        iteration = summary.iterations + 1

        with trace_redrive_iteration(summary.invocation_id, iteration, self.dlq_url):
            started = time.monotonic()
            messages = self.queue_service.receive(
                self.dlq_url,
                max_messages=self.batch_size,
                visibility_timeout=self.visibility_timeout,
                wait_time_seconds=self.wait_time_seconds,
            )

            if not messages:
                logger.info("No more messages found in the dead-letter queue")
                self.state = RedriveState.SOURCE_EMPTY
                return

            self.state = RedriveState.DRAINING
            relocation = self.relocate_batch(messages, iteration)
            summary.record(relocation)
            self.state = RedriveState.BATCH_RELOCATED

        log_redrive_iteration(logger, relocation)
        observe_redrive_iteration(time.monotonic() - started)
        increment_messages_redriven(relocation.relocated)
        if relocation.send_failures:
            increment_entry_failures("send", len(relocation.send_failures))
        if relocation.delete_failures:
            increment_entry_failures("delete", len(relocation.delete_failures))

    def relocate_batch(self, messages: List[Message], iteration: int = 1) -> BatchRelocation:
        """
        Send one received batch to the destination and delete the confirmed ones

        Args:
            messages: Messages received from the DLQ
            iteration: Iteration number for the record

        Returns:
            Record of what was sent and deleted

        Raises:
            QueueServiceError: If either batched call fails as a whole
        """
        by_token: Dict[str, Message] = {}
        send_entries = []
        for message in messages:
            token = self.token_factory()
            if token in by_token:
                raise ValueError(f"token_factory produced a duplicate token: {token}")
            by_token[token] = message
            send_entries.append(
                SendEntry(
                    entry_id=token,
                    body=message.body,
                    message_attributes=message.message_attributes,
                )
            )

        send_result = BatchResult()
        for chunk in split_by_payload(send_entries, self.max_payload_bytes):
            chunk_result = self.queue_service.send_batch(self.destination_url, chunk)
            send_result.successful.extend(chunk_result.successful)
            send_result.failed.extend(chunk_result.failed)

        # Only confirmed sends are deleted from the DLQ
        sent = [by_token[token] for token in send_result.successful if token in by_token]
        delete_entries = [
            DeleteEntry(entry_id=message.message_id, receipt_handle=message.receipt_handle)
            for message in sent
        ]
        delete_result = self.queue_service.delete_batch(self.dlq_url, delete_entries)

        sent_ids = {message.message_id for message in sent}
        return BatchRelocation(
            iteration=iteration,
            received=len(messages),
            sent_message_ids=[message.message_id for message in sent],
            send_failures=list(send_result.failed),
            deleted_message_ids=[mid for mid in delete_result.successful if mid in sent_ids],
            delete_failures=list(delete_result.failed),
        )

    def _fail(self, summary: RedriveSummary, error: str) -> None:
        self.state = RedriveState.IDLE
        summary.state = RedriveState.FAILED
        summary.error = error
        log_redrive_completed(logger, summary)

