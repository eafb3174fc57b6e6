"""
Pytest Fixtures and Test Configuration
Provides an in-memory queue service with visibility-timeout semantics
"""

import itertools
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

import pytest

from queueops.errors import QueueServiceError
from queueops.models.batch import BatchEntryFailure, BatchResult, DeleteEntry, SendEntry
from queueops.models.message import Message
from queueops.queues.base import QueueService

DLQ_URL = "https://sqs.us-east-1.amazonaws.com/123456789012/orders-dlq"
MAIN_QUEUE_URL = "https://sqs.us-east-1.amazonaws.com/123456789012/orders"


# ============================================================================
# In-memory queue service
# ============================================================================


@dataclass
class StoredMessage:
    """A message held by the in-memory queue"""

    message_id: str
    body: Optional[str]
    message_attributes: Dict[str, Any] = field(default_factory=dict)
    receipt_handle: Optional[str] = None
    visible_at: float = 0.0
    receive_count: int = 0


class InMemoryQueueService(QueueService):
    """
    QueueService keeping queues in memory

    Received messages stay hidden until the clock passes their visibility
    timeout; advance() moves the clock. Every call is recorded in `calls`
    as (operation, queue_url).
    """

    def __init__(self):
        self.queues: Dict[str, List[StoredMessage]] = defaultdict(list)
        self.clock = 0.0
        self.calls: List[Tuple[str, str]] = []
        self.receive_requests: List[Dict[str, Any]] = []
        self.sent_entries: List[SendEntry] = []
        self.deleted_entries: List[DeleteEntry] = []
        self.send_batch_sizes: List[int] = []
        self.unreachable: set = set()
        self.reject_send: Callable[[SendEntry], bool] = lambda entry: False
        self.reject_delete: Callable[[DeleteEntry], bool] = lambda entry: False
        self._call_limits: Dict[Tuple[str, str], int] = {}
        self._call_counts: Dict[Tuple[str, str], int] = defaultdict(int)
        self._ids = itertools.count(1)

    # -- test helpers -------------------------------------------------------

    def add_messages(
        self,
        queue_url: str,
        bodies: Iterable[Optional[str]],
        message_attributes: Optional[Dict[str, Any]] = None,
    ) -> List[str]:
        ids = []
        for body in bodies:
            message_id = f"msg-{next(self._ids)}"
            self.queues[queue_url].append(
                StoredMessage(
                    message_id=message_id,
                    body=body,
                    message_attributes=dict(message_attributes or {}),
                )
            )
            ids.append(message_id)
        return ids

    def advance(self, seconds: float) -> None:
        self.clock += seconds

    def depth(self, queue_url: str) -> int:
        return len(self.queues[queue_url])

    def bodies(self, queue_url: str) -> List[Optional[str]]:
        return [m.body for m in self.queues[queue_url]]

    def message_ids(self, queue_url: str) -> List[str]:
        return [m.message_id for m in self.queues[queue_url]]

    def fail_after(self, operation: str, queue_url: str, calls: int) -> None:
        """Make `operation` on `queue_url` raise after `calls` successful calls"""
        self._call_limits[(operation, queue_url)] = calls

    def operations(self) -> List[str]:
        return [operation for operation, _ in self.calls]

    def _check(self, operation: str, queue_url: str) -> None:
        self.calls.append((operation, queue_url))
        key = (operation, queue_url)
        self._call_counts[key] += 1

        if queue_url in self.unreachable:
            raise QueueServiceError(
                operation, queue_url, "AWS.SimpleQueueService.NonExistentQueue", "unreachable"
            )
        limit = self._call_limits.get(key)
        if limit is not None and self._call_counts[key] > limit:
            raise QueueServiceError(operation, queue_url, "AccessDenied", "access denied")

    # -- QueueService -------------------------------------------------------

    def receive(
        self,
        queue_url: str,
        max_messages: int,
        visibility_timeout: int,
        wait_time_seconds: int,
    ) -> List[Message]:
        self._check("receive", queue_url)
        self.receive_requests.append(
            {
                "max_messages": max_messages,
                "visibility_timeout": visibility_timeout,
                "wait_time_seconds": wait_time_seconds,
            }
        )

        visible = [m for m in self.queues[queue_url] if m.visible_at <= self.clock]
        received = []
        for stored in visible[:max_messages]:
            stored.receive_count += 1
            stored.receipt_handle = f"{stored.message_id}-rh-{stored.receive_count}"
            stored.visible_at = self.clock + visibility_timeout
            received.append(
                Message(
                    message_id=stored.message_id,
                    body=stored.body,
                    receipt_handle=stored.receipt_handle,
                    message_attributes=dict(stored.message_attributes),
                )
            )
        return received

    def send_batch(self, queue_url: str, entries: List[SendEntry]) -> BatchResult:
        if not entries:
            return BatchResult()
        self._check("send_batch", queue_url)
        self.send_batch_sizes.append(len(entries))

        result = BatchResult()
        for entry in entries:
            self.sent_entries.append(entry)
            if self.reject_send(entry):
                result.failed.append(
                    BatchEntryFailure(entry.entry_id, "InternalError", "send rejected")
                )
                continue
            self.add_messages(queue_url, [entry.body], entry.message_attributes)
            result.successful.append(entry.entry_id)
        return result

    def delete_batch(self, queue_url: str, entries: List[DeleteEntry]) -> BatchResult:
        if not entries:
            return BatchResult()
        self._check("delete_batch", queue_url)

        result = BatchResult()
        queue = self.queues[queue_url]
        for entry in entries:
            self.deleted_entries.append(entry)
            stored = next((m for m in queue if m.receipt_handle == entry.receipt_handle), None)
            if stored is None or self.reject_delete(entry):
                result.failed.append(
                    BatchEntryFailure(
                        entry.entry_id,
                        "ReceiptHandleIsInvalid",
                        "receipt handle is invalid",
                        sender_fault=True,
                    )
                )
                continue
            queue.remove(stored)
            result.successful.append(entry.entry_id)
        return result


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def queue_service() -> InMemoryQueueService:
    """Fresh in-memory queue service"""
    return InMemoryQueueService()


@pytest.fixture
def dlq_url() -> str:
    return DLQ_URL


@pytest.fixture
def main_queue_url() -> str:
    return MAIN_QUEUE_URL


@pytest.fixture
def sequential_tokens() -> Callable[[], str]:
    """Deterministic request token generator: token-1, token-2, ..."""
    counter = itertools.count(1)
    return lambda: f"token-{next(counter)}"


@pytest.fixture
def redrive_env(monkeypatch):
    """Environment variables required by the redrive engine"""
    monkeypatch.setenv("AWS_REGION", "us-east-1")
    monkeypatch.setenv("DLQ_URL", DLQ_URL)
    monkeypatch.setenv("SOURCE_QUEUE_URL", MAIN_QUEUE_URL)
    monkeypatch.delenv("AWS_ENDPOINT_URL", raising=False)
    monkeypatch.setenv("REDRIVE_WAIT_TIME_SECONDS", "0")
    return monkeypatch


def make_event(bodies: Iterable[Optional[str]]) -> Dict[str, Any]:
    """Build a queue trigger event with one record per body"""
    return {
        "Records": [
            {
                "messageId": f"record-{i}",
                "receiptHandle": f"record-{i}-rh",
                "body": body,
                "eventSource": "aws:sqs",
            }
            for i, body in enumerate(bodies, start=1)
        ]
    }


@pytest.fixture
def event_factory() -> Callable[[Iterable[Optional[str]]], Dict[str, Any]]:
    """Builder for queue trigger events"""
    return make_event
