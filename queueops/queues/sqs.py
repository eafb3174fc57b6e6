"""
Amazon SQS Queue Service
boto3 implementation of the QueueService interface
"""

from typing import Any, Dict, List, Optional

import boto3
import structlog
from botocore.exceptions import BotoCoreError, ClientError

from queueops.errors import QueueServiceError
from queueops.models.batch import BatchEntryFailure, BatchResult, DeleteEntry, SendEntry
from queueops.models.message import Message
from queueops.queues.base import QueueService

logger = structlog.get_logger(__name__)


def _parse_batch_response(response: Dict[str, Any]) -> BatchResult:
    """
    Convert a Successful/Failed batch response into a BatchResult

    Args:
        response: SendMessageBatch or DeleteMessageBatch response

    Returns:
        BatchResult
    """
    return BatchResult(
        successful=[entry["Id"] for entry in response.get("Successful", [])],
        failed=[
            BatchEntryFailure(
                entry_id=entry["Id"],
                code=entry.get("Code", "Unknown"),
                message=entry.get("Message", ""),
                sender_fault=bool(entry.get("SenderFault", False)),
            )
            for entry in response.get("Failed", [])
        ],
    )


class SQSQueueService(QueueService):
    """
    Queue service backed by Amazon SQS

    Wraps a boto3 SQS client. botocore errors are translated to
    QueueServiceError so callers never handle vendor exceptions.
    """

    def __init__(
        self,
        region_name: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        client: Optional[Any] = None,
    ):
        """
        Initialize SQS queue service

        Args:
            region_name: AWS region of the queues
            endpoint_url: Custom endpoint (e.g. LocalStack), None for AWS
            client: Pre-built boto3 SQS client (overrides region/endpoint)
        """
        self._client = client or boto3.client(
            "sqs", region_name=region_name, endpoint_url=endpoint_url
        )

        logger.info("SQS queue service initialized", region=region_name, endpoint=endpoint_url)

    def _call(self, operation: str, queue_url: str, **params: Any) -> Dict[str, Any]:
        try:
            return getattr(self._client, operation)(QueueUrl=queue_url, **params)
        except ClientError as e:
            error = e.response.get("Error", {})
            raise QueueServiceError(
                operation=operation,
                queue_url=queue_url,
                code=error.get("Code", "ClientError"),
                message=error.get("Message", str(e)),
            ) from e
        except BotoCoreError as e:
            raise QueueServiceError(
                operation=operation,
                queue_url=queue_url,
                code=type(e).__name__,
                message=str(e),
            ) from e

    def receive(
        self,
        queue_url: str,
        max_messages: int,
        visibility_timeout: int,
        wait_time_seconds: int,
    ) -> List[Message]:
        response = self._call(
            "receive_message",
            queue_url,
            MaxNumberOfMessages=max_messages,
            VisibilityTimeout=visibility_timeout,
            WaitTimeSeconds=wait_time_seconds,
            MessageAttributeNames=["All"],
        )
        return [Message.from_service_response(m) for m in response.get("Messages", [])]

    def send_batch(self, queue_url: str, entries: List[SendEntry]) -> BatchResult:
        if not entries:
            return BatchResult()

        request_entries = []
        for entry in entries:
            request_entry: Dict[str, Any] = {"Id": entry.entry_id, "MessageBody": entry.body or ""}
            if entry.message_attributes:
                request_entry["MessageAttributes"] = entry.message_attributes
            request_entries.append(request_entry)

        response = self._call("send_message_batch", queue_url, Entries=request_entries)
        return _parse_batch_response(response)

    def delete_batch(self, queue_url: str, entries: List[DeleteEntry]) -> BatchResult:
        if not entries:
            return BatchResult()

        response = self._call(
            "delete_message_batch",
            queue_url,
            Entries=[
                {"Id": entry.entry_id, "ReceiptHandle": entry.receipt_handle}
                for entry in entries
            ],
        )
        return _parse_batch_response(response)
