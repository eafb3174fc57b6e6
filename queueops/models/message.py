"""
Message Data Model - one delivery of a queued message
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from queueops.errors import MalformedRecordError


@dataclass(frozen=True)
class Message:
    """
    A single delivery of a message held by a consumer or the redrive engine

    Attributes:
        message_id: Queue-assigned identifier, unique within a queue
        body: Opaque payload (may be empty or absent)
        receipt_handle: Handle for this specific delivery, required to delete it.
            A message delivered twice has two different receipt handles.
        message_attributes: User-defined message attributes, preserved on redrive
    """

    message_id: str
    body: Optional[str]
    receipt_handle: str
    message_attributes: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.message_id:
            raise ValueError("message_id must be non-empty")

    @classmethod
    def from_event_record(cls, record: Dict[str, Any]) -> "Message":
        """
        Build a Message from a trigger-layer record

        Args:
            record: Record from the inbound event ("messageId", "body", "receiptHandle")

        Returns:
            Message instance

        Raises:
            MalformedRecordError: If the record is not a mapping or has no messageId
        """
        if not isinstance(record, Mapping) or not record.get("messageId"):
            raise MalformedRecordError(f"trigger record has no messageId: {record!r}")

        return cls(
            message_id=record["messageId"],
            body=record.get("body"),
            receipt_handle=record.get("receiptHandle", ""),
            message_attributes=record.get("messageAttributes") or {},
        )

    @classmethod
    def from_service_response(cls, data: Dict[str, Any]) -> "Message":
        """
        Build a Message from a queue-service receive response entry

        Args:
            data: Entry of the "Messages" list ("MessageId", "Body", "ReceiptHandle")

        Returns:
            Message instance
        """
        return cls(
            message_id=data["MessageId"],
            body=data.get("Body"),
            receipt_handle=data["ReceiptHandle"],
            message_attributes=data.get("MessageAttributes") or {},
        )
