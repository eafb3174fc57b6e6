"""
Batched Request Models
Entries submitted to the queue service in one batched call, and the per-entry results
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class SendEntry:
    """
    One entry of a batched send

    Attributes:
        entry_id: Request token identifying the entry within the batch
        body: Message body to enqueue
        message_attributes: Message attributes to carry along
    """

    entry_id: str
    body: Optional[str]
    message_attributes: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DeleteEntry:
    """
    One entry of a batched delete

    Attributes:
        entry_id: Identifier of the entry within the batch (the message id)
        receipt_handle: Receipt handle of the delivery to delete
    """

    entry_id: str
    receipt_handle: str


@dataclass(frozen=True)
class BatchEntryFailure:
    """
    A single entry rejected within an otherwise accepted batched call

    Attributes:
        entry_id: Entry identifier from the request
        code: Error code reported by the queue service
        message: Error details
        sender_fault: True when the entry itself is at fault and will not succeed as is
    """

    entry_id: str
    code: str
    message: str = ""
    sender_fault: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entry_id": self.entry_id,
            "code": self.code,
            "message": self.message,
            "sender_fault": self.sender_fault,
        }


@dataclass
class BatchResult:
    """
    Per-entry result of a batched send or delete

    Attributes:
        successful: Entry ids the service confirmed
        failed: Entries the service rejected
    """

    successful: List[str] = field(default_factory=list)
    failed: List[BatchEntryFailure] = field(default_factory=list)

    @property
    def all_succeeded(self) -> bool:
        return not self.failed
