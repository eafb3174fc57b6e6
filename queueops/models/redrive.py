"""
Redrive Models
Engine states, per-iteration relocation records and the invocation summary
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from queueops.models.batch import BatchEntryFailure


class RedriveState(str, Enum):
    """States of a redrive invocation"""

    IDLE = "IDLE"
    DRAINING = "DRAINING"
    BATCH_RELOCATED = "BATCH_RELOCATED"
    SOURCE_EMPTY = "SOURCE_EMPTY"
    FAILED = "FAILED"


@dataclass
class BatchRelocation:
    """
    Result of one receive -> send -> delete iteration

    Attributes:
        iteration: 1-based iteration number within the invocation
        received: Number of messages received from the DLQ
        sent_message_ids: Source message ids confirmed by the destination
        send_failures: Send entries rejected by the destination
        deleted_message_ids: Source message ids removed from the DLQ
        delete_failures: Delete entries rejected by the DLQ
    """

    iteration: int
    received: int
    sent_message_ids: List[str] = field(default_factory=list)
    send_failures: List[BatchEntryFailure] = field(default_factory=list)
    deleted_message_ids: List[str] = field(default_factory=list)
    delete_failures: List[BatchEntryFailure] = field(default_factory=list)

    @property
    def relocated(self) -> int:
        """Messages both sent to the destination and deleted from the DLQ"""
        return len(self.deleted_message_ids)


@dataclass
class RedriveSummary:
    """
    Cumulative result of one redrive invocation

    total_redriven only ever grows within an invocation and counts messages
    that were both sent and deleted.
    """

    invocation_id: str
    total_redriven: int = 0
    iterations: int = 0
    send_failures: int = 0
    delete_failures: int = 0
    state: RedriveState = RedriveState.IDLE
    error: Optional[str] = None

    def record(self, relocation: BatchRelocation) -> None:
        """
        Accumulate one iteration into the summary

        Args:
            relocation: Completed iteration
        """
        self.iterations += 1
        self.total_redriven += relocation.relocated
        self.send_failures += len(relocation.send_failures)
        self.delete_failures += len(relocation.delete_failures)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary (handler return value)"""
        return {
            "invocation_id": self.invocation_id,
            "total_redriven": self.total_redriven,
            "iterations": self.iterations,
            "send_failures": self.send_failures,
            "delete_failures": self.delete_failures,
            "state": self.state.value,
            "error": self.error,
        }
