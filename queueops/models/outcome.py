"""
Batch Outcome Models
Per-message outcomes and the partial-failure report handed to the trigger layer
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional


class OutcomeStatus(str, Enum):
    """Result of processing one message"""

    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"


@dataclass(frozen=True)
class BatchItemOutcome:
    """
    Outcome of one message in one batch

    Attributes:
        message_id: Identifier of the processed message
        status: SUCCESS or FAILURE
        reason: Failure reason (None on success)
    """

    message_id: str
    status: OutcomeStatus
    reason: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.status == OutcomeStatus.FAILURE

    @classmethod
    def success(cls, message_id: str) -> "BatchItemOutcome":
        return cls(message_id=message_id, status=OutcomeStatus.SUCCESS)

    @classmethod
    def failure(cls, message_id: str, reason: str) -> "BatchItemOutcome":
        return cls(message_id=message_id, status=OutcomeStatus.FAILURE, reason=reason)


@dataclass
class BatchResponse:
    """
    Partial batch failure report

    Every identifier listed stays on the queue for retry; every identifier
    not listed is removed by the trigger layer.
    """

    failed_message_ids: List[str] = field(default_factory=list)

    @classmethod
    def from_outcomes(cls, outcomes: Iterable[BatchItemOutcome]) -> "BatchResponse":
        """
        Collect failed identifiers in input order, each listed once

        Args:
            outcomes: Outcomes of one batch

        Returns:
            BatchResponse listing the failures
        """
        failed: List[str] = []
        seen = set()
        for outcome in outcomes:
            if outcome.failed and outcome.message_id not in seen:
                seen.add(outcome.message_id)
                failed.append(outcome.message_id)
        return cls(failed_message_ids=failed)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the trigger-layer response shape"""
        return {
            "batchItemFailures": [
                {"itemIdentifier": message_id} for message_id in self.failed_message_ids
            ]
        }
