"""
Batch Consumer
Applies a processing function to each message of an inbound batch and
reports exactly which messages must stay on the queue
"""

from typing import Any, Callable, Dict, List, Optional, Sequence

import structlog

from queueops.errors import MalformedRecordError, ProcessingError
from queueops.models.message import Message
from queueops.models.outcome import BatchItemOutcome, BatchResponse
from queueops.observability.logging import log_message_outcome
from queueops.observability.metrics import increment_messages_processed

logger = structlog.get_logger(__name__)

DEFAULT_FAILURE_MARKER = "fail"

Processor = Callable[[str], Any]


def reject_marked(marker: str = DEFAULT_FAILURE_MARKER) -> Processor:
    """
    Build the demonstration processor: rejects bodies containing marker

    Args:
        marker: Substring that marks a message as unprocessable

    Returns:
        Processing function raising ProcessingError for marked bodies
    """

    def process(body: str) -> None:
        if marker in body:
            raise ProcessingError(None, f"body contains failure marker {marker!r}")

    return process


def process_message(message: Message, processor: Processor) -> BatchItemOutcome:
    """
    Process one message, converting any failure into a FAILURE outcome

    Args:
        message: Message to process
        processor: Processing function applied to the body

    Returns:
        Outcome for this message
    """
    try:
        processor(message.body if message.body is not None else "")
    except ProcessingError as e:
        return BatchItemOutcome.failure(message.message_id, e.reason)
    except Exception as e:
        # Any other fault counts as a processing failure for this message only
        return BatchItemOutcome.failure(message.message_id, f"{type(e).__name__}: {e}")

    return BatchItemOutcome.success(message.message_id)


def process_batch(
    messages: Sequence[Message],
    processor: Optional[Processor] = None,
) -> List[BatchItemOutcome]:
    """
    Process a batch, one outcome per input message

    A failure on one message never stops processing of the others.

    Args:
        messages: Inbound batch (may be empty)
        processor: Processing function (defaults to reject_marked())

    Returns:
        Outcomes in input order
    """
    processor = processor or reject_marked()
    return [process_message(message, processor) for message in messages]


def build_batch_response(outcomes: Sequence[BatchItemOutcome]) -> BatchResponse:
    """Build the partial-failure report for the trigger layer"""
    return BatchResponse.from_outcomes(outcomes)


def handle_batch(
    event: Dict[str, Any],
    processor: Optional[Processor] = None,
    failure_marker: str = DEFAULT_FAILURE_MARKER,
) -> Dict[str, Any]:
    """
    Run the consumer over a trigger payload

    Args:
        event: Inbound event with a "Records" list
        processor: Processing function (defaults to reject_marked(failure_marker))
        failure_marker: Marker for the default processor

    Returns:
        {"batchItemFailures": [{"itemIdentifier": ...}, ...]}

    Raises:
        MalformedRecordError: If a record has no identifier; no record is
            processed and the whole batch is redelivered
    """
    try:
        messages = [Message.from_event_record(record) for record in event.get("Records") or []]
    except MalformedRecordError as e:
        logger.error("Rejected malformed batch", error=str(e))
        raise

    logger.info("Received batch", message_count=len(messages))

    outcomes = process_batch(messages, processor or reject_marked(failure_marker))

    for outcome in outcomes:
        log_message_outcome(logger, outcome)
        increment_messages_processed(outcome.status.value)

    response = build_batch_response(outcomes)
    logger.info(
        "Batch processed",
        message_count=len(messages),
        failed_count=len(response.failed_message_ids),
    )
    return response.to_dict()
