"""
Structured Logging Configuration with structlog
Also hosts the structured log records emitted by the consumer and the redrive engine
"""

import logging
import sys
from typing import Any, Dict, Iterable, List, Mapping

import structlog

from queueops.models.outcome import BatchItemOutcome
from queueops.models.redrive import BatchRelocation, RedriveSummary


def configure_logging(log_level: str = "INFO", log_format: str = "json") -> None:
    """
    Configure structlog for JSON structured logging

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Output format ("json" or "console")
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if log_format == "json":
        processors = shared_processors + [
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def bind_context(**kwargs: Any) -> None:
    """
    Bind context variables to all log messages in current context

    Args:
        **kwargs: Key-value pairs to add to log context
    """
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(**kwargs)


def log_message_outcome(
    logger: structlog.stdlib.BoundLogger,
    outcome: BatchItemOutcome,
) -> None:
    """
    Log the outcome of processing one message

    Args:
        logger: Structlog logger
        outcome: Outcome to record
    """
    if outcome.failed:
        logger.warning(
            "message_processing_failed",
            message_id=outcome.message_id,
            reason=outcome.reason,
        )
    else:
        logger.info("message_processed", message_id=outcome.message_id)


def log_trigger_records(
    logger: structlog.stdlib.BoundLogger,
    event: Any,
) -> None:
    """
    Log the notification records that triggered a redrive (traceability only)

    Any payload shape is accepted; whatever is not a record mapping is
    logged by its repr.

    Args:
        logger: Structlog logger
        event: Trigger payload, e.g. an SNS event
    """
    if not isinstance(event, Mapping):
        logger.info("redrive_triggered", record_count=0, payload=repr(event))
        return

    records = event.get("Records")
    if not isinstance(records, list):
        records = []
    logger.info("redrive_triggered", record_count=len(records))

    for record in records:
        if not isinstance(record, Mapping):
            logger.info("trigger_record", payload=repr(record))
            continue

        notification = record.get("Sns") or record.get("sns")
        if not isinstance(notification, Mapping):
            logger.info("trigger_record", payload=repr(notification))
            continue

        logger.info(
            "trigger_record",
            notification_id=notification.get("MessageId"),
            subject=notification.get("Subject"),
            message=notification.get("Message"),
        )


def _failure_dicts(failures: Iterable) -> List[Dict[str, Any]]:
    return [failure.to_dict() for failure in failures]


def log_redrive_iteration(
    logger: structlog.stdlib.BoundLogger,
    relocation: BatchRelocation,
) -> None:
    """
    Log the result of one redrive iteration

    Partial send or delete failures are logged at error level; a message
    that was sent but not deleted will be redriven again later.

    Args:
        logger: Structlog logger
        relocation: Completed iteration
    """
    if relocation.send_failures:
        logger.error(
            "redrive_send_partial_failure",
            iteration=relocation.iteration,
            failed=_failure_dicts(relocation.send_failures),
        )

    if relocation.delete_failures:
        logger.error(
            "redrive_delete_partial_failure",
            iteration=relocation.iteration,
            failed=_failure_dicts(relocation.delete_failures),
        )

    logger.info(
        "redrive_batch_relocated",
        iteration=relocation.iteration,
        received=relocation.received,
        sent=len(relocation.sent_message_ids),
        deleted=len(relocation.deleted_message_ids),
        message_ids=relocation.deleted_message_ids,
    )


def log_redrive_completed(
    logger: structlog.stdlib.BoundLogger,
    summary: RedriveSummary,
) -> None:
    """
    Log the end of a redrive invocation (success or failure)

    Args:
        logger: Structlog logger
        summary: Final summary
    """
    log_data = {"event": "redrive_completed" if summary.error is None else "redrive_failed"}
    log_data.update(summary.to_dict())

    if summary.error is None:
        logger.info(**log_data)
    else:
        logger.error(**log_data)
