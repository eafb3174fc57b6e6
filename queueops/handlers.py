"""
Invocation entry points
Plain functions taking the trigger payload and an invocation context
"""

from typing import Any, Dict, Optional

import structlog

from queueops.config.loader import load_config, load_consumer_settings
from queueops.consumer.processor import Processor, handle_batch
from queueops.observability.logging import bind_context, log_trigger_records
from queueops.queues.base import QueueService
from queueops.redrive.engine import RedriveEngine

logger = structlog.get_logger(__name__)


def _request_id(context: Any) -> Optional[str]:
    return getattr(context, "aws_request_id", None)


def process_messages(
    event: Dict[str, Any],
    context: Any = None,
    processor: Optional[Processor] = None,
) -> Dict[str, Any]:
    """
    Consumer entry point

    Args:
        event: Queue event with a "Records" list
        context: Invocation context (its aws_request_id is bound to logs)
        processor: Processing function (defaults to the failure-marker check)

    Returns:
        Partial batch failure report
    """
    settings = load_consumer_settings()
    bind_context(invocation_id=_request_id(context))
    return handle_batch(event, processor=processor, failure_marker=settings.failure_marker)


def redrive_messages(
    event: Any,
    context: Any = None,
    queue_service: Optional[QueueService] = None,
) -> Dict[str, Any]:
    """
    Redrive entry point

    The trigger payload is logged and otherwise ignored: receiving it only
    means "start now". Configuration is validated before any queue call.

    Args:
        event: Notification that triggered the redrive (e.g. an alarm via SNS)
        context: Invocation context
        queue_service: Queue service (defaults to SQS from settings)

    Returns:
        Redrive summary as a dictionary

    Raises:
        ConfigurationError: If required settings are missing
        RedriveError: If the redrive aborted on a service-level fault
    """
    settings = load_config()
    invocation_id = _request_id(context)
    bind_context(invocation_id=invocation_id)
    log_trigger_records(logger, event)

    engine = RedriveEngine.from_settings(settings, queue_service=queue_service)
    summary = engine.run(invocation_id=invocation_id)
    return summary.to_dict()
