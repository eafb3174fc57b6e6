"""
Exception hierarchy for queue operations
"""

from typing import Optional


class QueueOpsError(Exception):
    """Base exception for queueops errors"""

    pass


class ConfigurationError(QueueOpsError):
    """Required settings are missing or invalid"""

    pass


class MalformedRecordError(QueueOpsError, ValueError):
    """
    A trigger record cannot be turned into a message

    A record without an identifier cannot be named in a partial-failure
    report, so the whole batch is rejected before any record is processed
    and the trigger layer redelivers all of it.
    """

    pass


class ProcessingError(QueueOpsError):
    """A single message was rejected by the processing function"""

    def __init__(self, message_id: Optional[str], reason: str):
        self.message_id = message_id
        self.reason = reason
        super().__init__(reason)


class QueueServiceError(QueueOpsError):
    """
    Service-level fault from the queue service

    Raised for authentication/authorization failures, unreachable endpoints,
    malformed queue references and similar faults that affect a whole request
    rather than a single entry.
    """

    def __init__(self, operation: str, queue_url: str, code: str, message: str):
        self.operation = operation
        self.queue_url = queue_url
        self.code = code
        super().__init__(f"{operation} on {queue_url} failed ({code}): {message}")


class RedriveError(QueueOpsError):
    """
    Terminal error for a redrive invocation

    Carries the summary accumulated before the failure. Relocations already
    committed are not rolled back.
    """

    def __init__(self, message: str, summary=None):
        self.summary = summary
        super().__init__(message)
