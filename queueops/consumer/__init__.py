"""
Batch consumer with per-message failure reporting
"""

from queueops.consumer.processor import (
    build_batch_response,
    handle_batch,
    process_batch,
    reject_marked,
)

__all__ = ["build_batch_response", "handle_batch", "process_batch", "reject_marked"]
