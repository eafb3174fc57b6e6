"""
Dead-letter queue redrive
"""

from queueops.redrive.engine import RedriveEngine, random_token

__all__ = ["RedriveEngine", "random_token"]
