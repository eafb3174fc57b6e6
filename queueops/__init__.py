"""
queueops - batch consumer and dead-letter queue redrive for SQS-style queues
"""

__version__ = "0.1.0"
