"""Throttled execution queue for HR Agent.

This package serializes async jobs against a minimum start-to-start
interval and retries rate-limited jobs with exponential backoff.
"""

from throttled_queue.retry_queue import (
    DEFAULT_MAX_RETRIES,
    ThrottledRetryQueue,
    is_rate_limit_error,
)

__all__ = [
    "DEFAULT_MAX_RETRIES",
    "ThrottledRetryQueue",
    "is_rate_limit_error",
]
