"""Retry policy for package index requests."""

from dataclasses import dataclass


@dataclass
class RetryPolicy:
    """Exponential backoff for transient index failures.

    Connection errors, timeouts and 5xx responses are retried; 4xx
    responses never are.
    """
    max_retries: int = 2
    initial_delay: float = 0.5
    backoff_factor: float = 2.0
    max_delay: float = 10.0

    def get_delay(self, attempt: int) -> float:
        """Seconds to wait before retry number ``attempt`` (0-indexed)."""
        delay = self.initial_delay * (self.backoff_factor ** attempt)
        return min(delay, self.max_delay)

    def should_retry(self, attempt: int) -> bool:
        return attempt < self.max_retries

    @staticmethod
    def is_retryable_status(status_code: int) -> bool:
        return status_code >= 500


def default_retry_policy() -> RetryPolicy:
    """2 retries, 0.5s initial delay, 2x backoff, 10s max."""
    return RetryPolicy()


def no_retry_policy() -> RetryPolicy:
    """Fail on the first error."""
    return RetryPolicy(max_retries=0)
