"""Transport module - package index access."""

from .package_index import (
    DEFAULT_INDEX_URL,
    PackageIndexClient,
    default_index_url,
    is_outdated,
)
from .retry_policy import (
    RetryPolicy,
    default_retry_policy,
    no_retry_policy,
)

__all__ = [
    "DEFAULT_INDEX_URL",
    "PackageIndexClient",
    "default_index_url",
    "is_outdated",
    "RetryPolicy",
    "default_retry_policy",
    "no_retry_policy",
]
