"""Client for the package index JSON API.

Uses the per-project endpoint:
- GET {base_url}/<name>/json  - project metadata and release list
"""

import os
import time
from typing import Any, Optional

import requests
from packaging.version import InvalidVersion, Version

from ..errors import PackageIndexError, PackageNotFoundError
from ..logging import get_logger
from .retry_policy import RetryPolicy, default_retry_policy

logger = get_logger(__name__)

DEFAULT_INDEX_URL = "https://pypi.org/pypi"
INDEX_URL_ENV = "VENVKIT_INDEX_URL"


def default_index_url() -> str:
    """Index base URL from $VENVKIT_INDEX_URL, else PyPI."""
    return os.environ.get(INDEX_URL_ENV) or DEFAULT_INDEX_URL


def is_outdated(installed: str, latest: str) -> bool:
    """Whether the index has a newer release than the installed one.

    Raises:
        InvalidVersion: If either version is not PEP 440.
    """
    return Version(installed) < Version(latest)


class PackageIndexClient:
    """Read-only client for a PyPI-compatible JSON API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        retry_policy: Optional[RetryPolicy] = None,
        request_timeout: float = 10.0,
    ):
        """Initialize the client.

        Args:
            base_url: JSON API root (e.g., https://pypi.org/pypi).
            retry_policy: Retry policy for transient failures.
            request_timeout: Per-request timeout in seconds.
        """
        self.base_url = (base_url or default_index_url()).rstrip("/")
        self.retry_policy = retry_policy or default_retry_policy()
        self.request_timeout = request_timeout
        self._session = requests.Session()
        self._session.headers.update({"Accept": "application/json"})

    def project(self, name: str) -> dict[str, Any]:
        """Fetch the full metadata document of a project.

        Raises:
            PackageNotFoundError: If the index has no such project.
            PackageIndexError: If the response is not a JSON object.
            requests.RequestException: On network errors.
        """
        response = self._request_with_retry("GET", f"{self.base_url}/{name}/json")
        if response.status_code == 404:
            raise PackageNotFoundError(name)
        response.raise_for_status()

        try:
            data = response.json()
        except ValueError as e:
            raise PackageIndexError(f"Invalid JSON from index for {name}") from e
        if not isinstance(data, dict):
            raise PackageIndexError(f"Unexpected index response for {name}")
        return data

    def latest_version(self, name: str) -> str:
        """Latest published version of a project."""
        data = self.project(name)
        version = (data.get("info") or {}).get("version")
        if not version:
            raise PackageIndexError(f"Index response for {name} has no version")
        logger.debug("latest %s: %s", name, version)
        return version

    def release_versions(self, name: str) -> list[str]:
        """All released versions, oldest first where they parse."""
        releases = self.project(name).get("releases") or {}

        def sort_key(version: str):
            try:
                return (0, Version(version))
            except InvalidVersion:
                return (1, version)

        return sorted(releases, key=sort_key)

    def _request_with_retry(self, method: str, url: str, **kwargs) -> requests.Response:
        """Send a request, retrying connection errors, timeouts and 5xx."""
        kwargs.setdefault("timeout", self.request_timeout)
        attempt = 0

        while True:
            try:
                response = self._session.request(method, url, **kwargs)
            except (requests.ConnectionError, requests.Timeout) as e:
                if not self.retry_policy.should_retry(attempt):
                    raise
                logger.debug("index request failed (%s), retrying", e)
            else:
                if not (
                    self.retry_policy.is_retryable_status(response.status_code)
                    and self.retry_policy.should_retry(attempt)
                ):
                    return response
                logger.debug("index returned %d, retrying", response.status_code)

            time.sleep(self.retry_policy.get_delay(attempt))
            attempt += 1

    def close(self) -> None:
        """Close the HTTP session."""
        self._session.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
