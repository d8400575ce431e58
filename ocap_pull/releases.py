"""
Latest-release lookup against the GitHub releases API.

Two HTTP clients are tried in turn (requests, then httpx), each with a
bounded timeout. Failure is reported as ReleaseLookupError; callers decide
whether it is fatal.
"""
import json
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
import requests


logger = logging.getLogger(__name__)


class ReleaseLookupError(Exception):
    """Raised when no client could resolve the latest release tag."""
    pass


def extract_tag_name(body: str) -> str:
    """
    Extract the tag_name field from a releases API response body.

    Raises:
        ReleaseLookupError: If the body is not JSON or has no usable tag_name
    """
    try:
        data = json.loads(body)
    except ValueError as e:
        raise ReleaseLookupError(f"Response is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ReleaseLookupError("Response is not a JSON object")

    tag_name = data.get('tag_name')
    if not isinstance(tag_name, str) or not tag_name.strip():
        raise ReleaseLookupError("Response has no tag_name")

    return tag_name.strip()


class LatestReleaseLookup:
    """Resolves the most recent release tag of the upstream repository."""

    def __init__(self, api_url: str, timeout: float = 10.0, token: Optional[str] = None):
        self.api_url = api_url
        self.timeout = timeout
        self.headers = {'Accept': 'application/vnd.github+json'}
        if token:
            self.headers['Authorization'] = f'Bearer {token}'

    def _fetch_with_requests(self) -> str:
        response = requests.get(self.api_url, headers=self.headers, timeout=self.timeout)
        response.raise_for_status()
        return response.text

    def _fetch_with_httpx(self) -> str:
        response = httpx.get(self.api_url, headers=self.headers, timeout=self.timeout)
        response.raise_for_status()
        return response.text

    def _clients(self) -> List[Tuple[str, Callable[[], str]]]:
        return [
            ('requests', self._fetch_with_requests),
            ('httpx', self._fetch_with_httpx),
        ]

    def fetch_latest_tag(self) -> str:
        """
        Fetch the latest release tag.

        Returns:
            Tag name, e.g. "v2.0.0"

        Raises:
            ReleaseLookupError: If every client failed
        """
        failures: Dict[str, Any] = {}

        for name, fetch in self._clients():
            logger.debug(f"Querying {self.api_url} with {name} (timeout {self.timeout}s)")
            try:
                body = fetch()
                if not body:
                    raise ReleaseLookupError("Empty response body")
                tag = extract_tag_name(body)
            except (requests.RequestException, httpx.HTTPError, httpx.InvalidURL, ReleaseLookupError) as e:
                logger.debug(f"Release lookup with {name} failed: {e}")
                failures[name] = e
                continue

            logger.debug(f"Release lookup with {name} returned {tag}")
            return tag

        summary = "; ".join(f"{name}: {error}" for name, error in failures.items())
        raise ReleaseLookupError(f"Could not fetch latest release from {self.api_url} ({summary})")
