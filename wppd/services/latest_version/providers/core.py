"""Latest PHP and WordPress core version providers.

Both providers cache the last fetched version in memory; the scheduler
refreshes them and the resolver serves the cached value.
"""

import logging

import httpx

from wppd.services.versions import INVALID_VERSION_FORMAT, format_version

logger = logging.getLogger(__name__)


class _CachedVersionProvider:
    """Fetch a JSON document and keep the version extracted from it."""

    label = "core"

    def __init__(self, url: str, timeout: float = 15.0):
        self.url = url
        self.timeout = timeout
        self.latest_version: str | None = None

    def get_latest_version(self) -> str | None:
        return self.latest_version

    async def fetch_latest_version(self) -> None:
        """Refresh the cached version; any failure resets it to None."""
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(
                    self.url,
                    headers={"Content-Type": "application/json"},
                )
                response.raise_for_status()
                version = format_version(self._extract_version(response.json()))

        except (httpx.HTTPError, ValueError, KeyError, IndexError, TypeError) as e:
            logger.warning(f"Failed to fetch latest {self.label} version: {e}")
            self.latest_version = None
            return

        self.latest_version = None if version == INVALID_VERSION_FORMAT else version

    def _extract_version(self, data) -> str:
        raise NotImplementedError


class PhpLatestVersionProvider(_CachedVersionProvider):
    """Latest PHP release from the php.net releases JSON API.

    The API answers ``{"8": {"version": "8.3.4", ...}}`` keyed by major
    version; the highest major carries the latest release.
    """

    label = "PHP"

    def _extract_version(self, data) -> str:
        if "data" in data and isinstance(data["data"], dict):
            data = data["data"]

        major = max(data, key=lambda key: int(str(key).split(".")[0]))
        release = data[major]
        return release.get("version") or release["name"]


class WordPressLatestVersionProvider(_CachedVersionProvider):
    """Latest WordPress core release from the version-check API."""

    label = "WordPress"

    def _extract_version(self, data) -> str:
        return data["offers"][0]["version"]
