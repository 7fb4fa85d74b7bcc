"""WordFence Intelligence vulnerability feed client."""

import logging
from typing import Any

import httpx

from wppd.services.models import VersionBound, Vulnerability

logger = logging.getLogger(__name__)


class WordFenceVulnerabilitiesProvider:
    """Serve plugin vulnerabilities from an in-memory copy of the WordFence feed.

    The feed is a single JSON document keyed by vulnerability ID::

        {"<uuid>": {"software": [{"type": "plugin", "slug": "...",
                                  "affected_versions": {"<label>": {
                                      "from_version": "*", "from_inclusive": true,
                                      "to_version": "1.2.3", "to_inclusive": true}}}],
                    "cvss": {"score": 6.1}}}

    ``fetch_vulnerabilities()`` downloads and indexes it by slug; lookups never
    touch the network.
    """

    def __init__(self, url: str, api_key: str = "", timeout: float = 60.0):
        """Initialize the provider.

        Args:
            url: Feed URL
            api_key: Optional WordFence API key sent as a bearer token
            timeout: Request timeout in seconds
        """
        self.url = url
        self.api_key = api_key
        self.timeout = timeout
        self.vulnerabilities: dict[str, list[Vulnerability]] = {}

    async def get_vulnerabilities(self, slug: str) -> list[Vulnerability] | None:
        """Get the indexed vulnerabilities of a plugin.

        Returns:
            Vulnerability list, or None when the feed does not mention the slug.
        """
        return self.vulnerabilities.get(slug)

    async def fetch_vulnerabilities(self) -> None:
        """Download the feed and replace the index.

        Raises:
            httpx.HTTPError: When the feed cannot be downloaded. The previous
                index is kept.
        """
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(self.url, headers=headers)
            response.raise_for_status()
            data = response.json()

        self.vulnerabilities = self._parse_feed(data)
        logger.info(f"Indexed WordFence vulnerabilities for {len(self.vulnerabilities)} plugins")

    def _parse_feed(self, data: dict[str, Any]) -> dict[str, list[Vulnerability]]:
        index: dict[str, list[Vulnerability]] = {}

        for record in data.values():
            cvss = record.get("cvss") or {}
            score = float(cvss.get("score") or 0.0)

            for software in record.get("software", []):
                if software.get("type") != "plugin" or not software.get("slug"):
                    continue

                entries = index.setdefault(software["slug"], [])
                for affected in (software.get("affected_versions") or {}).values():
                    entries.append(
                        Vulnerability(
                            lower=VersionBound(
                                version=affected.get("from_version") or "*",
                                inclusive=bool(affected.get("from_inclusive")),
                            ),
                            upper=VersionBound(
                                version=affected.get("to_version") or "*",
                                inclusive=bool(affected.get("to_inclusive")),
                            ),
                            score=score,
                        )
                    )

        return index
