"""Refresh the in-memory WordFence vulnerability index."""

import logging

from wppd.services.vulnerabilities.providers import WordFenceVulnerabilitiesProvider

logger = logging.getLogger(__name__)


class UpdateWordFenceVulnerabilitiesTask:
    def __init__(self, provider: WordFenceVulnerabilitiesProvider):
        self.provider = provider

    async def run(self) -> None:
        try:
            await self.provider.fetch_vulnerabilities()
            logger.info("WordFence vulnerabilities updated successfully.")
        except Exception as e:
            logger.error(f"Failed to update WordFence vulnerabilities: {e}")
