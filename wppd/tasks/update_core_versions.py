"""Refresh the cached latest PHP and WordPress core versions."""

import logging

from wppd.services.latest_version.resolver import CoreVersionProvider

logger = logging.getLogger(__name__)


class UpdateLatestCoreVersionTask:
    def __init__(self, provider: CoreVersionProvider, label: str):
        self.provider = provider
        self.label = label

    async def run(self) -> None:
        try:
            await self.provider.fetch_latest_version()
            version = self.provider.get_latest_version()
            if version is None:
                logger.warning(f"Latest {self.label} version is unknown")
            else:
                logger.info(f"Latest {self.label} version is {version}")
        except Exception as e:
            logger.error(f"Failed to update latest {self.label} version: {e}", exc_info=True)
