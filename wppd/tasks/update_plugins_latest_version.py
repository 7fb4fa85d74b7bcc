"""Refresh the latest version triple of every known plugin."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from wppd.repositories import PluginRepository
from wppd.services.latest_version import LatestVersionResolver

logger = logging.getLogger(__name__)


class UpdatePluginsLatestVersionTask:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        latest_version_resolver: LatestVersionResolver,
    ):
        self.session_factory = session_factory
        self.latest_version_resolver = latest_version_resolver

    async def run(self) -> None:
        try:
            logger.info("Updating plugins latest version...")

            async with self.session_factory() as db:
                repository = PluginRepository(db)

                for plugin in await repository.find_all():
                    latest = await self.latest_version_resolver.resolve_plugin(plugin.slug)
                    updated = await repository.update_latest_version(plugin.id, latest)

                    if not updated:
                        logger.warning(f"Failed to update plugin {plugin.slug} to latest version {latest.version}")
                        continue

                    logger.info(f"Updated plugin {plugin.slug} to latest version {latest.version}")

                await db.commit()
        except Exception as e:
            logger.error(f"Error while updating plugins latest version: {e}", exc_info=True)
