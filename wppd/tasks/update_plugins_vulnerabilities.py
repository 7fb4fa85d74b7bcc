"""Copy resolved vulnerabilities of every known plugin into the database."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from wppd.repositories import PluginRepository
from wppd.services.vulnerabilities import VulnerabilitiesResolver

logger = logging.getLogger(__name__)


class UpdatePluginsVulnerabilitiesTask:
    """Replace the stored vulnerabilities of each plugin, one transaction per plugin.

    Plugins the resolver knows nothing about keep their stored rows.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        vulnerabilities_resolver: VulnerabilitiesResolver,
    ):
        self.session_factory = session_factory
        self.vulnerabilities_resolver = vulnerabilities_resolver

    async def run(self) -> None:
        try:
            logger.info("Updating plugins vulnerabilities...")

            async with self.session_factory() as db:
                repository = PluginRepository(db)

                for plugin in await repository.find_all():
                    vulnerabilities = await self.vulnerabilities_resolver.resolve(plugin.slug)
                    if vulnerabilities is None:
                        logger.error(f"Failed to fetch vulnerabilities for plugin {plugin.slug} (ID: {plugin.id})")
                        continue

                    count = await repository.replace_vulnerabilities(plugin.id, vulnerabilities)
                    await db.commit()
                    logger.info(f"Stored {count} vulnerabilities for plugin {plugin.slug} (ID: {plugin.id})")
        except Exception as e:
            logger.error(f"Error while updating plugins vulnerabilities: {e}", exc_info=True)
