"""Delete plugins no site has installed anymore."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from wppd.repositories import PluginRepository

logger = logging.getLogger(__name__)


class DeletePluginsUnusedTask:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def run(self) -> None:
        try:
            async with self.session_factory() as db:
                deleted = await PluginRepository(db).delete_unused()
                await db.commit()

            if deleted:
                logger.info("Deleted unused plugins")
            else:
                logger.info("No unused plugins to delete")
        except Exception as e:
            logger.error(f"Error while deleting unused plugins: {e}", exc_info=True)
