"""Delete sites that stopped reporting their inventory."""

import logging
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from wppd.repositories import SiteRepository

logger = logging.getLogger(__name__)

MAX_INACTIVE_TIME = timedelta(days=1)


class DeleteSitesInactiveTask:
    """Delete every site whose last update is older than ``max_inactive``.

    Deleting a site cascades to its plugin links.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        max_inactive: timedelta = MAX_INACTIVE_TIME,
    ):
        self.session_factory = session_factory
        self.max_inactive = max_inactive

    async def run(self) -> None:
        try:
            async with self.session_factory() as db:
                repository = SiteRepository(db)
                now = datetime.utcnow()

                for site in await repository.find_all():
                    if now - site.updated_at <= self.max_inactive:
                        continue

                    if await repository.delete(site.id):
                        logger.info(f"Deleted inactive site: {site.name} (ID: {site.id})")
                    else:
                        logger.warning(f"Failed to delete inactive site: {site.name} (ID: {site.id})")

                await db.commit()
        except Exception as e:
            logger.error(f"Error while deleting inactive sites: {e}", exc_info=True)
