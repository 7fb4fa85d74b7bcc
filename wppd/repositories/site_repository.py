"""Site and site-plugin persistence."""

import logging
from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from wppd.models.database import Plugin, Site, SitePlugin
from wppd.services.models import PluginVersion

logger = logging.getLogger(__name__)

# Largest SQLite INTEGER primary key
MAX_ROW_ID = 2**63 - 1


class SiteRepository:
    """Repository for sites and their plugin links.

    Write methods return ``None`` (or ``False``) when the target row does not
    exist instead of raising, so callers can treat a missed write as a
    recoverable per-item failure.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_all(self, environment: str | None = None) -> list[Site]:
        query = select(Site).order_by(Site.id)
        if environment:
            query = query.where(Site.environment == environment)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def find_by_id(self, site_id: int) -> Site | None:
        if not 0 < site_id <= MAX_ROW_ID:
            return None
        result = await self.db.execute(select(Site).where(Site.id == site_id))
        return result.scalar_one_or_none()

    async def find_by_name_and_url(self, name: str, url: str) -> Site | None:
        result = await self.db.execute(
            select(Site).where(Site.name == name, Site.url == url).limit(1)
        )
        return result.scalar_one_or_none()

    async def create(
        self,
        name: str,
        url: str,
        token: str,
        environment: str,
        php_version: str | None = None,
        wp_version: str | None = None,
    ) -> Site | None:
        now = datetime.utcnow()
        site = Site(
            name=name,
            url=url,
            token=token,
            environment=environment,
            php_version=php_version,
            wp_version=wp_version,
            created_at=now,
            updated_at=now,
        )
        self.db.add(site)
        await self.db.flush()
        return site

    async def update(self, site_id: int, **fields) -> Site | None:
        """Update the given columns of a site and bump ``updated_at``."""
        site = await self.find_by_id(site_id)
        if site is None:
            return None

        for key, value in fields.items():
            setattr(site, key, value)
        site.updated_at = datetime.utcnow()

        await self.db.flush()
        return site

    async def delete(self, site_id: int) -> bool:
        result = await self.db.execute(delete(Site).where(Site.id == site_id))
        return result.rowcount > 0

    async def find_all_site_plugins(self, site_id: int) -> list[SitePlugin]:
        result = await self.db.execute(
            select(SitePlugin)
            .join(Plugin, SitePlugin.plugin_id == Plugin.id)
            .where(SitePlugin.site_id == site_id)
            .order_by(Plugin.slug)
        )
        return list(result.scalars().all())

    async def find_site_plugin(self, site_id: int, plugin_id: int) -> SitePlugin | None:
        result = await self.db.execute(
            select(SitePlugin).where(
                SitePlugin.site_id == site_id,
                SitePlugin.plugin_id == plugin_id,
            )
        )
        return result.scalar_one_or_none()

    async def create_site_plugin(
        self,
        site_id: int,
        plugin_id: int,
        installed: PluginVersion,
        is_active: bool,
    ) -> SitePlugin | None:
        plugin = await self.db.get(Plugin, plugin_id)
        if plugin is None:
            logger.warning(f"Cannot link site {site_id}: plugin {plugin_id} not found")
            return None

        site_plugin = SitePlugin(
            site_id=site_id,
            plugin_id=plugin_id,
            installed_version=installed.version,
            required_php_version=installed.required_php_version,
            required_wp_version=installed.required_wp_version,
            is_active=is_active,
        )
        site_plugin.plugin = plugin
        self.db.add(site_plugin)
        await self.db.flush()
        return site_plugin

    async def update_site_plugin(
        self,
        site_id: int,
        plugin_id: int,
        installed: PluginVersion,
        is_active: bool,
    ) -> SitePlugin | None:
        site_plugin = await self.find_site_plugin(site_id, plugin_id)
        if site_plugin is None:
            return None

        site_plugin.installed_version = installed.version
        site_plugin.required_php_version = installed.required_php_version
        site_plugin.required_wp_version = installed.required_wp_version
        site_plugin.is_active = is_active

        await self.db.flush()
        return site_plugin

    async def delete_site_plugin(self, site_id: int, plugin_id: int) -> bool:
        result = await self.db.execute(
            delete(SitePlugin).where(
                SitePlugin.site_id == site_id,
                SitePlugin.plugin_id == plugin_id,
            )
        )
        return result.rowcount > 0
