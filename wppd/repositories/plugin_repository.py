"""Plugin and plugin vulnerability persistence."""

import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from wppd.models.database import Plugin, PluginVulnerability, SitePlugin
from wppd.services.models import PluginVersion, Vulnerability

logger = logging.getLogger(__name__)


class PluginRepository:
    """Repository for plugin master records and their vulnerabilities."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_all(self) -> list[Plugin]:
        result = await self.db.execute(select(Plugin).order_by(Plugin.slug))
        return list(result.scalars().all())

    async def find_by_slug(self, slug: str) -> Plugin | None:
        result = await self.db.execute(select(Plugin).where(Plugin.slug == slug).limit(1))
        return result.scalar_one_or_none()

    async def create(
        self,
        slug: str,
        name: str,
        latest: PluginVersion | None = None,
    ) -> Plugin | None:
        """Create a plugin; without ``latest`` the version triple stays null."""
        latest = latest or PluginVersion()
        plugin = Plugin(
            slug=slug,
            name=name,
            latest_version=latest.version,
            latest_php_version=latest.required_php_version,
            latest_wp_version=latest.required_wp_version,
        )
        self.db.add(plugin)
        await self.db.flush()
        return plugin

    async def update_latest_version(self, plugin_id: int, latest: PluginVersion) -> Plugin | None:
        plugin = await self.db.get(Plugin, plugin_id)
        if plugin is None:
            return None

        plugin.latest_version = latest.version
        plugin.latest_php_version = latest.required_php_version
        plugin.latest_wp_version = latest.required_wp_version

        await self.db.flush()
        return plugin

    async def delete_unused(self) -> bool:
        """Delete every plugin no site links to.

        Returns:
            True when at least one plugin was deleted.
        """
        linked = select(SitePlugin.plugin_id)
        result = await self.db.execute(
            delete(Plugin)
            .where(Plugin.id.not_in(linked))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    async def find_vulnerabilities(self, plugin_id: int) -> list[Vulnerability]:
        result = await self.db.execute(
            select(PluginVulnerability)
            .where(PluginVulnerability.plugin_id == plugin_id)
            .order_by(PluginVulnerability.id)
        )
        return [row.to_vulnerability() for row in result.scalars().all()]

    async def delete_all_vulnerabilities(self, plugin_id: int) -> int:
        result = await self.db.execute(
            delete(PluginVulnerability).where(PluginVulnerability.plugin_id == plugin_id)
        )
        return result.rowcount

    async def create_vulnerability(self, plugin_id: int, vulnerability: Vulnerability) -> bool:
        self.db.add(
            PluginVulnerability(
                plugin_id=plugin_id,
                from_version=vulnerability.lower.version,
                from_inclusive=vulnerability.lower.inclusive,
                to_version=vulnerability.upper.version,
                to_inclusive=vulnerability.upper.inclusive,
                score=vulnerability.score,
            )
        )
        await self.db.flush()
        return True

    async def replace_vulnerabilities(
        self,
        plugin_id: int,
        vulnerabilities: list[Vulnerability],
    ) -> int:
        """Delete every stored vulnerability of a plugin, then insert the new set.

        No diffing happens. Callers own the transaction boundary, so readers
        only see the empty intermediate state inside the same transaction.

        Returns:
            Number of vulnerabilities inserted.
        """
        await self.delete_all_vulnerabilities(plugin_id)
        for vulnerability in vulnerabilities:
            await self.create_vulnerability(plugin_id, vulnerability)
        return len(vulnerabilities)
