"""Reconcile a site's stored plugin links with a reported inventory."""

import logging
from dataclasses import dataclass, field

from wppd.repositories import PluginRepository, SiteRepository
from wppd.services.models import ReportedPlugin
from wppd.services.versions import slug_from_install_path

logger = logging.getLogger(__name__)


@dataclass
class ReconciliationResult:
    """Slugs touched by one reconciliation run."""
    created: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


class SitePluginReconciler:
    """Bring a site's plugin links in line with its latest inventory report.

    Entries are processed one after the other. A failure on one entry is
    logged and skipped; it never aborts the run. Links whose slug is missing
    from the report are pruned afterwards, so submitting the same inventory
    twice converges to the same link set.
    """

    def __init__(self, site_repository: SiteRepository, plugin_repository: PluginRepository):
        self.site_repository = site_repository
        self.plugin_repository = plugin_repository

    async def reconcile(self, site_id: int, plugins: list[ReportedPlugin]) -> ReconciliationResult:
        result = ReconciliationResult()

        for reported in plugins:
            await self._apply(site_id, reported, result)

        await self._prune(site_id, plugins, result)

        logger.info(
            f"Reconciled site {site_id}: {len(result.created)} created, "
            f"{len(result.updated)} updated, {len(result.deleted)} deleted, "
            f"{len(result.skipped)} skipped"
        )
        return result

    async def _apply(self, site_id: int, reported: ReportedPlugin, result: ReconciliationResult) -> None:
        slug = slug_from_install_path(reported.file)
        if slug is None:
            logger.warning(f"Invalid plugin file provided: {reported.file}")
            result.skipped.append(reported.file)
            return

        if await self.plugin_repository.find_by_slug(slug) is None:
            logger.info(f"Plugin {slug} not found, creating new plugin")
            created = await self.plugin_repository.create(slug=slug, name=reported.name)
            if not created:
                logger.error(f"Failed to create new plugin {slug}")
                result.skipped.append(slug)
                return

        plugin = await self.plugin_repository.find_by_slug(slug)
        if plugin is None:
            logger.error(f"Plugin {slug} not found after creation")
            result.skipped.append(slug)
            return

        if await self.site_repository.find_site_plugin(site_id, plugin.id) is None:
            site_plugin = await self.site_repository.create_site_plugin(
                site_id, plugin.id, reported.installed, reported.active
            )
            if not site_plugin:
                logger.warning(f"Failed to create site plugin {slug} for site {site_id}")
                result.skipped.append(slug)
                return
            result.created.append(slug)
        else:
            site_plugin = await self.site_repository.update_site_plugin(
                site_id, plugin.id, reported.installed, reported.active
            )
            if not site_plugin:
                logger.warning(f"Failed to update site plugin {slug} for site {site_id}")
                result.skipped.append(slug)
                return
            result.updated.append(slug)

    async def _prune(self, site_id: int, plugins: list[ReportedPlugin], result: ReconciliationResult) -> None:
        reported_slugs = {slug_from_install_path(reported.file) for reported in plugins}

        for site_plugin in await self.site_repository.find_all_site_plugins(site_id):
            slug = site_plugin.plugin.slug
            if slug in reported_slugs:
                continue

            if await self.site_repository.delete_site_plugin(site_id, site_plugin.plugin_id):
                logger.info(f"Removed site plugin {slug} no longer reported by site {site_id}")
                result.deleted.append(slug)
            else:
                logger.warning(f"Failed to delete site plugin {slug} for site {site_id}")
