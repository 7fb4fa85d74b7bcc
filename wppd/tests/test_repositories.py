"""Tests for the site and plugin repositories."""

import pytest

from wppd.repositories import PluginRepository, SiteRepository
from wppd.services.models import PluginVersion, VersionBound, Vulnerability
from wppd.tests.conftest import add_plugin, add_site, link_plugin


def vulnerability(to: str, score: float) -> Vulnerability:
    return Vulnerability(lower=VersionBound("*", True), upper=VersionBound(to, False), score=score)


class TestSiteRepository:
    @pytest.mark.asyncio
    async def test_create_and_find(self, db):
        repository = SiteRepository(db)
        site = await repository.create(
            name="Blog", url="https://blog.example", token="t1", environment="staging"
        )

        assert site.id is not None
        assert (await repository.find_by_id(site.id)).name == "Blog"
        assert (await repository.find_by_name_and_url("Blog", "https://blog.example")).id == site.id
        assert await repository.find_by_name_and_url("Blog", "https://other.example") is None

    @pytest.mark.asyncio
    async def test_find_by_id_out_of_range(self, db):
        repository = SiteRepository(db)

        assert await repository.find_by_id(2**63) is None
        assert await repository.find_by_id(99999999999999999999999) is None

    @pytest.mark.asyncio
    async def test_find_all_filters_environment(self, db):
        await add_site(db, name="A", environment="production")
        await add_site(db, name="B", environment="staging")
        repository = SiteRepository(db)

        assert [s.name for s in await repository.find_all()] == ["A", "B"]
        assert [s.name for s in await repository.find_all(environment="staging")] == ["B"]

    @pytest.mark.asyncio
    async def test_update_missing_site(self, db):
        assert await SiteRepository(db).update(999, name="x") is None

    @pytest.mark.asyncio
    async def test_update_bumps_updated_at(self, db):
        site = await add_site(db)
        before = site.updated_at

        updated = await SiteRepository(db).update(site.id, token="new")

        assert updated.token == "new"
        assert updated.updated_at >= before

    @pytest.mark.asyncio
    async def test_delete_cascades_to_links(self, db):
        site = await add_site(db)
        plugin = await add_plugin(db, "akismet")
        await link_plugin(db, site, plugin, "1.0.0")
        repository = SiteRepository(db)

        assert await repository.delete(site.id) is True
        assert await repository.find_site_plugin(site.id, plugin.id) is None
        assert await repository.delete(site.id) is False

    @pytest.mark.asyncio
    async def test_site_plugin_lifecycle(self, db):
        site = await add_site(db)
        plugin = await add_plugin(db, "akismet")
        repository = SiteRepository(db)

        created = await repository.create_site_plugin(site.id, plugin.id, PluginVersion(version="1.0.0"), True)
        assert created.plugin.slug == "akismet"

        updated = await repository.update_site_plugin(site.id, plugin.id, PluginVersion(version="1.1.0"), False)
        assert updated.installed_version == "1.1.0"
        assert updated.is_active is False

        assert await repository.delete_site_plugin(site.id, plugin.id) is True
        assert await repository.delete_site_plugin(site.id, plugin.id) is False
        assert await repository.update_site_plugin(site.id, plugin.id, PluginVersion(), True) is None

    @pytest.mark.asyncio
    async def test_create_site_plugin_unknown_plugin(self, db):
        site = await add_site(db)
        assert await SiteRepository(db).create_site_plugin(site.id, 999, PluginVersion(), True) is None

    @pytest.mark.asyncio
    async def test_site_plugins_ordered_by_slug(self, db):
        site = await add_site(db)
        for slug in ("zeta", "alpha", "mid"):
            await link_plugin(db, site, await add_plugin(db, slug), "1.0.0")

        links = await SiteRepository(db).find_all_site_plugins(site.id)

        assert [link.plugin.slug for link in links] == ["alpha", "mid", "zeta"]


class TestPluginRepository:
    @pytest.mark.asyncio
    async def test_create_with_placeholder_version(self, db):
        plugin = await PluginRepository(db).create(slug="akismet", name="Akismet")

        assert plugin.latest == PluginVersion()

    @pytest.mark.asyncio
    async def test_update_latest_version(self, db):
        repository = PluginRepository(db)
        plugin = await repository.create(slug="akismet", name="Akismet")

        latest = PluginVersion(version="5.3.0", required_php_version="7.2.0", required_wp_version="5.8.0")
        updated = await repository.update_latest_version(plugin.id, latest)

        assert updated.latest == latest
        assert await repository.update_latest_version(999, latest) is None

    @pytest.mark.asyncio
    async def test_delete_unused(self, db):
        site = await add_site(db)
        used = await add_plugin(db, "used")
        await add_plugin(db, "unused")
        await link_plugin(db, site, used, "1.0.0")
        repository = PluginRepository(db)

        assert await repository.delete_unused() is True
        db.expunge_all()
        assert [p.slug for p in await repository.find_all()] == ["used"]
        assert await repository.delete_unused() is False

    @pytest.mark.asyncio
    async def test_replace_vulnerabilities(self, db):
        plugin = await add_plugin(db, "akismet")
        repository = PluginRepository(db)

        await repository.replace_vulnerabilities(plugin.id, [vulnerability("1.0.0", 5.0), vulnerability("2.0.0", 7.5)])
        count = await repository.replace_vulnerabilities(plugin.id, [vulnerability("3.0.0", 9.0)])

        stored = await repository.find_vulnerabilities(plugin.id)
        assert count == 1
        assert [(v.upper.version, v.score) for v in stored] == [("3.0.0", 9.0)]
