"""Tests for the fleet report builder."""

import pytest
from unittest.mock import AsyncMock, MagicMock

from wppd.repositories import SiteRepository
from wppd.services.models import VersionBound, VersionStatus, Vulnerability
from wppd.services.report_builder import (
    OutdatedPlugin,
    ReportBuilder,
    SiteReport,
    diff_color,
    group_sites,
    sort_plugins,
    version_status,
)
from wppd.tests.conftest import add_plugin, add_site, link_plugin


def outdated(slug: str, difference: str) -> OutdatedPlugin:
    return OutdatedPlugin(
        slug=slug, is_active=True, installed_version="1.0.0", latest_version="2.0.0", difference=difference
    )


def site_report(name: str, environment: str) -> SiteReport:
    return SiteReport(
        name=name,
        url=f"https://{name}.example",
        environment=environment,
        php_version=VersionStatus(),
        wp_version=VersionStatus(),
    )


def make_builder(vulnerabilities=None, php="8.3.0", wp="6.5.0") -> ReportBuilder:
    latest = MagicMock()
    latest.resolve_php = AsyncMock(return_value=php)
    latest.resolve_wp = AsyncMock(return_value=wp)
    resolver = MagicMock()
    resolver.resolve = AsyncMock(side_effect=lambda slug: (vulnerabilities or {}).get(slug, []))
    return ReportBuilder(latest, resolver)


class TestSorting:
    def test_plugins_by_category_then_slug(self):
        plugins = [
            outdated("zeta", "patch"),
            outdated("beta", "igl"),
            outdated("gamma", "major"),
            outdated("alpha", "patch"),
            outdated("delta", "minor"),
            outdated("alpha-2", "major"),
        ]

        ordered = [(p.difference, p.slug) for p in sort_plugins(plugins)]

        assert ordered == [
            ("major", "alpha-2"),
            ("major", "gamma"),
            ("minor", "delta"),
            ("patch", "alpha"),
            ("patch", "zeta"),
            ("igl", "beta"),
        ]

    def test_sites_grouped_in_environment_priority(self):
        reports = [
            site_report("dev-1", "development"),
            site_report("stage-1", "staging"),
            site_report("prod-1", "production"),
            site_report("dev-2", "development"),
            site_report("prod-2", "production"),
        ]

        grouped = group_sites(reports)

        assert list(grouped) == ["production", "staging", "development"]
        assert [r.name for r in grouped["production"]] == ["prod-1", "prod-2"]
        assert [r.name for r in grouped["development"]] == ["dev-1", "dev-2"]

    def test_version_status(self):
        assert version_status("8.1.0", "8.3.0").diff == "minor"
        assert version_status(None, "8.3.0").diff is None
        assert version_status("8.1.0", None).diff is None


class TestReportBuilder:
    @pytest.mark.asyncio
    async def test_collects_outdated_plugins(self, db):
        site = await add_site(db, php_version="8.1.0", wp_version="6.5.0")
        await link_plugin(db, site, await add_plugin(db, "current", "1.0.0"), "1.0.0")
        await link_plugin(db, site, await add_plugin(db, "minor-behind", "1.2.0"), "1.0.0")
        await link_plugin(db, site, await add_plugin(db, "major-behind", "3.0.0"), "1.0.0", is_active=False)
        await link_plugin(db, site, await add_plugin(db, "unresolved", None), "1.0.0")
        await link_plugin(db, site, await add_plugin(db, "garbage", "1.0.0"), "dev-build")

        vulnerabilities = {
            "major-behind": [
                Vulnerability(VersionBound("*", True), VersionBound("2.0.0", False), 7.5),
                Vulnerability(VersionBound("*", True), VersionBound("0.5.0", True), 9.9),
            ],
        }
        grouped = await make_builder(vulnerabilities).build(SiteRepository(db))

        report = grouped["production"][0]
        assert report.total_plugins == 5
        assert report.matching_plugins == 3
        assert [p.slug for p in report.outdated] == ["major-behind", "minor-behind"]
        major = report.outdated[0]
        assert major.is_active is False
        assert major.vulnerability_count == 1
        assert major.highest_score == 7.5
        assert report.php_version.diff == "minor"
        assert report.wp_version.diff == "same"

    @pytest.mark.asyncio
    async def test_skips_plugins_without_vulnerability_data(self, db):
        site = await add_site(db)
        await link_plugin(db, site, await add_plugin(db, "akismet", "2.0.0"), "1.0.0")

        builder = make_builder()
        builder.vulnerabilities_resolver.resolve = AsyncMock(return_value=None)
        grouped = await builder.build(SiteRepository(db))

        assert grouped["production"][0].outdated == []

    @pytest.mark.asyncio
    async def test_unknown_core_versions(self, db):
        await add_site(db, php_version=None)

        grouped = await make_builder(php=None).build(SiteRepository(db))

        status = grouped["production"][0].php_version
        assert status.installed is None
        assert status.diff is None


class TestRenderHtml:
    def test_renders_environments_in_order(self):
        prod = site_report("prod", "production")
        prod.total_plugins = 2
        prod.outdated = [outdated("akismet", "major")]
        prod.outdated[0].vulnerability_count = 2
        prod.outdated[0].highest_score = 9.8
        dev = site_report("dev", "development")

        html = make_builder().render_html(group_sites([dev, prod]))

        assert html.index("Production") < html.index("Development")
        assert "Staging" not in html
        assert "2 - 9.8" in html
        assert "MAJOR" in html
        assert "#f2495d" in html
        assert "<td>Yes</td>" in html

    def test_escapes_site_name(self):
        report = site_report("x", "production")
        report.name = "<script>alert(1)</script>"

        html = make_builder().render_html(group_sites([report]))

        assert "<script>" not in html
        assert "&lt;script&gt;" in html

    def test_diff_colors(self):
        assert diff_color("minor") == "#ff9830"
        assert diff_color("same") == "#73bf69"
        assert diff_color(None) == "black"
