"""Fleet report: outdated plugins per site, grouped by environment."""

import logging
from dataclasses import dataclass, field
from html import escape

from wppd.repositories import SiteRepository
from wppd.services.latest_version import LatestVersionResolver
from wppd.services.models import SITE_ENVIRONMENTS, VersionStatus
from wppd.services.versions import categorize_version_diff
from wppd.services.vulnerabilities import VulnerabilitiesResolver, summarize

logger = logging.getLogger(__name__)

REPORT_SUBJECT = "WPPD Report"

PLUGIN_PRIORITY = {"major": 1, "minor": 2, "patch": 3, "igl": 4}
ENVIRONMENT_PRIORITY = {"production": 1, "staging": 2, "development": 3}

DIFF_COLORS = {
    "major": "#f2495d",
    "minor": "#ff9830",
    "patch": "#fade2a",
    "igl": "#0794f2",
    "same": "#73bf69",
    "invalid": "#808080",
}


@dataclass
class OutdatedPlugin:
    slug: str
    is_active: bool
    installed_version: str
    latest_version: str
    difference: str
    vulnerability_count: int = 0
    highest_score: float = 0.0


@dataclass
class SiteReport:
    name: str
    url: str
    environment: str
    php_version: VersionStatus
    wp_version: VersionStatus
    total_plugins: int = 0
    outdated: list[OutdatedPlugin] = field(default_factory=list)

    @property
    def matching_plugins(self) -> int:
        return self.total_plugins - len(self.outdated)


def version_status(installed: str | None, latest: str | None) -> VersionStatus:
    diff = categorize_version_diff(installed, latest) if installed and latest else None
    return VersionStatus(installed=installed, latest=latest, diff=diff)


def sort_plugins(plugins: list[OutdatedPlugin]) -> list[OutdatedPlugin]:
    """Order by diff category (major first), then by slug."""
    return sorted(plugins, key=lambda p: (PLUGIN_PRIORITY[p.difference], p.slug))


def group_sites(reports: list[SiteReport]) -> dict[str, list[SiteReport]]:
    """Sort sites by environment priority and group them, keeping input order within a group."""
    ordered = sorted(reports, key=lambda r: ENVIRONMENT_PRIORITY.get(r.environment, 4))

    grouped: dict[str, list[SiteReport]] = {}
    for report in ordered:
        grouped.setdefault(report.environment, []).append(report)
    return grouped


class ReportBuilder:
    """Collect outdated plugins for every site and render the report mail."""

    def __init__(
        self,
        latest_version_resolver: LatestVersionResolver,
        vulnerabilities_resolver: VulnerabilitiesResolver,
    ):
        self.latest_version_resolver = latest_version_resolver
        self.vulnerabilities_resolver = vulnerabilities_resolver

    async def build(self, site_repository: SiteRepository) -> dict[str, list[SiteReport]]:
        latest_php = await self.latest_version_resolver.resolve_php()
        latest_wp = await self.latest_version_resolver.resolve_wp()

        reports = []
        for site in await site_repository.find_all():
            site_plugins = await site_repository.find_all_site_plugins(site.id)
            outdated = []

            for site_plugin in site_plugins:
                installed = site_plugin.installed_version
                latest = site_plugin.plugin.latest_version
                if installed is None or latest is None:
                    continue

                difference = categorize_version_diff(installed, latest)
                if difference in ("invalid", "same"):
                    continue

                slug = site_plugin.plugin.slug
                vulnerabilities = await self.vulnerabilities_resolver.resolve(slug)
                if vulnerabilities is None:
                    logger.warning(f"Failed to fetch vulnerabilities for plugin {slug}")
                    continue

                summary = summarize(vulnerabilities, installed)
                outdated.append(
                    OutdatedPlugin(
                        slug=slug,
                        is_active=site_plugin.is_active,
                        installed_version=installed,
                        latest_version=latest,
                        difference=difference,
                        vulnerability_count=summary.count,
                        highest_score=summary.highest_score,
                    )
                )

            reports.append(
                SiteReport(
                    name=site.name,
                    url=site.url,
                    environment=site.environment,
                    php_version=version_status(site.php_version, latest_php),
                    wp_version=version_status(site.wp_version, latest_wp),
                    total_plugins=len(site_plugins),
                    outdated=sort_plugins(outdated),
                )
            )

        return group_sites(reports)

    def render_html(self, grouped: dict[str, list[SiteReport]]) -> str:
        html = f"""
<!DOCTYPE html>
<html>
<head>
    <style>
        * {{ font-family: Arial, sans-serif; font-size: 14px; }}
        hr {{ margin-bottom: 16px; margin-top: 16px; }}
        span#title {{ font-size: 24px; font-weight: bold; }}
        span.environment-title {{ font-size: 20px; font-weight: bold; }}
        table {{ width: 100%; }}
        td {{ padding: 4px; }}
        tr.odd > td {{ background: #ddd; }}
        tr.even > td {{ background: #eee; }}
        td.key {{ width: 20%; }}
        td.title {{ background: #ccc; font-weight: bold; }}
    </style>
</head>
<body>
    <span id="title">{REPORT_SUBJECT}</span>
"""

        for environment in SITE_ENVIRONMENTS:
            if not grouped.get(environment):
                continue

            html += f"""
    <hr>
    <div class="environment-wrapper">
        <span class="environment-title">{environment.capitalize()}</span>
"""
            for report in grouped[environment]:
                html += self._render_site(report)
            html += """
    </div>
"""

        html += """
</body>
</html>
"""
        return html

    def _render_site(self, report: SiteReport) -> str:
        html = f"""
        <hr>
        <div class="site-wrapper">
            <table>
                <tbody>
                    <tr class="odd"><td class="key title">Site</td><td colspan="6">{escape(report.name)}</td></tr>
                    <tr class="even"><td class="key title">URL</td><td colspan="6">{escape(report.url)}</td></tr>
{self._render_version_rows("PHP Version", report.php_version)}
{self._render_version_rows("WP Version", report.wp_version)}
                    <tr class="odd"><td class="key title">Total Plugins</td><td colspan="6">{report.total_plugins}</td></tr>
                    <tr class="even"><td class="key title">Plugins with matching versions</td><td colspan="6">{report.matching_plugins}</td></tr>
"""

        if report.outdated:
            html += f"""
                    <tr class="odd">
                        <td class="key title" rowspan="{len(report.outdated) + 1}">Plugins with mismatching versions</td>
                        <td class="title">Plugin ID</td>
                        <td class="title" style="width: 10%;">Active</td>
                        <td class="title" style="width: 10%;">Installed Version</td>
                        <td class="title" style="width: 10%;">Latest Version</td>
                        <td class="title" style="width: 10%;">Difference</td>
                        <td class="title" style="width: 10%;">Severity</td>
                    </tr>
"""
            for index, plugin in enumerate(report.outdated):
                row_class = "even" if index % 2 == 0 else "odd"
                severity = (
                    f"{plugin.vulnerability_count} - {plugin.highest_score:g}"
                    if plugin.vulnerability_count > 0
                    else "-"
                )
                html += f"""
                    <tr class="{row_class}">
                        <td>{escape(plugin.slug)}</td>
                        <td>{"Yes" if plugin.is_active else "No"}</td>
                        <td>{escape(plugin.installed_version)}</td>
                        <td>{escape(plugin.latest_version)}</td>
                        <td style="color: {diff_color(plugin.difference)}; font-weight: bold;">{plugin.difference.upper()}</td>
                        <td>{severity}</td>
                    </tr>
"""
        else:
            html += """
                    <tr class="odd"><td class="key title">Plugins with mismatching versions</td><td colspan="6">0</td></tr>
"""

        html += """
                </tbody>
            </table>
        </div>
"""
        return html

    def _render_version_rows(self, label: str, status: VersionStatus) -> str:
        diff = status.diff.upper() if status.diff else "-"
        return f"""
                    <tr class="odd">
                        <td class="key title" rowspan="2">{label}</td>
                        <td class="title">Installed</td>
                        <td class="title">Latest</td>
                        <td class="title">Diff</td>
                        <td class="title" colspan="3"></td>
                    </tr>
                    <tr class="even">
                        <td>{escape(status.installed or "-")}</td>
                        <td>{escape(status.latest or "-")}</td>
                        <td style="color: {diff_color(status.diff)}; font-weight: bold;">{diff}</td>
                        <td colspan="3"></td>
                    </tr>"""


def diff_color(diff: str | None) -> str:
    return DIFF_COLORS.get(diff, "black")
