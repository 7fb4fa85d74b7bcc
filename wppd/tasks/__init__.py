"""Scheduled background tasks."""

from wppd.tasks.delete_plugins_unused import DeletePluginsUnusedTask
from wppd.tasks.delete_sites_inactive import DeleteSitesInactiveTask
from wppd.tasks.send_report_mail import SendReportMailTask
from wppd.tasks.update_core_versions import UpdateLatestCoreVersionTask
from wppd.tasks.update_plugins_latest_version import UpdatePluginsLatestVersionTask
from wppd.tasks.update_plugins_vulnerabilities import UpdatePluginsVulnerabilitiesTask
from wppd.tasks.update_wordfence_vulnerabilities import UpdateWordFenceVulnerabilitiesTask

__all__ = [
    "DeletePluginsUnusedTask",
    "DeleteSitesInactiveTask",
    "SendReportMailTask",
    "UpdateLatestCoreVersionTask",
    "UpdatePluginsLatestVersionTask",
    "UpdatePluginsVulnerabilitiesTask",
    "UpdateWordFenceVulnerabilitiesTask",
]
