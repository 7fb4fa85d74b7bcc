"""Latest version resolution for plugins, PHP and WordPress core."""

from wppd.services.latest_version.resolver import LatestVersionResolver

__all__ = ["LatestVersionResolver"]
