"""Latest version providers."""

from wppd.services.latest_version.providers.core import (
    PhpLatestVersionProvider,
    WordPressLatestVersionProvider,
)
from wppd.services.latest_version.providers.wordpress_api import WordPressApiPluginProvider

__all__ = [
    "PhpLatestVersionProvider",
    "WordPressApiPluginProvider",
    "WordPressLatestVersionProvider",
]
