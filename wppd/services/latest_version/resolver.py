"""Latest version resolution.

Plugin versions come from an ordered chain of providers; the first provider
that knows a version wins. PHP and WordPress core versions come from a single
cached provider each.
"""

import logging
from typing import Protocol

from wppd.services.models import PluginVersion

logger = logging.getLogger(__name__)


class PluginVersionProvider(Protocol):
    async def get_latest_version(self, slug: str) -> PluginVersion: ...


class CoreVersionProvider(Protocol):
    def get_latest_version(self) -> str | None: ...

    async def fetch_latest_version(self) -> None: ...


class LatestVersionResolver:
    """Resolve latest plugin, PHP and WordPress versions."""

    def __init__(self):
        self.providers: list[PluginVersionProvider] = []
        self.php_provider: CoreVersionProvider | None = None
        self.wp_provider: CoreVersionProvider | None = None

    def add_plugin_provider(self, provider: PluginVersionProvider) -> None:
        self.providers.append(provider)

    def set_php_provider(self, provider: CoreVersionProvider) -> None:
        self.php_provider = provider

    def set_wp_provider(self, provider: CoreVersionProvider) -> None:
        self.wp_provider = provider

    async def resolve_plugin(self, slug: str) -> PluginVersion:
        """Query providers in registration order.

        Returns:
            The first result with a known ``version``, otherwise an all-null
            version triple.
        """
        for provider in self.providers:
            version = await provider.get_latest_version(slug)
            if version.version is not None:
                return version

        logger.debug(f"No provider knows the latest version of {slug}")
        return PluginVersion()

    async def resolve_php(self) -> str | None:
        if self.php_provider is None:
            return None
        return self.php_provider.get_latest_version()

    async def resolve_wp(self) -> str | None:
        if self.wp_provider is None:
            return None
        return self.wp_provider.get_latest_version()
