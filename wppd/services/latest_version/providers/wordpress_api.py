"""WordPress.org plugin directory client."""

import logging

import httpx

from wppd.services.models import PluginVersion
from wppd.services.versions import format_version

logger = logging.getLogger(__name__)


def _canonical(raw) -> str | None:
    if not raw or not isinstance(raw, str):
        return None
    return format_version(raw)


class WordPressApiPluginProvider:
    """Latest plugin versions from the WordPress.org plugin info API."""

    def __init__(self, base_url: str, timeout: float = 15.0):
        """Initialize the provider.

        Args:
            base_url: Plugin info API base, e.g. ``https://api.wordpress.org/plugins/info/1.0``
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def get_latest_version(self, slug: str) -> PluginVersion:
        """Fetch the latest version triple of a plugin.

        Returns:
            Canonicalised version triple, all-null when the plugin is unknown
            or the request fails.
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(
                    f"{self.base_url}/plugins/{slug}.json",
                    headers={"Content-Type": "application/json"},
                )
                response.raise_for_status()
                data = response.json()

        except httpx.TimeoutException:
            logger.warning(f"WordPress.org lookup timeout for {slug}")
            return PluginVersion()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"WordPress.org lookup failed for {slug}: {e}")
            return PluginVersion()

        # Unknown plugins come back as 200 with an error body
        if not isinstance(data, dict) or "error" in data:
            return PluginVersion()

        return PluginVersion(
            version=_canonical(data.get("version")),
            required_php_version=_canonical(data.get("requires_php")),
            required_wp_version=_canonical(data.get("requires")),
        )
