"""Tests for the HTTP-backed version and vulnerability providers."""

import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from wppd.services.latest_version.providers import (
    PhpLatestVersionProvider,
    WordPressApiPluginProvider,
    WordPressLatestVersionProvider,
)
from wppd.services.models import PluginVersion
from wppd.services.vulnerabilities.providers import WordFenceVulnerabilitiesProvider


def json_response(payload) -> MagicMock:
    response = MagicMock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


WORDFENCE_FEED = {
    "0001": {
        "title": "Akismet XSS",
        "software": [
            {
                "type": "plugin",
                "slug": "akismet",
                "affected_versions": {
                    "* - 4.1": {
                        "from_version": "*",
                        "from_inclusive": True,
                        "to_version": "4.1",
                        "to_inclusive": True,
                    },
                },
            },
        ],
        "cvss": {"score": 6.1},
    },
    "0002": {
        "title": "Core issue",
        "software": [{"type": "core", "slug": "wordpress", "affected_versions": {}}],
        "cvss": {"score": 9.8},
    },
    "0003": {
        "title": "Akismet SQLi",
        "software": [
            {
                "type": "plugin",
                "slug": "akismet",
                "affected_versions": {
                    "5.0 - 5.0.2": {
                        "from_version": "5.0",
                        "from_inclusive": True,
                        "to_version": "5.0.2",
                        "to_inclusive": False,
                    },
                },
            },
        ],
        "cvss": None,
    },
}


class TestWordPressApiPluginProvider:
    @pytest.fixture
    def provider(self):
        return WordPressApiPluginProvider("https://api.wordpress.org/plugins/info/1.0/")

    @pytest.mark.asyncio
    @patch("httpx.AsyncClient.get", new_callable=AsyncMock)
    async def test_returns_canonical_triple(self, mock_get, provider):
        mock_get.return_value = json_response({"version": "5.3", "requires_php": "7.2", "requires": "5.8"})

        result = await provider.get_latest_version("akismet")

        assert result == PluginVersion(version="5.3.0", required_php_version="7.2.0", required_wp_version="5.8.0")
        assert mock_get.call_args.args[0] == "https://api.wordpress.org/plugins/info/1.0/plugins/akismet.json"

    @pytest.mark.asyncio
    @patch("httpx.AsyncClient.get", new_callable=AsyncMock)
    async def test_unknown_plugin(self, mock_get, provider):
        mock_get.return_value = json_response({"error": "Plugin not found."})

        assert await provider.get_latest_version("nope") == PluginVersion()

    @pytest.mark.asyncio
    @patch("httpx.AsyncClient.get", new_callable=AsyncMock)
    async def test_timeout(self, mock_get, provider):
        mock_get.side_effect = httpx.TimeoutException("timed out")

        assert await provider.get_latest_version("akismet") == PluginVersion()

    @pytest.mark.asyncio
    @patch("httpx.AsyncClient.get", new_callable=AsyncMock)
    async def test_missing_requirements_stay_null(self, mock_get, provider):
        mock_get.return_value = json_response({"version": "1.0.0", "requires_php": False})

        result = await provider.get_latest_version("akismet")

        assert result.version == "1.0.0"
        assert result.required_php_version is None
        assert result.required_wp_version is None


class TestCoreVersionProviders:
    @pytest.mark.asyncio
    @patch("httpx.AsyncClient.get", new_callable=AsyncMock)
    async def test_php_picks_highest_major(self, mock_get):
        mock_get.return_value = json_response({
            "5": {"version": "5.6.40"},
            "8": {"version": "8.3.4"},
            "7": {"version": "7.4.33"},
        })
        provider = PhpLatestVersionProvider("https://php.example/releases")

        await provider.fetch_latest_version()

        assert provider.get_latest_version() == "8.3.4"

    @pytest.mark.asyncio
    @patch("httpx.AsyncClient.get", new_callable=AsyncMock)
    async def test_wordpress_first_offer(self, mock_get):
        mock_get.return_value = json_response({"offers": [{"version": "6.5"}, {"version": "6.4.3"}]})
        provider = WordPressLatestVersionProvider("https://wp.example/version-check")

        await provider.fetch_latest_version()

        assert provider.get_latest_version() == "6.5.0"

    @pytest.mark.asyncio
    @patch("httpx.AsyncClient.get", new_callable=AsyncMock)
    async def test_failure_resets_cache(self, mock_get):
        provider = WordPressLatestVersionProvider("https://wp.example/version-check")
        provider.latest_version = "6.4.0"
        mock_get.side_effect = httpx.ConnectError("unreachable")

        await provider.fetch_latest_version()

        assert provider.get_latest_version() is None

    @pytest.mark.asyncio
    @patch("httpx.AsyncClient.get", new_callable=AsyncMock)
    async def test_malformed_payload(self, mock_get):
        mock_get.return_value = json_response({"offers": []})
        provider = WordPressLatestVersionProvider("https://wp.example/version-check")

        await provider.fetch_latest_version()

        assert provider.get_latest_version() is None


class TestWordFenceVulnerabilitiesProvider:
    @pytest.fixture
    def provider(self):
        return WordFenceVulnerabilitiesProvider("https://wordfence.example/feed")

    @pytest.mark.asyncio
    async def test_unknown_slug_before_fetch(self, provider):
        assert await provider.get_vulnerabilities("akismet") is None

    @pytest.mark.asyncio
    @patch("httpx.AsyncClient.get", new_callable=AsyncMock)
    async def test_indexes_plugin_entries(self, mock_get, provider):
        mock_get.return_value = json_response(WORDFENCE_FEED)

        await provider.fetch_vulnerabilities()
        vulnerabilities = await provider.get_vulnerabilities("akismet")

        assert len(vulnerabilities) == 2
        first, second = vulnerabilities
        assert first.lower.version == "*"
        assert first.lower.inclusive is True
        assert first.upper.version == "4.1"
        assert first.score == 6.1
        assert second.upper.inclusive is False
        assert second.score == 0.0
        assert await provider.get_vulnerabilities("wordpress") is None

    @pytest.mark.asyncio
    @patch("httpx.AsyncClient.get", new_callable=AsyncMock)
    async def test_sends_api_key(self, mock_get):
        mock_get.return_value = json_response({})
        provider = WordFenceVulnerabilitiesProvider("https://wordfence.example/feed", api_key="abc")

        await provider.fetch_vulnerabilities()

        assert mock_get.call_args.kwargs["headers"]["Authorization"] == "Bearer abc"

    @pytest.mark.asyncio
    @patch("httpx.AsyncClient.get", new_callable=AsyncMock)
    async def test_failure_keeps_previous_index(self, mock_get, provider):
        mock_get.return_value = json_response(WORDFENCE_FEED)
        await provider.fetch_vulnerabilities()

        mock_get.side_effect = httpx.ConnectError("unreachable")
        with pytest.raises(httpx.HTTPError):
            await provider.fetch_vulnerabilities()

        assert len(await provider.get_vulnerabilities("akismet")) == 2
