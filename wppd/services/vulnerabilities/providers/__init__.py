"""Vulnerability providers."""

from wppd.services.vulnerabilities.providers.wordfence import WordFenceVulnerabilitiesProvider

__all__ = ["WordFenceVulnerabilitiesProvider"]
