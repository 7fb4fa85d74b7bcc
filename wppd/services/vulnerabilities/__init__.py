"""Plugin vulnerability resolution."""

from wppd.services.vulnerabilities.relevance import affects_version, summarize
from wppd.services.vulnerabilities.resolver import VulnerabilitiesResolver

__all__ = ["VulnerabilitiesResolver", "affects_version", "summarize"]
