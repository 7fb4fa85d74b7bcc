"""Plugin vulnerability resolution."""

import logging
from typing import Protocol

from wppd.services.models import Vulnerability

logger = logging.getLogger(__name__)


class VulnerabilitiesProvider(Protocol):
    async def get_vulnerabilities(self, slug: str) -> list[Vulnerability] | None: ...


class VulnerabilitiesResolver:
    """Query vulnerability providers in registration order.

    A provider answering ``None`` has no data for the slug; an empty list is
    a definitive "no known vulnerabilities" and stops the chain.
    """

    def __init__(self):
        self.providers: list[VulnerabilitiesProvider] = []

    def add_provider(self, provider: VulnerabilitiesProvider) -> None:
        self.providers.append(provider)

    async def resolve(self, slug: str) -> list[Vulnerability] | None:
        for provider in self.providers:
            vulnerabilities = await provider.get_vulnerabilities(slug)
            if vulnerabilities is not None:
                return vulnerabilities

        return None
