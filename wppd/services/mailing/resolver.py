"""Outgoing mail dispatch."""

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class MailProviderNotSetError(RuntimeError):
    """Raised when mail is sent before a provider was configured."""

    def __init__(self):
        super().__init__("Mail provider is not set")


class MailProvider(Protocol):
    async def send(self, sender: str, recipient: str, subject: str, html: str) -> bool: ...


class MailResolver:
    """Hold the configured mail provider and send through it."""

    def __init__(self):
        self.provider: MailProvider | None = None

    def set_provider(self, provider: MailProvider) -> None:
        self.provider = provider

    async def send_mail(self, sender: str, recipient: str, subject: str, html: str) -> bool:
        """Send an HTML mail.

        Returns:
            Whether the provider accepted the message.

        Raises:
            MailProviderNotSetError: When no provider is configured.
        """
        if self.provider is None:
            raise MailProviderNotSetError()

        return await self.provider.send(sender, recipient, subject, html)
