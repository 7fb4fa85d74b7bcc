"""Mail providers."""

from wppd.services.mailing.providers.ses import SesMailProvider

__all__ = ["SesMailProvider"]
