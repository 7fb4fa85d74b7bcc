"""Outgoing mail."""

from wppd.services.mailing.resolver import MailProviderNotSetError, MailResolver

__all__ = ["MailProviderNotSetError", "MailResolver"]
