"""Persistence repositories."""

from wppd.repositories.plugin_repository import PluginRepository
from wppd.repositories.site_repository import SiteRepository

__all__ = ["PluginRepository", "SiteRepository"]
