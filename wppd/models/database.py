"""SQLAlchemy ORM database models for WPPD.

Defines all database tables and relationships using SQLAlchemy 2.0
declarative mapping with ``Mapped`` type annotations.

Core entity relationships:
    Site --1:N--> SitePlugin <--N:1-- Plugin
    Plugin --1:N--> PluginVulnerability
"""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from wppd.services.models import PluginVersion, VersionBound, Vulnerability


class Base(DeclarativeBase):
    """Base class for all ORM models."""


class Site(Base):
    """A registered WordPress site.

    ``name`` + ``url`` identify a site on re-registration. The bearer token is
    rotated on every (re-)registration and checked on inventory updates.
    ``updated_at`` drives the inactive-site sweep.
    """

    __tablename__ = "sites"
    __table_args__ = (UniqueConstraint("name", "url", name="uq_sites_name_url"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    url: Mapped[str] = mapped_column(String(1024), nullable=False)
    php_version: Mapped[str | None] = mapped_column(String(32))
    wp_version: Mapped[str | None] = mapped_column(String(32))
    token: Mapped[str] = mapped_column(String(128), nullable=False)
    environment: Mapped[str] = mapped_column(String(16), nullable=False, default="production")
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    plugins: Mapped[list["SitePlugin"]] = relationship(
        back_populates="site", cascade="all, delete-orphan", passive_deletes=True
    )


class Plugin(Base):
    """Master record of a plugin, keyed by slug.

    The latest-version columns are either all null (never resolved) or the
    result of the most recent successful resolution.
    """

    __tablename__ = "plugins"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(512), nullable=False)
    latest_version: Mapped[str | None] = mapped_column(String(32))
    latest_php_version: Mapped[str | None] = mapped_column(String(32))
    latest_wp_version: Mapped[str | None] = mapped_column(String(32))

    sites: Mapped[list["SitePlugin"]] = relationship(
        back_populates="plugin", cascade="all, delete-orphan", passive_deletes=True
    )
    vulnerabilities: Mapped[list["PluginVulnerability"]] = relationship(
        back_populates="plugin", cascade="all, delete-orphan", passive_deletes=True
    )

    @property
    def latest(self) -> PluginVersion:
        return PluginVersion(
            version=self.latest_version,
            required_php_version=self.latest_php_version,
            required_wp_version=self.latest_wp_version,
        )


class SitePlugin(Base):
    """Installation of a plugin on a site, identified by (site_id, plugin_id)."""

    __tablename__ = "site_plugins"

    site_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("sites.id", ondelete="CASCADE"), primary_key=True
    )
    plugin_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("plugins.id", ondelete="CASCADE"), primary_key=True
    )
    installed_version: Mapped[str | None] = mapped_column(String(32))
    required_php_version: Mapped[str | None] = mapped_column(String(32))
    required_wp_version: Mapped[str | None] = mapped_column(String(32))
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    site: Mapped["Site"] = relationship(back_populates="plugins")
    plugin: Mapped["Plugin"] = relationship(back_populates="sites", lazy="joined")

    @property
    def installed(self) -> PluginVersion:
        return PluginVersion(
            version=self.installed_version,
            required_php_version=self.required_php_version,
            required_wp_version=self.required_wp_version,
        )


class PluginVulnerability(Base):
    """Stored vulnerability range of a plugin.

    Replaced wholesale for a plugin on every vulnerability sweep.
    """

    __tablename__ = "plugin_vulnerabilities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    plugin_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("plugins.id", ondelete="CASCADE"), nullable=False, index=True
    )
    from_version: Mapped[str] = mapped_column(Text, nullable=False)
    from_inclusive: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    to_version: Mapped[str] = mapped_column(Text, nullable=False)
    to_inclusive: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    plugin: Mapped["Plugin"] = relationship(back_populates="vulnerabilities")

    def to_vulnerability(self) -> Vulnerability:
        return Vulnerability(
            lower=VersionBound(self.from_version, self.from_inclusive),
            upper=VersionBound(self.to_version, self.to_inclusive),
            score=self.score,
        )
