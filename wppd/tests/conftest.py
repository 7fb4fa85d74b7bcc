"""Shared fixtures for the WPPD test suite."""

from datetime import datetime

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from wppd.config import Settings
from wppd.container import build_container
from wppd.database import create_engine, create_session_factory, init_models
from wppd.main import create_app
from wppd.models.database import Plugin, Site, SitePlugin
from wppd.services.models import ReportedPlugin, PluginVersion


def make_settings(**overrides) -> Settings:
    values = {
        "app_env": "test",
        "database_url": "sqlite+aiosqlite:///:memory:",
        "scheduler_enabled": False,
        "mailing_enabled": False,
        "log_directory": "",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_reported_plugin(
    slug: str,
    version: str | None = "1.0.0",
    active: bool = True,
    file: str | None = None,
) -> ReportedPlugin:
    return ReportedPlugin(
        file=file or f"{slug}/{slug}.php",
        name=slug.replace("-", " ").title(),
        active=active,
        installed=PluginVersion(version=version, required_php_version="7.4.0", required_wp_version="6.0.0"),
    )


def make_plugin_payload(
    slug: str,
    installed: str | None = "1.0.0",
    active: bool = True,
) -> dict:
    return {
        "file": f"{slug}/{slug}.php",
        "name": slug.replace("-", " ").title(),
        "active": active,
        "version": {
            "installedVersion": installed,
            "requiredPhpVersion": "7.4",
            "requiredWpVersion": "6.0",
        },
    }


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def container(settings):
    return build_container(settings)


@pytest.fixture
def client(container):
    with TestClient(create_app(container)) as test_client:
        yield test_client


@pytest_asyncio.fixture
async def engine(settings):
    engine = create_engine(settings)
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return create_session_factory(engine)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


async def add_site(
    db,
    name: str = "Example",
    url: str = "https://example.com",
    environment: str = "production",
    php_version: str | None = "8.1.0",
    wp_version: str | None = "6.4.0",
    token: str = "secret-token",
    updated_at: datetime | None = None,
) -> Site:
    now = datetime.utcnow()
    site = Site(
        name=name,
        url=url,
        environment=environment,
        php_version=php_version,
        wp_version=wp_version,
        token=token,
        created_at=now,
        updated_at=updated_at or now,
    )
    db.add(site)
    await db.flush()
    return site


async def add_plugin(db, slug: str, latest_version: str | None = None) -> Plugin:
    plugin = Plugin(slug=slug, name=slug.title(), latest_version=latest_version)
    db.add(plugin)
    await db.flush()
    return plugin


async def link_plugin(db, site: Site, plugin: Plugin, installed_version: str | None, is_active: bool = True) -> SitePlugin:
    site_plugin = SitePlugin(
        site_id=site.id,
        plugin_id=plugin.id,
        installed_version=installed_version,
        is_active=is_active,
    )
    site_plugin.plugin = plugin
    db.add(site_plugin)
    await db.flush()
    return site_plugin
