"""Composition root.

``build_container()`` wires every long-lived object from the settings. The
process entry point owns the container and hands it to ``create_app()``;
request handlers reach it through ``get_container``.
"""

import logging
from dataclasses import dataclass, field

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from wppd.config import Settings
from wppd.database import create_engine, create_session_factory
from wppd.scheduler import Scheduler
from wppd.services.latest_version import LatestVersionResolver
from wppd.services.latest_version.providers import (
    PhpLatestVersionProvider,
    WordPressApiPluginProvider,
    WordPressLatestVersionProvider,
)
from wppd.services.mailing import MailResolver
from wppd.services.mailing.providers import SesMailProvider
from wppd.services.report_builder import ReportBuilder
from wppd.services.vulnerabilities import VulnerabilitiesResolver
from wppd.services.vulnerabilities.providers import WordFenceVulnerabilitiesProvider
from wppd.tasks import (
    DeletePluginsUnusedTask,
    DeleteSitesInactiveTask,
    SendReportMailTask,
    UpdateLatestCoreVersionTask,
    UpdatePluginsLatestVersionTask,
    UpdatePluginsVulnerabilitiesTask,
    UpdateWordFenceVulnerabilitiesTask,
)

logger = logging.getLogger(__name__)

HOURLY = "0 * * * *"


@dataclass
class Container:
    settings: Settings
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    latest_version_resolver: LatestVersionResolver
    vulnerabilities_resolver: VulnerabilitiesResolver
    mail_resolver: MailResolver
    report_builder: ReportBuilder
    scheduler: Scheduler
    php_provider: PhpLatestVersionProvider
    wp_provider: WordPressLatestVersionProvider
    wordfence_provider: WordFenceVulnerabilitiesProvider
    tasks: dict = field(default_factory=dict)

    async def dispose(self) -> None:
        await self.engine.dispose()


def build_container(settings: Settings) -> Container:
    engine = create_engine(settings)
    session_factory = create_session_factory(engine)

    php_provider = PhpLatestVersionProvider(settings.php_version_api, timeout=settings.http_timeout)
    wp_provider = WordPressLatestVersionProvider(settings.wp_version_api, timeout=settings.http_timeout)

    latest_version_resolver = LatestVersionResolver()
    latest_version_resolver.add_plugin_provider(
        WordPressApiPluginProvider(settings.wp_plugin_api_url, timeout=settings.http_timeout)
    )
    latest_version_resolver.set_php_provider(php_provider)
    latest_version_resolver.set_wp_provider(wp_provider)

    wordfence_provider = WordFenceVulnerabilitiesProvider(
        settings.wordfence_api_url, api_key=settings.wordfence_api_key
    )
    vulnerabilities_resolver = VulnerabilitiesResolver()
    vulnerabilities_resolver.add_provider(wordfence_provider)

    mail_resolver = MailResolver()
    if settings.ses_configured:
        mail_resolver.set_provider(
            SesMailProvider(
                region=settings.mailing_ses_region,
                access_key_id=settings.mailing_ses_access_key_id,
                secret_access_key=settings.mailing_ses_secret_access_key,
            )
        )
    elif settings.mailing_enabled:
        logger.warning("Mailing is enabled but SES is not configured")

    report_builder = ReportBuilder(latest_version_resolver, vulnerabilities_resolver)

    container = Container(
        settings=settings,
        engine=engine,
        session_factory=session_factory,
        latest_version_resolver=latest_version_resolver,
        vulnerabilities_resolver=vulnerabilities_resolver,
        mail_resolver=mail_resolver,
        report_builder=report_builder,
        scheduler=Scheduler(),
        php_provider=php_provider,
        wp_provider=wp_provider,
        wordfence_provider=wordfence_provider,
    )
    register_tasks(container)
    return container


def register_tasks(container: Container) -> None:
    """Create the background tasks and register them with the scheduler."""
    settings = container.settings
    session_factory = container.session_factory

    # name -> (cron, task, run on start)
    schedule = {
        "update-plugins-latest-version": (
            HOURLY,
            UpdatePluginsLatestVersionTask(session_factory, container.latest_version_resolver),
            False,
        ),
        "update-plugins-vulnerabilities": (
            "0 */3 * * *",
            UpdatePluginsVulnerabilitiesTask(session_factory, container.vulnerabilities_resolver),
            False,
        ),
        "delete-plugins-unused": ("0 0 */2 * *", DeletePluginsUnusedTask(session_factory), False),
        "delete-sites-inactive": ("0 0 */7 * *", DeleteSitesInactiveTask(session_factory), False),
        "send-report-mail": (
            settings.mailing_report_cron,
            SendReportMailTask(
                session_factory, container.report_builder, container.mail_resolver, settings
            ),
            False,
        ),
        "update-latest-php-version": (
            HOURLY,
            UpdateLatestCoreVersionTask(container.php_provider, "PHP"),
            True,
        ),
        "update-latest-wp-version": (
            HOURLY,
            UpdateLatestCoreVersionTask(container.wp_provider, "WordPress"),
            True,
        ),
        "update-wordfence-vulnerabilities": (
            "30 */3 * * *",
            UpdateWordFenceVulnerabilitiesTask(container.wordfence_provider),
            True,
        ),
    }

    for name, (cron, task, run_on_start) in schedule.items():
        container.tasks[name] = task
        container.scheduler.add_task(name, cron, task.run, run_on_start=run_on_start)


def get_container(request: Request) -> Container:
    """Dependency to get the application container."""
    return request.app.state.container
