"""Build the fleet report and send it by mail."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from wppd.config import Settings
from wppd.repositories import SiteRepository
from wppd.services.mailing import MailResolver
from wppd.services.report_builder import REPORT_SUBJECT, ReportBuilder

logger = logging.getLogger(__name__)


class SendReportMailTask:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        report_builder: ReportBuilder,
        mail_resolver: MailResolver,
        settings: Settings,
    ):
        self.session_factory = session_factory
        self.report_builder = report_builder
        self.mail_resolver = mail_resolver
        self.settings = settings

    async def run(self) -> None:
        if not self.settings.mailing_enabled:
            logger.info("Mailing is disabled, skipping report mail sending.")
            return

        try:
            async with self.session_factory() as db:
                grouped = await self.report_builder.build(SiteRepository(db))

            html = self.report_builder.render_html(grouped)

            logger.info("Sending report mail...")
            sent = await self.mail_resolver.send_mail(
                self.settings.mailing_report_sender,
                self.settings.mailing_report_recipient,
                REPORT_SUBJECT,
                html,
            )
            if not sent:
                logger.error("Failed to send WPPD Report via email")
                return

            logger.info("WPPD Report generated and sent via email.")
        except Exception as e:
            logger.error(f"Failed to send WPPD Report via email: {e}", exc_info=True)
