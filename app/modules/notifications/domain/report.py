from typing import Callable, Dict, Optional, Sequence

import structlog

from app.modules.inventory.domain.models import ResourceRecord
from app.modules.notifications.domain.email_service import EmailService
from app.shared.core.config import Settings, get_settings
from app.shared.core.exceptions import ConfigurationError, DeliveryError
from app.shared.core.ops_metrics import NOTIFICATIONS_SENT_TOTAL

logger = structlog.get_logger()

MANUAL_SUBJECT = "Manual AWS Resources Notification"
LONG_IDLE_SUBJECT = "AWS Unused Resources Notification (>30 days)"
REPORT_HEADER = "The following AWS resources were identified:"
EMPTY_REPORT_BODY = "No unused resources found. This is a test email."


def format_resource_line(record: ResourceRecord) -> str:
    return (
        f"{record.service_kind.value.upper()} in {record.region}: {record.identifier} "
        f"({record.usage_status}, Cost: ${record.monthly_cost:.2f})"
    )


def build_report_body(resources: Sequence[ResourceRecord]) -> str:
    if not resources:
        return EMPTY_REPORT_BODY
    lines = [format_resource_line(r) for r in resources]
    return REPORT_HEADER + "\n\n" + "\n".join(lines)


class ScanNotifier:
    """
    Emails scan reports. Mail settings are checked on every call, so a
    service started without them still serves everything except email.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        email_service_factory: Optional[Callable[[Settings], EmailService]] = None,
    ) -> None:
        self._settings = settings
        self._email_service_factory = email_service_factory or self._build_email_service

    @property
    def settings(self) -> Settings:
        return self._settings or get_settings()

    @staticmethod
    def _build_email_service(settings: Settings) -> EmailService:
        sender = settings.SMTP_FROM or settings.SMTP_USER
        return EmailService(
            smtp_host=settings.SMTP_HOST,
            smtp_port=settings.SMTP_PORT,
            smtp_user=str(settings.SMTP_USER),
            smtp_password=str(settings.SMTP_PASSWORD),
            from_email=f"{settings.APP_NAME} <{sender}>",
        )

    async def notify(self, resources: Sequence[ResourceRecord], is_manual: bool = False) -> Dict[str, str]:
        kind = "manual" if is_manual else "long_idle"
        settings = self.settings
        if not settings.mail_configured:
            NOTIFICATIONS_SENT_TOTAL.labels(kind=kind, status="not_configured").inc()
            logger.warning("notification_skipped_missing_mail_config", kind=kind)
            raise ConfigurationError("Missing email configuration")

        subject = MANUAL_SUBJECT if is_manual else LONG_IDLE_SUBJECT
        body = build_report_body(resources)
        email_service = self._email_service_factory(settings)

        try:
            await email_service.send_text([str(settings.NOTIFY_RECIPIENT)], subject, body)
        except DeliveryError:
            NOTIFICATIONS_SENT_TOTAL.labels(kind=kind, status="failed").inc()
            raise

        NOTIFICATIONS_SENT_TOTAL.labels(kind=kind, status="sent").inc()
        logger.info("notification_sent", kind=kind, resources=len(resources))
        return {"message": "Email sent successfully"}
