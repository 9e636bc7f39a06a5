import pytest
from unittest.mock import AsyncMock, MagicMock

from app.modules.inventory.domain.models import ResourceRecord, ServiceKind
from app.modules.notifications.domain.report import (
    EMPTY_REPORT_BODY,
    LONG_IDLE_SUBJECT,
    MANUAL_SUBJECT,
    REPORT_HEADER,
    ScanNotifier,
    build_report_body,
    format_resource_line,
)
from app.shared.core.config import Settings
from app.shared.core.exceptions import ConfigurationError, DeliveryError


def _settings(**overrides):
    values = {
        "TESTING": True,
        "SMTP_USER": "scanner@example.com",
        "SMTP_PASSWORD": "app-password",
        "NOTIFY_RECIPIENT": "ops@example.com",
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def record():
    return ResourceRecord(
        service_kind=ServiceKind.EC2,
        region="us-east-1",
        identifier="i-1",
        usage_status="idle",
        monthly_cost=12.345,
    )


@pytest.fixture
def email_service():
    service = MagicMock()
    service.send_text = AsyncMock()
    return service


def test_format_resource_line(record):
    assert format_resource_line(record) == "EC2 in us-east-1: i-1 (idle, Cost: $12.35)"


def test_report_body(record):
    body = build_report_body([record])
    assert body.startswith(REPORT_HEADER)
    assert body.endswith("i-1 (idle, Cost: $12.35)")
    assert build_report_body([]) == EMPTY_REPORT_BODY


@pytest.mark.asyncio
async def test_long_idle_report(record, email_service):
    factory = MagicMock(return_value=email_service)
    notifier = ScanNotifier(_settings(), email_service_factory=factory)

    response = await notifier.notify([record])

    assert response == {"message": "Email sent successfully"}
    email_service.send_text.assert_awaited_once_with(
        ["ops@example.com"], LONG_IDLE_SUBJECT, build_report_body([record])
    )


@pytest.mark.asyncio
async def test_manual_report_with_no_resources(email_service):
    notifier = ScanNotifier(_settings(), email_service_factory=lambda s: email_service)

    await notifier.notify([], is_manual=True)

    recipients, subject, body = email_service.send_text.await_args.args
    assert subject == MANUAL_SUBJECT
    assert body == EMPTY_REPORT_BODY


@pytest.mark.asyncio
async def test_missing_mail_config_fails_without_sending(email_service):
    factory = MagicMock(return_value=email_service)
    notifier = ScanNotifier(_settings(SMTP_PASSWORD=None), email_service_factory=factory)

    with pytest.raises(ConfigurationError, match="Missing email configuration"):
        await notifier.notify([], is_manual=True)

    factory.assert_not_called()


@pytest.mark.asyncio
async def test_delivery_failure_propagates(record, email_service):
    email_service.send_text.side_effect = DeliveryError("Failed to send email: timeout")
    notifier = ScanNotifier(_settings(), email_service_factory=lambda s: email_service)

    with pytest.raises(DeliveryError):
        await notifier.notify([record])


def test_default_email_service_uses_smtp_settings():
    service = ScanNotifier._build_email_service(_settings(SMTP_FROM="alerts@example.com"))

    assert service.smtp_host == "smtp.gmail.com"
    assert service.smtp_port == 587
    assert service.from_email == "IdleWatch <alerts@example.com>"
