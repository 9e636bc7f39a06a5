"""
Tests for ResourceService: fetch/scan orchestration, ordering, the long-idle
notification and last-scan state.
"""
import pytest
from unittest.mock import AsyncMock, MagicMock

from app.modules.inventory.domain.models import SCAN_ORDER, ResourceRecord, ServiceKind
from app.modules.inventory.domain.service import ResourceService, parse_service_kinds
from app.shared.core.exceptions import InvalidServiceKindError, ProviderError


def _record(kind: ServiceKind, region: str, identifier: str, status: str, cost: float = 0.0):
    return ResourceRecord(
        service_kind=kind,
        region=region,
        identifier=identifier,
        usage_status=status,
        monthly_cost=cost,
    )


class FakeClassifier:
    def __init__(self, kind: ServiceKind, long_idle_ids=()):
        self.kind = kind
        self.long_idle_ids = set(long_idle_ids)

    async def classify(self, raw, region):
        return _record(self.kind, region, raw["id"], raw["status"], raw.get("cost", 0.0))

    async def is_long_idle(self, record, now):
        return record.identifier in self.long_idle_ids


@pytest.fixture
def regions():
    discovery = MagicMock()
    discovery.get_enabled_regions = AsyncMock(return_value=["eu-west-1", "us-east-1"])
    return discovery


@pytest.fixture
def enumerator():
    inventory = {
        ("eu-west-1", ServiceKind.EC2): [{"id": "i-eu", "status": "idle", "cost": 7.5}],
        ("eu-west-1", ServiceKind.S3): [{"id": "b-eu", "status": "used", "cost": 0.25}],
        ("us-east-1", ServiceKind.EBS): [{"id": "vol-us", "status": "idle", "cost": 8.0}],
        ("us-east-1", ServiceKind.LAMBDA): [{"id": "fn-us", "status": "used"}],
    }
    calls = []

    async def list_resources(kind, region):
        calls.append((region, kind))
        return inventory.get((region, kind), [])

    mock = MagicMock()
    mock.list_resources = AsyncMock(side_effect=list_resources)
    mock.calls = calls
    return mock


@pytest.fixture
def notifier():
    mock = MagicMock()
    mock.notify = AsyncMock(return_value={"message": "Email sent successfully"})
    return mock


def _service(regions, enumerator, notifier, long_idle_ids=()):
    classifiers = {kind: FakeClassifier(kind, long_idle_ids) for kind in ServiceKind}
    return ResourceService(regions, enumerator, classifiers, notifier)


def test_parse_service_kinds():
    assert parse_service_kinds("all") == SCAN_ORDER
    assert parse_service_kinds("rds") == [ServiceKind.RDS]
    with pytest.raises(InvalidServiceKindError, match="Invalid service"):
        parse_service_kinds("dynamodb")


@pytest.mark.asyncio
async def test_fetch_single_kind_and_region(regions, enumerator, notifier):
    service = _service(regions, enumerator, notifier)

    result = await service.fetch_resources("ec2", "eu-west-1")

    assert [r.identifier for r in result.resources] == ["i-eu"]
    assert result.total_cost == pytest.approx(7.5)
    regions.get_enabled_regions.assert_not_awaited()


@pytest.mark.asyncio
async def test_fetch_all_walks_regions_then_kinds_in_order(regions, enumerator, notifier):
    service = _service(regions, enumerator, notifier)

    result = await service.fetch_resources("all", "all")

    expected_calls = [(r, k) for r in ["eu-west-1", "us-east-1"] for k in SCAN_ORDER]
    assert enumerator.calls == expected_calls
    assert [r.identifier for r in result.resources] == ["i-eu", "b-eu", "vol-us", "fn-us"]
    assert result.total_cost == pytest.approx(15.75)


@pytest.mark.asyncio
async def test_fetch_invalid_kind_makes_no_provider_calls(regions, enumerator, notifier):
    service = _service(regions, enumerator, notifier)

    with pytest.raises(InvalidServiceKindError):
        await service.fetch_resources("dynamodb", "all")

    enumerator.list_resources.assert_not_awaited()
    regions.get_enabled_regions.assert_not_awaited()


@pytest.mark.asyncio
async def test_scan_without_long_idle_sends_nothing(regions, enumerator, notifier):
    service = _service(regions, enumerator, notifier)

    result = await service.scan()

    assert [r.identifier for r in result.unused] == ["i-eu", "vol-us"]
    assert result.long_idle == []
    assert len(result.all_resources) == 4
    notifier.notify.assert_not_awaited()
    assert service.last_scan is result


@pytest.mark.asyncio
async def test_scan_notifies_once_with_long_idle(regions, enumerator, notifier):
    service = _service(regions, enumerator, notifier, long_idle_ids={"vol-us", "i-eu"})

    result = await service.scan(trigger="api")

    notifier.notify.assert_awaited_once()
    sent = notifier.notify.await_args.args[0]
    assert [r.identifier for r in sent] == ["i-eu", "vol-us"]
    assert sent == result.long_idle


@pytest.mark.asyncio
async def test_failed_scan_keeps_previous_result(regions, enumerator, notifier):
    service = _service(regions, enumerator, notifier)
    first = await service.scan()

    enumerator.list_resources.side_effect = ProviderError("throttled")
    with pytest.raises(ProviderError):
        await service.scan()

    assert service.last_scan is first


@pytest.mark.asyncio
async def test_resend_before_any_scan_sends_empty_report(regions, enumerator, notifier):
    service = _service(regions, enumerator, notifier)

    response = await service.resend_last_report()

    assert response == {"message": "Email sent successfully"}
    notifier.notify.assert_awaited_once_with([], is_manual=True)


@pytest.mark.asyncio
async def test_resend_uses_unused_from_last_scan(regions, enumerator, notifier):
    service = _service(regions, enumerator, notifier)
    result = await service.scan()

    await service.resend_last_report()

    notifier.notify.assert_awaited_once_with(result.unused, is_manual=True)
