"""
Resource fetch and scan orchestration.

All provider calls are awaited one after another in a fixed order:
regions sorted by name, then SCAN_ORDER within each region. Any failure
aborts the whole operation; nothing accumulated so far is kept.
"""

import time
from datetime import datetime, timezone
from typing import Dict, List, Optional, Protocol, Sequence

import structlog

from app.modules.inventory.adapters.aws.enumerator import ResourceEnumerator
from app.modules.inventory.adapters.aws.metrics import MetricGateway
from app.modules.inventory.adapters.aws.pricing import PriceGateway
from app.modules.inventory.adapters.aws.region_discovery import RegionDiscovery
from app.modules.inventory.domain.models import (
    SCAN_ORDER,
    FetchResult,
    ResourceRecord,
    ScanResult,
    ServiceKind,
)
from app.modules.inventory.domain.plugin import ResourceClassifier
from app.modules.inventory.domain.registry import registry
from app.shared.adapters.aws_utils import AWSClientFactory
from app.shared.core.exceptions import InvalidServiceKindError
from app.shared.core.ops_metrics import (
    RESOURCES_CLASSIFIED_TOTAL,
    SCAN_DURATION,
    SCAN_RUNS_TOTAL,
)

# Import plugins to trigger registration
import app.modules.inventory.domain.plugins  # noqa

logger = structlog.get_logger()

ALL = "all"


class ReportNotifier(Protocol):
    async def notify(self, resources: Sequence[ResourceRecord], is_manual: bool = False) -> Dict[str, str]:
        ...


def parse_service_kinds(kind: str) -> List[ServiceKind]:
    if kind == ALL:
        return list(SCAN_ORDER)
    try:
        return [ServiceKind(kind)]
    except ValueError:
        raise InvalidServiceKindError("Invalid service", details={"service": kind})


class ResourceService:
    """
    Owns the enumerate -> classify -> accumulate pipeline and the result of
    the most recent scan. One instance per process; the HTTP handlers and the
    daily scheduler share it.
    """

    def __init__(
        self,
        regions: RegionDiscovery,
        enumerator: ResourceEnumerator,
        classifiers: Dict[ServiceKind, ResourceClassifier],
        notifier: ReportNotifier,
    ) -> None:
        self.regions = regions
        self.enumerator = enumerator
        self.classifiers = classifiers
        self.notifier = notifier
        # Overwritten wholesale by each successful scan; last writer wins.
        self.last_scan: Optional[ScanResult] = None

    @classmethod
    def from_clients(
        cls, clients: AWSClientFactory, notifier: ReportNotifier, home_region: str = "us-east-1"
    ) -> "ResourceService":
        metrics = MetricGateway(clients)
        prices = PriceGateway(clients)
        return cls(
            regions=RegionDiscovery(clients, home_region=home_region),
            enumerator=ResourceEnumerator(clients),
            classifiers=registry.build(metrics, prices),
            notifier=notifier,
        )

    async def list_regions(self) -> List[str]:
        return await self.regions.get_enabled_regions()

    async def fetch_resources(self, kind: str = ALL, region: str = ALL) -> FetchResult:
        """On-demand listing: 1-day snapshot only, no long-idle checks."""
        kinds = parse_service_kinds(kind)
        regions = await self.list_regions() if region == ALL else [region]

        result = FetchResult()
        for current_region in regions:
            for current_kind in kinds:
                logger.info("fetching_resources", service=current_kind.value, region=current_region)
                result.extend(await self._classify_kind(current_kind, current_region))

        logger.info(
            "resources_fetched",
            service=kind,
            region=region,
            count=len(result.resources),
            total_cost=round(result.total_cost, 2),
        )
        return result

    async def scan(self, trigger: str = "manual") -> ScanResult:
        """
        Full-account scan. Sends one notification when anything has been
        idle for 30+ days; stores the result for resend_last_report().
        """
        start = time.perf_counter()
        logger.info("scan_started", trigger=trigger)
        try:
            result = await self._run_scan()
        except Exception as e:
            SCAN_RUNS_TOTAL.labels(trigger=trigger, status="failed").inc()
            logger.error("scan_failed", trigger=trigger, error=str(e))
            raise

        self.last_scan = result
        SCAN_DURATION.labels(trigger=trigger).observe(time.perf_counter() - start)
        SCAN_RUNS_TOTAL.labels(trigger=trigger, status="success").inc()
        logger.info(
            "scan_completed",
            trigger=trigger,
            resources=len(result.all_resources),
            unused=len(result.unused),
            long_idle=len(result.long_idle),
        )

        if result.long_idle:
            await self.notifier.notify(result.long_idle)
        else:
            logger.info("scan_notification_skipped", reason="no_long_idle_resources")
        return result

    async def resend_last_report(self) -> Dict[str, str]:
        """Email the unused resources from the last scan (empty before any scan)."""
        unused = self.last_scan.unused if self.last_scan else []
        return await self.notifier.notify(unused, is_manual=True)

    async def _run_scan(self) -> ScanResult:
        now = datetime.now(timezone.utc)
        result = ScanResult(scanned_at=now)

        for region in await self.list_regions():
            for kind in SCAN_ORDER:
                classifier = self.classifiers[kind]
                records = await self._classify_kind(kind, region)
                for record in records:
                    result.all_resources.append(record)
                    if not record.is_used:
                        result.unused.append(record)
                    if await classifier.is_long_idle(record, now):
                        result.long_idle.append(record)
        return result

    async def _classify_kind(self, kind: ServiceKind, region: str) -> List[ResourceRecord]:
        classifier = self.classifiers[kind]
        records = []
        for raw in await self.enumerator.list_resources(kind, region):
            record = await classifier.classify(raw, region)
            RESOURCES_CLASSIFIED_TOTAL.labels(
                service=kind.value, usage_status=record.usage_status
            ).inc()
            records.append(record)
        return records
