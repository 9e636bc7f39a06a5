"""Base class for per-kind resource classifiers."""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import ClassVar, Dict, Optional

from app.modules.inventory.adapters.aws.metrics import MetricGateway
from app.modules.inventory.adapters.aws.pricing import PriceGateway
from app.modules.inventory.domain.classifier import (
    LONG_IDLE_DAYS,
    monthly_from_hourly,
    pricing_location,
)
from app.modules.inventory.domain.models import RawResource, ResourceRecord, ServiceKind


class ResourceClassifier(ABC):
    """
    Abstract base class for per-kind classification plugins.

    A plugin turns the provider's raw record into a ResourceRecord using a
    1-day metric snapshot, and separately answers the 30-day "long idle"
    question for the scan path.
    """

    kind: ClassVar[ServiceKind]

    def __init__(self, metrics: MetricGateway, prices: PriceGateway) -> None:
        self.metrics = metrics
        self.prices = prices

    @abstractmethod
    async def classify(self, raw: RawResource, region: str) -> ResourceRecord:
        """Derive usage status and monthly cost from the 1-day window."""
        raise NotImplementedError

    @abstractmethod
    async def _is_sustained_idle(self, record: ResourceRecord) -> bool:
        """Kind-specific 30-day activity check; issues its own metric query."""
        raise NotImplementedError

    async def is_long_idle(self, record: ResourceRecord, now: datetime) -> bool:
        cutoff = now - timedelta(days=LONG_IDLE_DAYS)
        if not record.is_older_than(cutoff):
            return False
        return await self._is_sustained_idle(record)

    async def _monthly_price(
        self, region: str, service_code: str, attributes: Dict[str, str]
    ) -> float:
        """On-demand hourly price x 730, or 0 when the region has no pricing location."""
        location: Optional[str] = pricing_location(region)
        if not location:
            return 0.0
        hourly = await self.prices.get_hourly_price(
            service_code, {**attributes, "location": location}
        )
        return monthly_from_hourly(hourly)
