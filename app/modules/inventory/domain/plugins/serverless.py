"""Serverless plugins: Lambda functions."""

from typing import Dict, List

from app.modules.inventory.adapters.aws.metrics import Statistic
from app.modules.inventory.domain.classifier import (
    LONG_IDLE_DAYS,
    SNAPSHOT_LOOKBACK_DAYS,
    function_monthly_cost,
)
from app.modules.inventory.domain.models import (
    RawResource,
    ResourceRecord,
    ServiceKind,
    UsageStatus,
)
from app.modules.inventory.domain.plugin import ResourceClassifier
from app.modules.inventory.domain.registry import registry
from app.modules.inventory.domain.timestamps import parse_aws_timestamp


@registry.register
class LambdaFunctionClassifier(ResourceClassifier):
    kind = ServiceKind.LAMBDA

    async def classify(self, raw: RawResource, region: str) -> ResourceRecord:
        name = raw["FunctionName"]
        memory_mb = raw.get("MemorySize", 128)
        invocations = await self._invocations(region, name, SNAPSHOT_LOOKBACK_DAYS)

        avg_duration_ms = 0.0
        monthly_cost = 0.0
        if invocations > 0:
            avg_duration_ms = await self.metrics.get_metric(
                region,
                "AWS/Lambda",
                "Duration",
                self._dimensions(name),
                Statistic.AVERAGE,
                SNAPSHOT_LOOKBACK_DAYS,
            )
            monthly_cost = function_monthly_cost(invocations, avg_duration_ms, memory_mb)

        return ResourceRecord(
            service_kind=self.kind,
            region=region,
            identifier=name,
            attributes={
                "runtime": raw.get("Runtime"),
                "memoryMb": memory_mb,
                "invocations": invocations,
                "avgDurationMs": avg_duration_ms,
            },
            # Lambda exposes no creation time; last modification is the closest signal.
            created_at=parse_aws_timestamp(raw.get("LastModified")),
            utilization_sample=invocations,
            usage_status=(UsageStatus.USED if invocations > 0 else UsageStatus.IDLE).value,
            monthly_cost=monthly_cost,
        )

    async def _is_sustained_idle(self, record: ResourceRecord) -> bool:
        invocations = await self._invocations(record.region, record.identifier, LONG_IDLE_DAYS)
        return invocations == 0

    async def _invocations(self, region: str, name: str, days: int) -> float:
        return await self.metrics.get_metric(
            region,
            "AWS/Lambda",
            "Invocations",
            self._dimensions(name),
            Statistic.SUM,
            days,
        )

    @staticmethod
    def _dimensions(name: str) -> List[Dict[str, str]]:
        return [{"Name": "FunctionName", "Value": name}]
