"""Database plugins: RDS instances."""

from app.modules.inventory.adapters.aws.metrics import Statistic
from app.modules.inventory.domain.classifier import (
    IDLE_CPU_PERCENT,
    LONG_IDLE_DAYS,
    SNAPSHOT_LOOKBACK_DAYS,
    capitalize_engine,
    classify_cpu,
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
class RDSInstanceClassifier(ResourceClassifier):
    kind = ServiceKind.RDS

    async def classify(self, raw: RawResource, region: str) -> ResourceRecord:
        db_id = raw["DBInstanceIdentifier"]
        instance_class = raw.get("DBInstanceClass", "unknown")
        engine = raw.get("Engine", "")
        state = raw.get("DBInstanceStatus", "unknown")

        usage_status = state
        avg_cpu = None
        monthly_cost = 0.0

        if state == "available":
            avg_cpu = await self._avg_cpu(region, db_id, SNAPSHOT_LOOKBACK_DAYS)
            usage_status = classify_cpu(avg_cpu).value
            monthly_cost = await self._monthly_price(
                region,
                "AmazonRDS",
                {
                    "instanceType": instance_class,
                    "databaseEngine": capitalize_engine(engine),
                    "deploymentOption": "Single-AZ",
                },
            )
        elif state == "stopped":
            usage_status = UsageStatus.STOPPED.value

        return ResourceRecord(
            service_kind=self.kind,
            region=region,
            identifier=db_id,
            attributes={"instanceClass": instance_class, "engine": engine},
            lifecycle_state=state,
            created_at=parse_aws_timestamp(raw.get("InstanceCreateTime")),
            utilization_sample=avg_cpu,
            usage_status=usage_status,
            monthly_cost=monthly_cost,
        )

    async def _is_sustained_idle(self, record: ResourceRecord) -> bool:
        if record.lifecycle_state == "stopped":
            return True
        if record.lifecycle_state != "available":
            return False
        avg_cpu = await self._avg_cpu(record.region, record.identifier, LONG_IDLE_DAYS)
        return avg_cpu < IDLE_CPU_PERCENT

    async def _avg_cpu(self, region: str, db_id: str, days: int) -> float:
        return await self.metrics.get_metric(
            region,
            "AWS/RDS",
            "CPUUtilization",
            [{"Name": "DBInstanceIdentifier", "Value": db_id}],
            Statistic.AVERAGE,
            days,
        )
