"""Compute plugins: EC2 instances."""

from app.modules.inventory.adapters.aws.metrics import Statistic
from app.modules.inventory.domain.classifier import (
    IDLE_CPU_PERCENT,
    LONG_IDLE_DAYS,
    SNAPSHOT_LOOKBACK_DAYS,
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
class EC2InstanceClassifier(ResourceClassifier):
    kind = ServiceKind.EC2

    async def classify(self, raw: RawResource, region: str) -> ResourceRecord:
        instance_id = raw["InstanceId"]
        instance_type = raw.get("InstanceType", "unknown")
        state = raw.get("State", {}).get("Name", "unknown")

        usage_status = state
        avg_cpu = None
        monthly_cost = 0.0

        if state == "running":
            avg_cpu = await self._avg_cpu(region, instance_id, SNAPSHOT_LOOKBACK_DAYS)
            usage_status = classify_cpu(avg_cpu).value
            monthly_cost = await self._monthly_price(
                region,
                "AmazonEC2",
                {
                    "instanceType": instance_type,
                    "operatingSystem": "Linux",
                    "tenancy": "Shared",
                    "capacitystatus": "Used",
                    "preInstalledSw": "NA",
                },
            )
        elif state == "stopped":
            usage_status = UsageStatus.STOPPED.value

        return ResourceRecord(
            service_kind=self.kind,
            region=region,
            identifier=instance_id,
            attributes={"instanceType": instance_type},
            lifecycle_state=state,
            created_at=parse_aws_timestamp(raw.get("LaunchTime")),
            utilization_sample=avg_cpu,
            usage_status=usage_status,
            monthly_cost=monthly_cost,
        )

    async def _is_sustained_idle(self, record: ResourceRecord) -> bool:
        if record.lifecycle_state == "stopped":
            return True
        if record.lifecycle_state != "running":
            return False
        avg_cpu = await self._avg_cpu(record.region, record.identifier, LONG_IDLE_DAYS)
        return avg_cpu < IDLE_CPU_PERCENT

    async def _avg_cpu(self, region: str, instance_id: str, days: int) -> float:
        return await self.metrics.get_metric(
            region,
            "AWS/EC2",
            "CPUUtilization",
            [{"Name": "InstanceId", "Value": instance_id}],
            Statistic.AVERAGE,
            days,
        )
