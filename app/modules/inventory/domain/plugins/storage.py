"""Storage plugins: EBS volumes and S3 buckets."""

from typing import List, Dict

from app.modules.inventory.adapters.aws.metrics import Statistic
from app.modules.inventory.domain.classifier import (
    BYTES_PER_GB,
    LONG_IDLE_DAYS,
    SNAPSHOT_LOOKBACK_DAYS,
    bucket_monthly_cost,
    volume_monthly_cost,
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
class EBSVolumeClassifier(ResourceClassifier):
    kind = ServiceKind.EBS

    async def classify(self, raw: RawResource, region: str) -> ResourceRecord:
        volume_type = raw.get("VolumeType")
        size_gb = raw.get("Size", 0)
        state = raw.get("State", "unknown")

        return ResourceRecord(
            service_kind=self.kind,
            region=region,
            identifier=raw["VolumeId"],
            attributes={"volumeType": volume_type, "sizeGb": size_gb},
            lifecycle_state=state,
            created_at=parse_aws_timestamp(raw.get("CreateTime")),
            usage_status=(UsageStatus.USED if state == "in-use" else UsageStatus.IDLE).value,
            monthly_cost=volume_monthly_cost(size_gb, volume_type),
        )

    async def _is_sustained_idle(self, record: ResourceRecord) -> bool:
        # Detached volumes are judged on state alone; EBS has no 30-day query.
        return record.lifecycle_state == "available"


@registry.register
class S3BucketClassifier(ResourceClassifier):
    kind = ServiceKind.S3

    async def classify(self, raw: RawResource, region: str) -> ResourceRecord:
        name = raw["Name"]
        num_objects = await self._object_count(region, name, SNAPSHOT_LOOKBACK_DAYS)
        size_bytes = await self.metrics.get_metric(
            region,
            "AWS/S3",
            "BucketSizeBytes",
            self._dimensions(name, "StandardStorage"),
            Statistic.AVERAGE,
            SNAPSHOT_LOOKBACK_DAYS,
        )
        size_gb = size_bytes / BYTES_PER_GB

        return ResourceRecord(
            service_kind=self.kind,
            region=region,
            identifier=name,
            attributes={"objectCount": num_objects, "sizeGb": size_gb},
            created_at=parse_aws_timestamp(raw.get("CreationDate")),
            utilization_sample=num_objects,
            usage_status=(UsageStatus.USED if num_objects > 0 else UsageStatus.IDLE).value,
            monthly_cost=bucket_monthly_cost(size_gb),
        )

    async def _is_sustained_idle(self, record: ResourceRecord) -> bool:
        num_objects = await self._object_count(record.region, record.identifier, LONG_IDLE_DAYS)
        return num_objects == 0

    async def _object_count(self, region: str, bucket: str, days: int) -> float:
        return await self.metrics.get_metric(
            region,
            "AWS/S3",
            "NumberOfObjects",
            self._dimensions(bucket, "AllStorageTypes"),
            Statistic.AVERAGE,
            days,
        )

    @staticmethod
    def _dimensions(bucket: str, storage_type: str) -> List[Dict[str, str]]:
        return [
            {"Name": "BucketName", "Value": bucket},
            {"Name": "StorageType", "Value": storage_type},
        ]
