"""
Resource enumeration per service kind.

Every listing is followed to the last page. Provider failures are raised as
ProviderError straight away; the only tolerated failure is an S3 bucket whose
location cannot be read, which is treated as inaccessible and skipped.
"""

from typing import Any, Dict, List, Optional

import structlog
from botocore.exceptions import BotoCoreError, ClientError

from app.modules.inventory.domain.models import RawResource, ServiceKind
from app.shared.adapters.aws_pagination import iter_aws_paginator_pages
from app.shared.adapters.aws_utils import AWSClientFactory
from app.shared.core.exceptions import InvalidServiceKindError, ProviderError

logger = structlog.get_logger()

# S3 is a global listing; it is always queried through this region.
S3_LISTING_REGION = "us-east-1"


def resolve_bucket_region(location_constraint: Optional[str]) -> str:
    """GetBucketLocation reports us-east-1 as null and eu-west-1 as legacy 'EU'."""
    if not location_constraint:
        return "us-east-1"
    if location_constraint == "EU":
        return "eu-west-1"
    return location_constraint


class ResourceEnumerator:
    def __init__(self, clients: AWSClientFactory) -> None:
        self.clients = clients

    async def list_resources(self, kind: ServiceKind, region: str) -> List[RawResource]:
        listers = {
            ServiceKind.EC2: self._list_instances,
            ServiceKind.EBS: self._list_volumes,
            ServiceKind.S3: self._list_buckets,
            ServiceKind.RDS: self._list_db_instances,
            ServiceKind.LAMBDA: self._list_functions,
        }
        lister = listers.get(kind)
        if lister is None:
            raise InvalidServiceKindError(f"Invalid service: {kind}")

        try:
            resources = await lister(region)
        except (ClientError, BotoCoreError) as e:
            logger.error(
                "resource_enumeration_failed",
                service=kind.value,
                region=region,
                error=str(e),
            )
            raise ProviderError(
                f"Listing {kind.value} resources in {region} failed: {e}",
                details={"service": kind.value, "region": region},
            ) from e

        logger.debug("resources_enumerated", service=kind.value, region=region, count=len(resources))
        return resources

    async def _paginate(
        self,
        service_name: str,
        operation: str,
        region: str,
        result_key: str,
    ) -> List[Dict[str, Any]]:
        items: List[Dict[str, Any]] = []
        async with self.clients.client(service_name, region) as client:
            paginator = client.get_paginator(operation)
            async for page in iter_aws_paginator_pages(paginator, operation_name=operation):
                items.extend(page.get(result_key, []))
        return items

    async def _list_instances(self, region: str) -> List[RawResource]:
        reservations = await self._paginate("ec2", "describe_instances", region, "Reservations")
        return [
            instance
            for reservation in reservations
            for instance in reservation.get("Instances", [])
        ]

    async def _list_volumes(self, region: str) -> List[RawResource]:
        return await self._paginate("ec2", "describe_volumes", region, "Volumes")

    async def _list_db_instances(self, region: str) -> List[RawResource]:
        return await self._paginate("rds", "describe_db_instances", region, "DBInstances")

    async def _list_functions(self, region: str) -> List[RawResource]:
        return await self._paginate("lambda", "list_functions", region, "Functions")

    async def _list_buckets(self, region: str) -> List[RawResource]:
        buckets: List[RawResource] = []
        async with self.clients.client("s3", S3_LISTING_REGION) as s3:
            all_buckets: List[Dict[str, Any]] = []
            kwargs: Dict[str, Any] = {}
            while True:
                response = await s3.list_buckets(**kwargs)
                all_buckets.extend(response.get("Buckets", []))
                token = response.get("ContinuationToken")
                if not token:
                    break
                kwargs = {"ContinuationToken": token}

            for bucket in all_buckets:
                name = bucket["Name"]
                try:
                    location = await s3.get_bucket_location(Bucket=name)
                except (ClientError, BotoCoreError) as e:
                    logger.debug("bucket_location_skipped", bucket=name, error=str(e))
                    continue

                bucket_region = resolve_bucket_region(location.get("LocationConstraint"))
                if bucket_region != region:
                    continue
                buckets.append({**bucket, "Region": bucket_region})
        return buckets
