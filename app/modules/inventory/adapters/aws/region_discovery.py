"""
AWS Region Discovery

Lists the regions enabled for the account via EC2 describe_regions.
Results are not cached: every fetch or scan sees the current account state.
"""

from typing import List

import structlog
from botocore.exceptions import BotoCoreError, ClientError

from app.shared.adapters.aws_utils import AWSClientFactory
from app.shared.core.exceptions import ProviderError

logger = structlog.get_logger()


class RegionDiscovery:
    def __init__(self, clients: AWSClientFactory, home_region: str = "us-east-1") -> None:
        self.clients = clients
        self.home_region = home_region

    async def get_enabled_regions(self) -> List[str]:
        """
        Get all regions enabled for this account, sorted by name.

        Uses EC2 describe_regions with AllRegions=False to only get
        regions that are enabled (default + manually opted-in).
        """
        try:
            async with self.clients.client("ec2", self.home_region) as ec2:
                response = await ec2.describe_regions(AllRegions=False)
        except (ClientError, BotoCoreError) as e:
            logger.error("region_discovery_failed", error=str(e))
            raise ProviderError(f"Failed to fetch regions: {e}") from e

        regions = sorted(
            r["RegionName"] for r in response.get("Regions", []) if r.get("RegionName")
        )
        logger.info("regions_discovered", count=len(regions), source="ec2_describe_regions")
        return regions
