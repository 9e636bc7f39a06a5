"""
AWS Price List gateway.

Best-effort: every failure is logged and turned into a price of 0 so that a
missing price never aborts a scan.
"""

import json
from typing import Any, Dict, List

import structlog
from botocore.exceptions import BotoCoreError, ClientError

from app.shared.adapters.aws_utils import AWSClientFactory
from app.shared.core.exceptions import PriceLookupError
from app.shared.core.ops_metrics import PRICE_LOOKUP_FAILURES_TOTAL

logger = structlog.get_logger()

# The Price List API is only served from a handful of regions.
PRICING_API_REGION = "us-east-1"


def term_filters(attributes: Dict[str, str]) -> List[Dict[str, str]]:
    return [
        {"Type": "TERM_MATCH", "Field": field, "Value": value}
        for field, value in attributes.items()
    ]


def parse_on_demand_hourly_price(price_item: str) -> float:
    """Extract the first on-demand USD price from a Price List product document."""
    try:
        product = json.loads(price_item)
        on_demand = next(iter(product["terms"]["OnDemand"].values()))
        dimension = next(iter(on_demand["priceDimensions"].values()))
        return float(dimension["pricePerUnit"]["USD"])
    except (ValueError, KeyError, TypeError, StopIteration) as e:
        raise PriceLookupError(f"Malformed price document: {e}") from e


class PriceGateway:
    def __init__(self, clients: AWSClientFactory) -> None:
        self.clients = clients

    async def get_hourly_price(self, service_code: str, attributes: Dict[str, str]) -> float:
        try:
            return await self._fetch_hourly_price(service_code, attributes)
        except PriceLookupError as e:
            PRICE_LOOKUP_FAILURES_TOTAL.labels(service_code=service_code).inc()
            logger.warning(
                "price_lookup_failed",
                service_code=service_code,
                filters=attributes,
                error=e.message,
            )
            return 0.0

    async def _fetch_hourly_price(self, service_code: str, attributes: Dict[str, str]) -> float:
        try:
            async with self.clients.client("pricing", PRICING_API_REGION) as pricing:
                response: Dict[str, Any] = await pricing.get_products(
                    ServiceCode=service_code,
                    Filters=term_filters(attributes),
                    MaxResults=1,
                    FormatVersion="aws_v1",
                )
        except (ClientError, BotoCoreError) as e:
            raise PriceLookupError(f"Price List query failed: {e}") from e

        price_list = response.get("PriceList") or []
        if not price_list:
            raise PriceLookupError("No matching product in Price List")
        return parse_on_demand_hourly_price(price_list[0])
