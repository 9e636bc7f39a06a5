"""
CloudWatch metric gateway.

Returns one aggregated number per query. Multiple period datapoints are
re-aggregated locally: SUM adds them, AVERAGE takes the plain mean of the
per-period averages (an average of averages, not a weighted average).
"""

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, List

import structlog
from botocore.exceptions import BotoCoreError, ClientError

from app.shared.adapters.aws_utils import AWSClientFactory
from app.shared.core.exceptions import ProviderError

logger = structlog.get_logger()

HOURLY_PERIOD_SECONDS = 3600
DAILY_PERIOD_SECONDS = 86400


class Statistic(str, Enum):
    AVERAGE = "Average"
    SUM = "Sum"


def period_for_lookback(lookback_days: float) -> int:
    """Hourly samples for windows up to a day, daily samples beyond that."""
    return HOURLY_PERIOD_SECONDS if lookback_days <= 1 else DAILY_PERIOD_SECONDS


def aggregate(values: List[float], statistic: Statistic) -> float:
    if not values:
        return 0.0
    total = float(sum(values))
    if statistic == Statistic.SUM:
        return total
    return total / len(values)


class MetricGateway:
    def __init__(self, clients: AWSClientFactory) -> None:
        self.clients = clients

    async def get_metric(
        self,
        region: str,
        namespace: str,
        metric_name: str,
        dimensions: List[Dict[str, str]],
        statistic: Statistic = Statistic.AVERAGE,
        lookback_days: float = 1,
    ) -> float:
        end_time = datetime.now(timezone.utc)
        start_time = end_time - timedelta(days=lookback_days)
        query = {
            "Id": "m1",
            "MetricStat": {
                "Metric": {
                    "Namespace": namespace,
                    "MetricName": metric_name,
                    "Dimensions": dimensions,
                },
                "Period": period_for_lookback(lookback_days),
                "Stat": statistic.value,
            },
        }

        try:
            async with self.clients.client("cloudwatch", region) as cloudwatch:
                response = await cloudwatch.get_metric_data(
                    MetricDataQueries=[query],
                    StartTime=start_time,
                    EndTime=end_time,
                )
        except (ClientError, BotoCoreError) as e:
            logger.error(
                "metric_query_failed",
                region=region,
                namespace=namespace,
                metric=metric_name,
                error=str(e),
            )
            raise ProviderError(
                f"CloudWatch query for {namespace}/{metric_name} failed in {region}: {e}",
                details={"region": region, "namespace": namespace, "metric": metric_name},
            ) from e

        results: List[Dict[str, Any]] = response.get("MetricDataResults", [])
        values = results[0].get("Values", []) if results else []
        return aggregate(values, statistic)
