"""
Usage classification and cost estimation rules.

Fixed policy shared by the fetch, scan and scheduled paths; none of it is
read from settings.
"""

from typing import Dict, Optional

from app.modules.inventory.domain.models import UsageStatus

HOURS_PER_MONTH = 730
LONG_IDLE_DAYS = 30
SNAPSHOT_LOOKBACK_DAYS = 1

IDLE_CPU_PERCENT = 1.0
UNDERUTILIZED_CPU_PERCENT = 10.0

# USD per GB-month by EBS volume type
VOLUME_GB_MONTH_RATES: Dict[str, float] = {
    "gp2": 0.10,
    "gp3": 0.08,
    "io1": 0.125,
    "st1": 0.045,
    "sc1": 0.025,
}
DEFAULT_VOLUME_GB_MONTH_RATE = 0.10

S3_STANDARD_GB_MONTH_RATE = 0.023

LAMBDA_REQUEST_PRICE = 0.0000002
LAMBDA_GB_SECOND_PRICE = 0.0000166667
# The 1-day invocation sample is projected over a 30-day month.
LAMBDA_PROJECTION_DAYS = 30

BYTES_PER_GB = 1024 ** 3

# Region code -> Price List API "location" attribute.
REGION_TO_PRICING_LOCATION: Dict[str, str] = {
    "us-east-1": "US East (N. Virginia)",
    "us-east-2": "US East (Ohio)",
    "us-west-1": "US West (N. California)",
    "us-west-2": "US West (Oregon)",
    "eu-west-1": "EU (Ireland)",
}


def classify_cpu(avg_cpu_percent: float) -> UsageStatus:
    """Thresholds are inclusive toward the busier tier."""
    if avg_cpu_percent < IDLE_CPU_PERCENT:
        return UsageStatus.IDLE
    if avg_cpu_percent < UNDERUTILIZED_CPU_PERCENT:
        return UsageStatus.UNDERUTILIZED
    return UsageStatus.USED


def pricing_location(region: str) -> Optional[str]:
    """None means cost estimation is skipped for the region."""
    return REGION_TO_PRICING_LOCATION.get(region)


def monthly_from_hourly(hourly_price: float) -> float:
    return hourly_price * HOURS_PER_MONTH


def volume_monthly_cost(size_gb: float, volume_type: Optional[str]) -> float:
    rate = VOLUME_GB_MONTH_RATES.get(volume_type or "", DEFAULT_VOLUME_GB_MONTH_RATE)
    return size_gb * rate


def bucket_monthly_cost(size_gb: float) -> float:
    return size_gb * S3_STANDARD_GB_MONTH_RATE


def function_gb_seconds(invocations: float, avg_duration_ms: float, memory_mb: float) -> float:
    return (avg_duration_ms / 1000) * invocations * (memory_mb / 1024)


def function_monthly_cost(invocations: float, avg_duration_ms: float, memory_mb: float) -> float:
    if invocations <= 0:
        return 0.0
    gb_seconds = function_gb_seconds(invocations, avg_duration_ms, memory_mb)
    request_cost = invocations * LAMBDA_REQUEST_PRICE
    compute_cost = gb_seconds * LAMBDA_GB_SECOND_PRICE
    return (request_cost + compute_cost) * LAMBDA_PROJECTION_DAYS


def capitalize_engine(engine: str) -> str:
    """'mysql' -> 'Mysql', matching the Price List databaseEngine filter."""
    return engine[:1].upper() + engine[1:]
