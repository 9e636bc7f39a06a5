"""
Resource inventory models.

A ResourceRecord is built fresh on every fetch or scan: enumeration produces
the provider's raw dict, a classifier turns it into a record with a derived
usage status and a monthly cost estimate.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# The provider's describe/list payload, passed through untouched.
RawResource = Dict[str, Any]


class ServiceKind(str, Enum):
    """Scanned resource kinds. Values double as URL path segments."""

    EC2 = "ec2"  # compute instance
    EBS = "ebs"  # block volume
    S3 = "s3"  # object bucket
    RDS = "rds"  # managed database
    LAMBDA = "lambda"  # function


# Fixed per-region processing order.
SCAN_ORDER: List[ServiceKind] = [
    ServiceKind.EC2,
    ServiceKind.EBS,
    ServiceKind.S3,
    ServiceKind.RDS,
    ServiceKind.LAMBDA,
]


class UsageStatus(str, Enum):
    USED = "used"
    IDLE = "idle"
    UNDERUTILIZED = "underutilized"
    STOPPED = "stopped"


class ResourceRecord(BaseModel):
    """One observed cloud resource, serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    service_kind: ServiceKind
    region: str
    identifier: str
    attributes: Dict[str, Any] = Field(default_factory=dict)
    lifecycle_state: Optional[str] = None
    created_at: Optional[datetime] = None
    utilization_sample: Optional[float] = None
    # A plain string: non-running instances/databases pass their provider state through.
    usage_status: str = UsageStatus.IDLE.value
    monthly_cost: float = Field(default=0.0, ge=0)

    @property
    def is_used(self) -> bool:
        return self.usage_status == UsageStatus.USED.value

    def is_older_than(self, cutoff: datetime) -> bool:
        if self.created_at is None:
            return False
        created = self.created_at
        if created.tzinfo is None:
            created = created.replace(tzinfo=timezone.utc)
        return created < cutoff


@dataclass
class FetchResult:
    resources: List[ResourceRecord] = field(default_factory=list)
    total_cost: float = 0.0

    def extend(self, records: List[ResourceRecord]) -> None:
        self.resources.extend(records)
        self.total_cost += sum(r.monthly_cost for r in records)


@dataclass
class ScanResult:
    """Outcome of one full-account scan. Lives only in process memory."""

    all_resources: List[ResourceRecord] = field(default_factory=list)
    unused: List[ResourceRecord] = field(default_factory=list)
    long_idle: List[ResourceRecord] = field(default_factory=list)
    scanned_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
