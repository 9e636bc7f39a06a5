from typing import Annotated, Any, Dict, List, Sequence

import structlog
from fastapi import APIRouter, Depends, Request

from app.modules.inventory.domain.models import ResourceRecord
from app.modules.inventory.domain.service import ResourceService

router = APIRouter(tags=["Resources"])
logger = structlog.get_logger()


def get_resource_service(request: Request) -> ResourceService:
    return request.app.state.resource_service


ResourceServiceDep = Annotated[ResourceService, Depends(get_resource_service)]


def serialize_records(records: Sequence[ResourceRecord]) -> List[Dict[str, Any]]:
    return [r.model_dump(mode="json", by_alias=True) for r in records]


@router.get("/regions")
async def list_regions(service: ResourceServiceDep) -> List[str]:
    """Regions enabled for the account, sorted by name."""
    return await service.list_regions()


@router.get("/resources/{kind}/{region}")
async def list_resources(kind: str, region: str, service: ResourceServiceDep) -> Dict[str, Any]:
    """
    Classify resources of one kind (or "all") in one region (or "all").
    Uses the 1-day snapshot only; nothing is stored.
    """
    result = await service.fetch_resources(kind, region)
    logger.info(
        "resources_returned",
        service=kind,
        region=region,
        count=len(result.resources),
    )
    return {
        "resources": serialize_records(result.resources),
        "totalCostEstimate": f"{result.total_cost:.2f}",
    }


@router.get("/scan")
async def scan_resources(service: ResourceServiceDep) -> Dict[str, Any]:
    """Full-account scan; emails a report when long-idle resources exist."""
    result = await service.scan(trigger="api")
    return {"unusedResources": serialize_records(result.unused)}


@router.get("/send-email")
async def send_email(service: ResourceServiceDep) -> Dict[str, str]:
    """Resend the unused-resource list from the most recent scan."""
    return await service.resend_last_report()
