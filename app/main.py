from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Dict, Any

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from prometheus_fastapi_instrumentator import Instrumentator

from app.modules.governance.domain.scheduler import SchedulerOrchestrator
from app.modules.inventory.api.v1.resources import router as resources_router
from app.modules.inventory.domain.service import ResourceService
from app.modules.notifications.domain import ScanNotifier
from app.shared.adapters.aws_utils import AWSClientFactory
from app.shared.core.config import get_settings
from app.shared.core.error_governance import handle_exception
from app.shared.core.exceptions import IdleWatchException
from app.shared.core.logging import setup_logging

# Configure logging
setup_logging()
settings = get_settings()

logger = structlog.get_logger()

DEFAULT_STATIC_DIR = Path(__file__).parent / "static"


def build_resource_service() -> ResourceService:
    clients = AWSClientFactory(credentials=settings.aws_credentials)
    return ResourceService.from_clients(
        clients,
        notifier=ScanNotifier(settings),
        home_region=settings.AWS_HOME_REGION,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    logger.info("app_starting", app_name=settings.APP_NAME)
    if not settings.mail_configured:
        logger.warning("mail_not_configured", msg="Email notifications will fail until SMTP settings are set")

    service = build_resource_service()
    app.state.resource_service = service

    scheduler = SchedulerOrchestrator(service, settings)
    if settings.SCHEDULER_ENABLED and not settings.TESTING:
        scheduler.start()
    else:
        logger.info("scheduler_skipped", testing=settings.TESTING)
    app.state.scheduler = scheduler

    yield

    logger.info("app_shutting_down")
    scheduler.stop()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    lifespan=lifespan,
)


@app.exception_handler(IdleWatchException)
async def idlewatch_exception_handler(request: Request, exc: IdleWatchException) -> JSONResponse:
    """Handle custom application exceptions."""
    return handle_exception(request, exc)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Anything unexpected still answers with the {"error": ...} contract."""
    return handle_exception(request, exc)


@app.get("/health", tags=["Lifecycle"])
async def health(request: Request) -> Dict[str, Any]:
    scheduler = getattr(request.app.state, "scheduler", None)
    return {
        "status": "ok",
        "scheduler": scheduler.get_status() if scheduler else None,
    }


app.include_router(resources_router, prefix="/api")

Instrumentator().instrument(app).expose(app, include_in_schema=False)

# Dashboard last: the "/" mount would otherwise shadow the API routes.
app.mount(
    "/",
    StaticFiles(directory=settings.STATIC_DIR or DEFAULT_STATIC_DIR, html=True),
    name="dashboard",
)

__all__ = ["app", "lifespan"]
