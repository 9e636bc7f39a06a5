from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from datetime import datetime, timezone
from typing import Any, Dict, Optional
import structlog

from app.modules.inventory.domain.service import ResourceService
from app.shared.core.config import Settings, get_settings

logger = structlog.get_logger()

DAILY_SCAN_JOB_ID = "daily_unused_resource_scan"


class SchedulerOrchestrator:
    """Manages APScheduler and the daily unused-resource scan."""

    def __init__(self, service: ResourceService, settings: Optional[Settings] = None):
        self.scheduler = AsyncIOScheduler()
        self.service = service
        self.settings = settings or get_settings()
        self._last_run_success: bool | None = None
        self._last_run_time: str | None = None

    async def daily_scan_job(self) -> None:
        """
        Same scan as GET /api/scan. Failures are logged only; the scheduler
        must keep running for the next day.
        """
        logger.info(
            "scheduled_scan_started",
            timezone=self.settings.SCAN_SCHEDULE_TIMEZONE,
        )
        try:
            result = await self.service.scan(trigger="scheduled")
        except Exception as e:  # noqa: BLE001 - keep the scheduler alive
            self._last_run_success = False
            logger.error("scheduled_scan_failed", error=str(e), exc_info=True)
        else:
            self._last_run_success = True
            logger.info(
                "scheduled_scan_completed",
                unused=len(result.unused),
                long_idle=len(result.long_idle),
            )
        finally:
            self._last_run_time = datetime.now(timezone.utc).isoformat()

    def start(self) -> None:
        """Defines the cron schedule and starts APScheduler."""
        self.scheduler.add_job(
            self.daily_scan_job,
            trigger=CronTrigger(
                hour=self.settings.SCAN_SCHEDULE_HOUR,
                minute=self.settings.SCAN_SCHEDULE_MINUTE,
                timezone=self.settings.SCAN_SCHEDULE_TIMEZONE,
            ),
            id=DAILY_SCAN_JOB_ID,
            replace_existing=True,
        )
        self.scheduler.start()
        logger.info(
            "scheduler_started",
            hour=self.settings.SCAN_SCHEDULE_HOUR,
            minute=self.settings.SCAN_SCHEDULE_MINUTE,
            timezone=self.settings.SCAN_SCHEDULE_TIMEZONE,
        )

    def stop(self) -> None:
        if not self.scheduler.running:
            logger.debug("scheduler_stop_skipped_not_running")
            return
        self.scheduler.shutdown(wait=True)

    def get_status(self) -> Dict[str, Any]:
        return {
            "running": self.scheduler.running,
            "last_run_success": self._last_run_success,
            "last_run_time": self._last_run_time,
            "jobs": [str(job.id) for job in self.scheduler.get_jobs()],
        }
