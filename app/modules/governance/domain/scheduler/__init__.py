"""
Scheduler Service - Package Entry Point

Exports the scheduler orchestrator that runs the daily unused-resource scan.
"""

from .orchestrator import SchedulerOrchestrator, DAILY_SCAN_JOB_ID

__all__ = [
    "SchedulerOrchestrator",
    "DAILY_SCAN_JOB_ID",
]
