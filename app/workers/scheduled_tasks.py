"""
Scheduled Tasks: background task definitions for the UnifiedScheduler.

Tasks are organized by namespace:
- reminders.*: reminder delivery

Usage:
    from app.workers.scheduled_tasks import configure_scheduler

    configure_scheduler(container.scheduler, container)
"""

from __future__ import annotations

import logging
from functools import wraps
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from app.services.container import ServiceContainer
    from app.workers.unified_scheduler import UnifiedScheduler

logger = logging.getLogger(__name__)

REMINDER_DISPATCH_TASK = "reminders.dispatch"
REMINDER_DISPATCH_JOB = "reminders_dispatch"


# ==================== Reminders Namespace Tasks ====================


def reminder_dispatch_task(container: "ServiceContainer") -> dict[str, Any]:
    """
    Deliver every reminder whose fire time has passed.

    Celery name: reminders.dispatch
    """
    delivered = container.reminder_service.dispatch_due()
    if delivered:
        logger.info("Delivered %s reminder(s)", len(delivered))
    return {"delivered": len(delivered), "ids": [n["id"] for n in delivered]}


def register_all_tasks(scheduler: "UnifiedScheduler", container: "ServiceContainer") -> None:
    """Register all tasks with the scheduler, bound to *container*."""

    def bind_container(task_fn):
        @wraps(task_fn)
        def bound_task():
            try:
                return task_fn(container)
            except Exception as e:
                logger.exception("Scheduled task %s raised: %s", task_fn.__name__, e)
                # Re-raise to let scheduler record failure in history as well
                raise

        return bound_task

    scheduler.register_task(REMINDER_DISPATCH_TASK, bind_container(reminder_dispatch_task))
    logger.info("Registered %s task(s)", len(scheduler.task_names))


def schedule_default_jobs(scheduler: "UnifiedScheduler", container: "ServiceContainer") -> None:
    """Apply the standard timings. Call after register_all_tasks()."""
    scheduler.schedule_interval(
        REMINDER_DISPATCH_TASK,
        interval_seconds=container.config.reminder_dispatch_interval_seconds,
        job_id=REMINDER_DISPATCH_JOB,
        start_immediately=True,  # catch up reminders that came due while stopped
    )
    for job in scheduler.get_jobs():
        logger.debug("  - %s: %s", job.job_id, job.schedule_type.value)


def configure_scheduler(
    scheduler: "UnifiedScheduler",
    container: "ServiceContainer",
    *,
    reset_jobs: bool = True,
    start: bool = True,
) -> None:
    """Register tasks, apply default schedules, and optionally start the scheduler."""
    if reset_jobs:
        scheduler.clear_jobs()

    register_all_tasks(scheduler, container)
    schedule_default_jobs(scheduler, container)

    if start:
        scheduler.start()
