"""
Centralized scheduling service for background tasks.

All periodic work (today: the reminder dispatcher) goes through this single
service instead of ad-hoc threads.

Design Principles:
- Single scheduler loop thread
- Bounded worker pool for job execution (no unbounded thread creation)
- Named tasks registered once, jobs reference them by name
- Interval and one-time schedules, timestamps in UTC
"""

from __future__ import annotations

import heapq
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Callable

from app.utils.time import utc_now

logger = logging.getLogger(__name__)


class ScheduleType(Enum):
    """Types of schedules."""

    INTERVAL = "interval"  # Every N seconds
    ONCE = "once"  # One-time execution


@dataclass
class JobResult:
    """Result of a job execution."""

    job_id: str
    success: bool
    started_at: datetime
    completed_at: datetime
    result: Any = None
    error: str | None = None

    @property
    def duration_seconds(self) -> float:
        return (self.completed_at - self.started_at).total_seconds()


@dataclass
class ScheduledJob:
    """A scheduled job configuration."""

    job_id: str
    task_name: str
    schedule_type: ScheduleType
    enabled: bool = True
    args: tuple = field(default_factory=tuple)
    kwargs: dict[str, Any] = field(default_factory=dict)

    interval_seconds: int | None = None  # For INTERVAL type

    # Execution tracking
    next_run: datetime | None = None
    last_run: datetime | None = None
    run_count: int = 0
    failure_count: int = 0
    last_error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary (for status output)."""
        return {
            "job_id": self.job_id,
            "task_name": self.task_name,
            "schedule_type": self.schedule_type.value,
            "enabled": self.enabled,
            "interval_seconds": self.interval_seconds,
            "next_run": self.next_run.isoformat() if self.next_run else None,
            "last_run": self.last_run.isoformat() if self.last_run else None,
            "run_count": self.run_count,
            "failure_count": self.failure_count,
            "last_error": self.last_error,
        }


class UnifiedScheduler:
    """
    Heap-driven scheduler.

    Heap entries are ``(run_at_ts, seq, job_id)``; ``seq`` keeps ordering
    stable for equal timestamps. Entries are never removed in place: the loop
    skips entries whose job was removed, disabled or rescheduled.

    INTERVAL jobs advance from their scheduled time (fixed rate); when the
    process falls behind, missed slots are skipped rather than piled up.
    """

    def __init__(
        self,
        check_interval_seconds: float = 1.0,
        max_history: int = 200,
        max_workers: int = 2,
    ):
        self._check_interval = float(check_interval_seconds)
        self._max_history = int(max_history)
        self._max_workers = int(max_workers)

        self._jobs: dict[str, ScheduledJob] = {}
        self._tasks: dict[str, Callable] = {}
        self._job_heap: list[tuple[float, int, str]] = []
        self._heap_seq = 0
        self._history: list[JobResult] = []

        self._running = False
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._job_lock = threading.RLock()
        self._executor: ThreadPoolExecutor | None = None

    # ==================== Task Registration ====================

    def register_task(self, name: str, func: Callable) -> None:
        """Register a task function under *name*."""
        self._tasks[name] = func
        logger.debug("Registered task: %s", name)

    @property
    def task_names(self) -> list[str]:
        return sorted(self._tasks)

    def clear_jobs(self) -> None:
        """Remove all scheduled jobs and pending heap entries."""
        with self._job_lock:
            self._jobs.clear()
            self._job_heap.clear()
            self._heap_seq = 0

    def _push_heap(self, job: ScheduledJob) -> None:
        if not job.enabled or not job.next_run:
            return
        self._heap_seq += 1
        heapq.heappush(self._job_heap, (job.next_run.timestamp(), self._heap_seq, job.job_id))

    # ==================== Job Scheduling ====================

    def schedule_interval(
        self,
        task_name: str,
        interval_seconds: int,
        *,
        job_id: str | None = None,
        args: tuple = (),
        kwargs: dict[str, Any] | None = None,
        start_immediately: bool = False,
    ) -> ScheduledJob:
        """Schedule a task to run every *interval_seconds*."""
        if int(interval_seconds) <= 0:
            raise ValueError("interval_seconds must be positive")
        job_id = job_id or f"{task_name}_every_{int(interval_seconds)}s"
        now = utc_now()
        job = ScheduledJob(
            job_id=job_id,
            task_name=task_name,
            schedule_type=ScheduleType.INTERVAL,
            args=args,
            kwargs=kwargs or {},
            interval_seconds=int(interval_seconds),
            next_run=now if start_immediately else now + timedelta(seconds=int(interval_seconds)),
        )
        self._add_job(job)
        logger.info("Scheduled interval job: %s (every %ss)", job_id, interval_seconds)
        return job

    def schedule_once(
        self,
        task_name: str,
        run_at: datetime,
        *,
        job_id: str | None = None,
        args: tuple = (),
        kwargs: dict[str, Any] | None = None,
    ) -> ScheduledJob:
        """Schedule a task to run once at *run_at* (aware datetime)."""
        job_id = job_id or f"{task_name}_once_{int(run_at.timestamp())}"
        job = ScheduledJob(
            job_id=job_id,
            task_name=task_name,
            schedule_type=ScheduleType.ONCE,
            args=args,
            kwargs=kwargs or {},
            next_run=run_at,
        )
        self._add_job(job)
        logger.info("Scheduled one-time job: %s (at %s)", job_id, run_at)
        return job

    def run_now(self, task_name: str, *, args: tuple = (), kwargs: dict[str, Any] | None = None) -> JobResult | None:
        """Run a registered task synchronously and record the outcome."""
        func = self._tasks.get(task_name)
        if func is None:
            logger.error("Task not found: %s", task_name)
            return None

        started_at = utc_now()
        job_id = f"{task_name}_immediate"
        try:
            result = func(*args, **(kwargs or {}))
        except Exception as e:
            logger.error("Immediate task %s failed: %s", task_name, e, exc_info=True)
            job_result = JobResult(job_id, False, started_at, utc_now(), error=str(e))
        else:
            job_result = JobResult(job_id, True, started_at, utc_now(), result=result)
        self._record_history(job_result)
        return job_result

    # ==================== Job Management ====================

    def _add_job(self, job: ScheduledJob) -> None:
        with self._job_lock:
            self._jobs[job.job_id] = job
            self._push_heap(job)

    def remove_job(self, job_id: str) -> bool:
        with self._job_lock:
            if self._jobs.pop(job_id, None) is None:
                return False
        logger.info("Removed job: %s", job_id)
        return True

    def get_job(self, job_id: str) -> ScheduledJob | None:
        return self._jobs.get(job_id)

    def get_jobs(self) -> list[ScheduledJob]:
        return list(self._jobs.values())

    # ==================== Scheduler Control ====================

    def start(self) -> None:
        """Start the scheduler background thread."""
        if self._running:
            logger.warning("Scheduler already running")
            return
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=self._max_workers, thread_name_prefix="SchedulerJob")

        self._running = True
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run_loop, daemon=True, name="UnifiedScheduler")
        self._thread.start()
        logger.info("UnifiedScheduler started")

    def stop(self, wait: bool = True, timeout: float = 5.0) -> None:
        if not self._running:
            return
        self._running = False
        self._stop_event.set()
        if wait and self._thread:
            self._thread.join(timeout=timeout)
        if self._executor:
            self._executor.shutdown(wait=wait)
            self._executor = None
        logger.info("UnifiedScheduler stopped")

    def shutdown(self, wait: bool = True, timeout: float = 5.0) -> None:
        """Alias for stop(); matches other services' shutdown() convention."""
        self.stop(wait=wait, timeout=timeout)

    def is_running(self) -> bool:
        return self._running

    def _run_loop(self) -> None:
        logger.debug("Scheduler loop started")
        while self._running:
            try:
                self._process_due_jobs()
            except Exception as e:
                logger.error("Error in scheduler loop: %s", e, exc_info=True)
            self._stop_event.wait(self._check_interval)
        logger.debug("Scheduler loop ended")

    # ==================== Core Scheduling Logic ====================

    def _process_due_jobs(self, now: datetime | None = None) -> list[str]:
        """Submit every due job; returns the ids that were submitted."""
        now = now or utc_now()
        now_ts = now.timestamp()
        submitted: list[str] = []

        with self._job_lock:
            while self._job_heap and self._job_heap[0][0] <= now_ts:
                run_at_ts, _seq, job_id = heapq.heappop(self._job_heap)
                job = self._jobs.get(job_id)
                if not job or not job.enabled or not job.next_run:
                    continue
                if abs(job.next_run.timestamp() - run_at_ts) > 1e-6:
                    continue  # stale entry

                scheduled_for = job.next_run
                self._advance(job, scheduled_for, now)
                self._push_heap(job)

                if self._executor is None:
                    self._execute_job(job_id, scheduled_for)
                else:
                    self._executor.submit(self._execute_job, job_id, scheduled_for)
                submitted.append(job_id)
        return submitted

    def _advance(self, job: ScheduledJob, scheduled_for: datetime, now: datetime) -> None:
        if job.schedule_type is ScheduleType.ONCE:
            job.next_run = None
            job.enabled = False
            return

        interval = int(job.interval_seconds or 60)
        next_run = scheduled_for + timedelta(seconds=interval)
        if next_run <= now:
            skips = int((now - next_run).total_seconds() // interval) + 1
            next_run += timedelta(seconds=skips * interval)
        job.next_run = next_run

    def _execute_job(self, job_id: str, scheduled_for: datetime) -> None:
        with self._job_lock:
            job = self._jobs.get(job_id)
        if job is None:
            return

        started_at = utc_now()
        func = self._tasks.get(job.task_name)
        try:
            if func is None:
                raise ValueError(f"Task function not found: {job.task_name}")
            result = func(*job.args, **job.kwargs)
        except Exception as e:
            with self._job_lock:
                job.last_run = started_at
                job.run_count += 1
                job.failure_count += 1
                job.last_error = str(e)
            self._record_history(JobResult(job.job_id, False, started_at, utc_now(), error=str(e)))
            logger.error("Job %s failed: %s", job.job_id, e, exc_info=True)
            return

        with self._job_lock:
            job.last_run = started_at
            job.run_count += 1
            job.last_error = None
        job_result = JobResult(job.job_id, True, started_at, utc_now(), result=result)
        self._record_history(job_result)
        logger.debug(
            "Job %s completed in %.2fs (scheduled_for=%s)",
            job.job_id, job_result.duration_seconds, scheduled_for.isoformat(),
        )

    def _record_history(self, result: JobResult) -> None:
        with self._job_lock:
            self._history.append(result)
            if len(self._history) > self._max_history:
                self._history = self._history[-self._max_history:]

    # ==================== Status & History ====================

    def get_status(self) -> dict[str, Any]:
        with self._job_lock:
            return {
                "running": self._running,
                "total_jobs": len(self._jobs),
                "enabled_jobs": sum(1 for j in self._jobs.values() if j.enabled),
                "jobs": [j.to_dict() for j in self._jobs.values()],
                "recent_failures": sum(1 for r in self._history[-20:] if not r.success),
                "max_workers": self._max_workers,
            }

    def get_history(self, job_id: str | None = None, limit: int = 50) -> list[JobResult]:
        results = [r for r in self._history if job_id is None or r.job_id == job_id]
        return sorted(results, key=lambda r: r.started_at, reverse=True)[: int(limit)]
