from __future__ import annotations

from datetime import timedelta
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from app.utils.time import utc_now
from app.workers.scheduled_tasks import (
    REMINDER_DISPATCH_JOB,
    REMINDER_DISPATCH_TASK,
    configure_scheduler,
    reminder_dispatch_task,
)
from app.workers.unified_scheduler import ScheduleType, UnifiedScheduler


@pytest.fixture()
def scheduler():
    s = UnifiedScheduler(check_interval_seconds=0.05)
    yield s
    s.shutdown()


def test_run_now_records_success(scheduler):
    scheduler.register_task("demo.add", lambda a, b: a + b)

    result = scheduler.run_now("demo.add", args=(2, 3))

    assert result.success is True
    assert result.result == 5
    assert scheduler.get_history()[0] is result


def test_run_now_records_failure(scheduler):
    def boom():
        raise RuntimeError("nope")

    scheduler.register_task("demo.boom", boom)
    result = scheduler.run_now("demo.boom")

    assert result.success is False
    assert result.error == "nope"


def test_run_now_unknown_task(scheduler):
    assert scheduler.run_now("missing") is None


def test_interval_job_runs_when_due_and_advances(scheduler):
    calls = []
    scheduler.register_task("demo.tick", lambda: calls.append(1))
    job = scheduler.schedule_interval("demo.tick", 60, job_id="tick", start_immediately=True)
    first_run = job.next_run

    assert scheduler._process_due_jobs(first_run) == ["tick"]
    assert calls == [1]
    assert job.run_count == 1
    assert job.next_run == first_run + timedelta(seconds=60)

    # Not due again until the next slot
    assert scheduler._process_due_jobs(first_run + timedelta(seconds=30)) == []


def test_interval_job_skips_missed_slots(scheduler):
    scheduler.register_task("demo.tick", lambda: None)
    job = scheduler.schedule_interval("demo.tick", 10, job_id="tick", start_immediately=True)
    start = job.next_run

    scheduler._process_due_jobs(start + timedelta(seconds=35))

    assert job.run_count == 1
    assert job.next_run == start + timedelta(seconds=40)


def test_once_job_disables_after_run(scheduler):
    scheduler.register_task("demo.once", lambda: "done")
    run_at = utc_now() + timedelta(seconds=5)
    job = scheduler.schedule_once("demo.once", run_at, job_id="once")

    assert scheduler._process_due_jobs(run_at - timedelta(seconds=1)) == []
    assert scheduler._process_due_jobs(run_at) == ["once"]
    assert job.enabled is False
    assert job.next_run is None
    assert job.schedule_type is ScheduleType.ONCE


def test_failed_job_is_counted(scheduler):
    def boom():
        raise ValueError("bad")

    scheduler.register_task("demo.boom", boom)
    job = scheduler.schedule_interval("demo.boom", 60, job_id="boom", start_immediately=True)
    scheduler._process_due_jobs(job.next_run)

    assert job.failure_count == 1
    assert job.last_error == "bad"
    assert scheduler.get_status()["recent_failures"] == 1


def test_removed_job_does_not_run(scheduler):
    calls = []
    scheduler.register_task("demo.tick", lambda: calls.append(1))
    job = scheduler.schedule_interval("demo.tick", 60, job_id="tick", start_immediately=True)

    assert scheduler.remove_job("tick") is True
    assert scheduler._process_due_jobs(job.next_run) == []
    assert calls == []


def test_schedule_interval_rejects_non_positive(scheduler):
    with pytest.raises(ValueError):
        scheduler.schedule_interval("demo.tick", 0)


def test_start_and_stop(scheduler):
    scheduler.start()
    assert scheduler.is_running() is True
    scheduler.stop()
    assert scheduler.is_running() is False


def test_reminder_dispatch_task_reports_ids():
    reminder_service = MagicMock()
    reminder_service.dispatch_due.return_value = [{"id": "a-1"}, {"id": "b-2"}]
    container = SimpleNamespace(reminder_service=reminder_service)

    assert reminder_dispatch_task(container) == {"delivered": 2, "ids": ["a-1", "b-2"]}


def test_configure_scheduler_registers_dispatch_job(scheduler):
    reminder_service = MagicMock()
    reminder_service.dispatch_due.return_value = []
    container = SimpleNamespace(
        reminder_service=reminder_service,
        config=SimpleNamespace(reminder_dispatch_interval_seconds=30),
    )

    configure_scheduler(scheduler, container, start=False)

    assert scheduler.task_names == [REMINDER_DISPATCH_TASK]
    job = scheduler.get_job(REMINDER_DISPATCH_JOB)
    assert job.interval_seconds == 30
    assert scheduler._process_due_jobs(job.next_run) == [REMINDER_DISPATCH_JOB]
    reminder_service.dispatch_due.assert_called_once_with()
