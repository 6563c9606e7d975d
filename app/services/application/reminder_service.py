"""
Reminder Service
================
Schedules care reminders, previews the upcoming feed and delivers due
reminders into the received-notification list.

Daily, weekly and monthly reminders use calendar triggers pinned to the
chosen time of day; the other frequencies use whole-day interval triggers.
A reminder passed a ``date`` fires once.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, tzinfo
from typing import TYPE_CHECKING, Any, Callable

from app.constants import FREQUENCY_OPTIONS, REMINDER_TYPE_LABELS, TIME_OPTIONS, Feed, PingReminder
from app.domain.exceptions import NotFoundError, ValidationError
from app.domain.reminders import Reminder, ReminderTrigger, next_trigger_date, project_feed
from app.domain.reminders.trigger import calendar_weekday
from app.enums.garden import ReminderFrequency, ReminderType, TimeOfDay, TriggerType
from app.services.application.activity_logger import ActivityLogger, log_if_available
from app.utils.time import iso_utc, utc_now

if TYPE_CHECKING:
    from app.services.application.notifications_service import NotificationsService
    from app.utils.emitters import EmitterService
    from infrastructure.database.repositories.reminders import ReminderRepository
    from infrastructure.logging.audit import AuditLogger

logger = logging.getLogger(__name__)


def build_trigger(frequency: ReminderFrequency, hour: int, today: datetime) -> ReminderTrigger:
    """Trigger for a repeating reminder created on *today* (a local datetime)."""
    if frequency is ReminderFrequency.DAILY:
        return ReminderTrigger(type=TriggerType.CALENDAR, hour=hour, minute=0, repeats=True)
    if frequency is ReminderFrequency.WEEKLY:
        return ReminderTrigger(
            type=TriggerType.CALENDAR, weekday=calendar_weekday(today.date()), hour=hour, minute=0, repeats=True
        )
    if frequency is ReminderFrequency.MONTHLY:
        return ReminderTrigger(type=TriggerType.CALENDAR, day=today.day, hour=hour, minute=0, repeats=True)
    seconds, _ = FREQUENCY_OPTIONS[frequency]
    return ReminderTrigger(type=TriggerType.TIME_INTERVAL, seconds=seconds, repeats=True)


def reminder_text(reminder_type: ReminderType, note: str | None, plant_name: str | None) -> tuple[str, str]:
    """Title and body: ``🌱 Time to water!`` / ``Don't forget to water Basil.``"""
    action = REMINDER_TYPE_LABELS[reminder_type].lower()
    title = f"🌱 Time to {action}!"
    body = note or f"Don't forget to {action} {plant_name or 'your garden'}."
    return title, body


class ReminderService:
    def __init__(
        self,
        reminder_repo: "ReminderRepository",
        notifications_service: "NotificationsService",
        *,
        tz: tzinfo,
        emitter_service: "EmitterService" | None = None,
        activity_logger: ActivityLogger | None = None,
        audit_logger: "AuditLogger" | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.reminders = reminder_repo
        self.notifications = notifications_service
        self.tz = tz
        self.emitter = emitter_service
        self.activity_logger = activity_logger
        self.audit_logger = audit_logger
        self.clock = clock

    # ------------------------------------------------------------------
    # Options
    # ------------------------------------------------------------------

    @staticmethod
    def options() -> dict[str, list[dict[str, Any]]]:
        """Choices offered by the reminder form."""
        return {
            "types": [{"value": t.value, "label": label} for t, label in REMINDER_TYPE_LABELS.items()],
            "frequencies": [
                {"value": f.value, "label": label, "seconds": seconds}
                for f, (seconds, label) in FREQUENCY_OPTIONS.items()
            ],
            "times": [{"value": t.value, "label": label, "hour": hour} for t, (hour, label) in TIME_OPTIONS.items()],
        }

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def _store(self, reminder: Reminder) -> dict[str, Any]:
        reminder.anchor_at = reminder.anchor(self.tz)
        reminder.next_fire_at = reminder.anchor_at
        self.reminders.create(reminder.to_row())
        logger.info(
            "Scheduled reminder %s (%s) first firing at %s",
            reminder.identifier, reminder.trigger.type, reminder.next_fire_at,
        )
        log_if_available(
            self.activity_logger, ActivityLogger.REMINDER_SCHEDULED, reminder.title,
            entity_type="reminder", entity_id=reminder.identifier, metadata={"trigger": reminder.trigger.to_dict()},
        )
        return self._present(reminder)

    def create_reminder(
        self,
        type: ReminderType | str,
        frequency: ReminderFrequency | str | None,
        time: TimeOfDay | str = TimeOfDay.MORNING,
        note: str | None = None,
        plant_id: int | None = None,
        plant_name: str | None = None,
        *,
        date: datetime | None = None,
    ) -> dict[str, Any]:
        """Schedule a care reminder; *date* makes it a one-time reminder."""
        try:
            reminder_type = ReminderType(type)
            time_of_day = TimeOfDay(time or TimeOfDay.MORNING)
            cadence = ReminderFrequency(frequency) if frequency else None
        except ValueError as exc:
            raise ValidationError(str(exc)) from None
        if cadence is None and date is None:
            raise ValidationError("frequency is required")

        now = self.clock()
        title, body = reminder_text(reminder_type, note, plant_name)
        hour, time_label = TIME_OPTIONS[time_of_day]
        minute = 0

        if date is not None:
            when = date if date.tzinfo else date.replace(tzinfo=self.tz)
            if when <= now:
                raise ValidationError("Reminder date must be in the future")
            local = when.astimezone(self.tz)
            trigger = ReminderTrigger(type=TriggerType.DATE, date=when)
            hour, minute, time_label = local.hour, local.minute, f"{local:%H:%M}"
        else:
            trigger = build_trigger(cadence, hour, now.astimezone(self.tz))

        data = {
            "type": reminder_type.value,
            "plant_name": plant_name or "General",
            "plant_id": plant_id,
            "frequency": cadence.value if cadence else None,
            "time_label": time_label,
            "hour": hour,
            "minute": minute,
        }
        return self._store(
            Reminder(identifier=str(uuid.uuid4()), title=title, body=body, trigger=trigger, data=data, created_at=now)
        )

    def schedule(
        self, title: str, body: str, trigger: dict[str, Any] | ReminderTrigger, data: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Schedule a reminder from an explicit trigger."""
        try:
            parsed = ReminderTrigger.from_dict(trigger)
        except ValueError as exc:
            raise ValidationError(str(exc)) from None
        return self._store(
            Reminder(
                identifier=str(uuid.uuid4()), title=title, body=body or "",
                trigger=parsed, data=dict(data or {}), created_at=self.clock(),
            )
        )

    def send_test(self) -> dict[str, Any]:
        """One-shot reminder a few seconds out to check delivery end to end."""
        return self.schedule(
            PingReminder.TITLE,
            PingReminder.BODY,
            ReminderTrigger(type=TriggerType.TIME_INTERVAL, seconds=PingReminder.DELAY_SECONDS, repeats=False),
            {"type": ReminderType.CUSTOM.value, "test": True},
        )

    def delete_reminder(self, identifier: str) -> bool:
        """Cancel a scheduled reminder. Received notifications it produced stay."""
        if not self.reminders.get(identifier):
            raise NotFoundError("Reminder not found", detail={"identifier": identifier})
        deleted = self.reminders.delete(identifier)
        if self.audit_logger:
            self.audit_logger.record_deletion("reminder", identifier, deleted=deleted)
        log_if_available(
            self.activity_logger, ActivityLogger.REMINDER_CANCELLED, f"Reminder {identifier} cancelled",
            entity_type="reminder", entity_id=identifier,
        )
        return deleted

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _present(self, reminder: Reminder) -> dict[str, Any]:
        payload = reminder.to_dict()
        preview = next_trigger_date(reminder.trigger, reminder.hour, reminder.minute, now=self.clock(), tz=self.tz)
        payload["next_trigger_date"] = preview.isoformat() if preview else None
        return payload

    def _all(self) -> list[Reminder]:
        return [Reminder.from_row(row) for row in self.reminders.list()]

    def list_reminders(self) -> list[dict[str, Any]]:
        return [self._present(r) for r in self._all()]

    def get_feed(self, days: int = Feed.WINDOW_DAYS) -> list[dict[str, Any]]:
        """Upcoming reminders grouped by day over the next *days* days."""
        return [day.to_dict() for day in project_feed(self._all(), now=self.clock(), tz=self.tz, days=days)]

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    def dispatch_due(self, now: datetime | None = None) -> list[dict[str, Any]]:
        """Deliver every reminder whose fire time has passed.

        Each due reminder is delivered once, even if several occurrences were
        missed; repeating reminders then move to their next occurrence after
        *now* and spent ones are removed.
        """
        now = now or self.clock()
        delivered: list[dict[str, Any]] = []
        for row in self.reminders.due(iso_utc(now)):
            reminder = Reminder.from_row(row)
            fired_at = reminder.next_fire_at or now
            notification = self.notifications.receive(
                reminder.identifier, title=reminder.title, body=reminder.body, data=reminder.data, received_at=now
            )
            delivered.append(notification)
            if self.emitter:
                self.emitter.emit_reminder_delivered(notification)
            log_if_available(
                self.activity_logger, ActivityLogger.REMINDER_DELIVERED, reminder.title,
                entity_type="reminder", entity_id=reminder.identifier,
            )

            following = reminder.following(max(fired_at, now), self.tz)
            if following is None:
                self.reminders.delete(reminder.identifier)
                logger.info("Reminder %s fired and completed", reminder.identifier)
            else:
                self.reminders.set_next_fire(reminder.identifier, iso_utc(following))
                logger.debug("Reminder %s next fires at %s", reminder.identifier, following)
        return delivered
