"""
Reminder Schemas
================

Request schemas for scheduling reminders and reconciling received
notifications.
"""

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator

from app.enums.garden import ReminderFrequency, ReminderType, TimeOfDay


class CreateReminderRequest(BaseModel):
    """Request schema for scheduling a care reminder.

    A repeating reminder needs a ``frequency``; passing ``date`` instead
    schedules a one-time reminder.
    """

    type: ReminderType = Field(..., description="Kind of care")
    frequency: ReminderFrequency | None = Field(default=None, description="Repeat cadence")
    time: TimeOfDay = Field(default=TimeOfDay.MORNING, description="Delivery time preset")
    note: str | None = Field(default=None, max_length=500, description="Custom notification body")
    plant_id: int | None = Field(default=None, gt=0, validation_alias=AliasChoices("plant_id", "plantId"))
    plant_name: str | None = Field(default=None, max_length=120, validation_alias=AliasChoices("plant_name", "plantName"))
    date: datetime | None = Field(default=None, description="Deliver once at this instant")

    @field_validator("type", "frequency", "time", mode="before")
    @classmethod
    def normalize_choice(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator("note", "plant_name", mode="before")
    @classmethod
    def blank_optional(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v

    @model_validator(mode="after")
    def require_schedule(self):
        if self.frequency is None and self.date is None:
            raise ValueError("frequency is required")
        return self


class NotificationContent(BaseModel):
    title: str | None = None
    body: str | None = None
    data: dict[str, Any] = Field(default_factory=dict)

    @field_validator("data", mode="before")
    @classmethod
    def none_is_empty(cls, v):
        return v or {}


class ReceiveNotificationRequest(BaseModel):
    """A notification delivered while the app was open."""

    identifier: str = Field(..., min_length=1)
    title: str | None = None
    body: str | None = None
    data: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def flatten_content(cls, values):
        """Accept ``{identifier, content: {title, body, data}}`` as well as the flat form."""
        if isinstance(values, dict) and isinstance(values.get("content"), dict):
            merged = dict(values["content"])
            merged.update({k: v for k, v in values.items() if k != "content"})
            return merged
        return values

    @field_validator("data", mode="before")
    @classmethod
    def none_is_empty(cls, v):
        return v or {}


class PresentedNotification(BaseModel):
    """A notification currently shown in the device tray."""

    identifier: str = Field(..., min_length=1)
    date: float | str | None = None
    content: NotificationContent = Field(default_factory=NotificationContent)


class SyncNotificationsRequest(BaseModel):
    """Full tray snapshot; replaces the received list."""

    notifications: list[PresentedNotification] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def accept_bare_list(cls, values):
        if isinstance(values, list):
            return {"notifications": values}
        return values
