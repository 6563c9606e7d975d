"""
Enums Module
============

This module provides enumeration types for the garden tracker.
Enums ensure type safety and consistency across the codebase.
"""

from app.enums.events import GardenActivity, WebSocketEvent
from app.enums.garden import (
    ActivityKind,
    EventType,
    ReminderFrequency,
    ReminderType,
    TimeOfDay,
    TriggerType,
)

__all__ = [
    "ActivityKind",
    "EventType",
    "GardenActivity",
    "ReminderFrequency",
    "ReminderType",
    "TimeOfDay",
    "TriggerType",
    "WebSocketEvent",
]
