"""
Schemas Module
==============

This module provides Pydantic models for request/response validation.
Schemas ensure data integrity and provide automatic validation.
"""

from app.schemas.common import ErrorDetail, ErrorResponse, SuccessResponse
from app.schemas.garden import (
    AddGrowthLogRequest,
    CreateAreaRequest,
    CreateCategoryRequest,
    CreateEventRequest,
    CreatePlantRequest,
    UpdateAreaRequest,
    UpdatePlantRequest,
)
from app.schemas.reminders import (
    CreateReminderRequest,
    NotificationContent,
    PresentedNotification,
    ReceiveNotificationRequest,
    SyncNotificationsRequest,
)

__all__ = [
    # Common
    "SuccessResponse",
    "ErrorResponse",
    "ErrorDetail",
    # Garden
    "CreateAreaRequest",
    "UpdateAreaRequest",
    "CreateCategoryRequest",
    "CreatePlantRequest",
    "UpdatePlantRequest",
    "AddGrowthLogRequest",
    "CreateEventRequest",
    # Reminders
    "CreateReminderRequest",
    "NotificationContent",
    "ReceiveNotificationRequest",
    "PresentedNotification",
    "SyncNotificationsRequest",
]
