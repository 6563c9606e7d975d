from __future__ import annotations

import logging
from dataclasses import dataclass

from app.config import AppConfig
from app.services.application.activity_logger import ActivityLogger
from app.services.application.event_service import EventService
from app.services.application.garden_service import GardenService
from app.services.application.notifications_service import NotificationsService
from app.services.application.reminder_service import ReminderService
from app.services.container_builder import ContainerBuilder
from app.services.utilities.plant_identification_service import PlantIdentificationService
from app.utils.emitters import EmitterService
from app.utils.event_bus import EventBus
from app.utils.uploads import UploadStore
from app.workers.unified_scheduler import UnifiedScheduler
from infrastructure.database.repositories import (
    AreaRepository,
    CategoryRepository,
    EventRepository,
    PlantRepository,
    ReceivedNotificationRepository,
    ReminderRepository,
)
from infrastructure.database.sqlite_handler import SQLiteDatabaseHandler
from infrastructure.logging.audit import AuditLogger

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Aggregate and manage core backend services."""

    config: AppConfig
    database: SQLiteDatabaseHandler
    area_repo: AreaRepository
    category_repo: CategoryRepository
    plant_repo: PlantRepository
    event_repo: EventRepository
    reminder_repo: ReminderRepository
    received_repo: ReceivedNotificationRepository
    audit_logger: AuditLogger
    event_bus: EventBus
    activity_logger: ActivityLogger
    # Shared utilities
    emitter_service: EmitterService
    upload_store: UploadStore
    # Domain services
    garden_service: GardenService
    event_service: EventService
    notifications_service: NotificationsService
    reminder_service: ReminderService
    identification_service: PlantIdentificationService
    scheduler: UnifiedScheduler

    @classmethod
    def build(cls, config: AppConfig, *, start_scheduler: bool | None = None) -> "ServiceContainer":
        """Construct the service container with all dependencies.

        Args:
            config: Application configuration
            start_scheduler: Start the reminder dispatcher; defaults to
                ``config.enable_scheduler``
        """
        logger.info("Building ServiceContainer using ContainerBuilder...")
        container = cls(**ContainerBuilder(config).build())

        # Tasks need the real services, so the scheduler is wired last.
        from app.workers.scheduled_tasks import configure_scheduler

        start = config.enable_scheduler if start_scheduler is None else start_scheduler
        try:
            configure_scheduler(container.scheduler, container, start=start)
        except Exception as e:
            raise RuntimeError("Failed to initialize UnifiedScheduler") from e
        if start:
            logger.info("✓ UnifiedScheduler initialized and started")

        container.activity_logger.log_activity(
            activity_type=ActivityLogger.SYSTEM_STARTUP,
            description="Garden Tracker starting up",
            severity=ActivityLogger.INFO,
        )
        logger.info("ServiceContainer built successfully.")
        return container

    def shutdown(self) -> None:
        """Release external resources before process exit."""
        try:
            self.activity_logger.log_activity(
                activity_type=ActivityLogger.SYSTEM_SHUTDOWN,
                description="Garden Tracker shutting down",
                severity=ActivityLogger.INFO,
            )
        except Exception as e:
            logger.warning("Failed to log shutdown activity: %s", e)

        try:
            self.scheduler.shutdown()
            logger.info("✓ UnifiedScheduler stopped")
        except Exception as e:
            logger.warning("Failed to stop UnifiedScheduler: %s", e)

        self.event_bus.shutdown()
        self.database.close()
        logger.info("ServiceContainer shutdown complete.")
