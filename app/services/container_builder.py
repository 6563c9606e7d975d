"""
Container Builder
=================

Extracts service container construction logic from ServiceContainer.build().

Each build_*() method focuses on one layer, so construction stays testable
and the wiring order is explicit.

Architecture:
- ContainerBuilder: Orchestrates the construction of all services
- build_infrastructure(): database, repositories, event bus, audit/activity logging
- build_application(): domain services, uploads, PlantNet client, scheduler
- ServiceContainer.build(): Delegates to ContainerBuilder.build()
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any

from app.config import AppConfig
from app.extensions import socketio
from app.services.application.activity_logger import ActivityLogger
from app.services.application.event_service import EventService
from app.services.application.garden_service import GardenService
from app.services.application.notifications_service import NotificationsService
from app.services.application.reminder_service import ReminderService
from app.services.utilities.plant_identification_service import PlantIdentificationService
from app.utils.emitters import EmitterService
from app.utils.event_bus import EventBus
from app.utils.time import resolve_timezone
from app.utils.uploads import UploadStore
from app.workers.unified_scheduler import UnifiedScheduler
from infrastructure.database.repositories import (
    ActivityRepository,
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
class InfrastructureComponents:
    """Infrastructure layer components (database, repos, logging)."""

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


@dataclass
class ApplicationComponents:
    """Application services built on top of the infrastructure."""

    emitter_service: EmitterService
    garden_service: GardenService
    event_service: EventService
    notifications_service: NotificationsService
    reminder_service: ReminderService
    identification_service: PlantIdentificationService
    upload_store: UploadStore
    scheduler: UnifiedScheduler


class ContainerBuilder:
    """Builder for constructing the service container."""

    def __init__(self, config: AppConfig):
        self.config = config

    def build_infrastructure(self) -> InfrastructureComponents:
        """
        Build infrastructure layer (database, repositories, logging).

        Returns:
            InfrastructureComponents with all infrastructure services
        """
        logger.info("Building infrastructure components...")

        audit_logger = AuditLogger(self.config.audit_log_path, self.config.log_level)
        database = SQLiteDatabaseHandler(self.config.database_path, cache_size_kb=self.config.db_cache_size_kb)
        database.init_app(None)
        event_bus = EventBus(self.config.eventbus_queue_size, self.config.eventbus_worker_count)
        log_dir = os.path.dirname(self.config.audit_log_path) or "logs"

        infra = InfrastructureComponents(
            database=database,
            area_repo=AreaRepository(database),
            category_repo=CategoryRepository(database),
            plant_repo=PlantRepository(database),
            event_repo=EventRepository(database),
            reminder_repo=ReminderRepository(database),
            received_repo=ReceivedNotificationRepository(database),
            audit_logger=audit_logger,
            event_bus=event_bus,
            activity_logger=ActivityLogger(ActivityRepository(database), event_bus, log_dir=log_dir),
        )
        logger.info("✓ Infrastructure components initialized")
        return infra

    def build_application(self, infra: InfrastructureComponents) -> ApplicationComponents:
        """Build domain services in dependency order."""
        logger.info("Building application components...")
        tz = resolve_timezone(self.config.timezone)
        emitter_service = EmitterService(socketio)
        infra.event_bus.subscribe("activity.*", emitter_service.emit_activity)

        upload_store = UploadStore(self.config.upload_folder)
        upload_store.ensure_folder()

        garden_service = GardenService(
            infra.area_repo,
            infra.category_repo,
            infra.plant_repo,
            tz=tz,
            activity_logger=infra.activity_logger,
            audit_logger=infra.audit_logger,
            upload_store=upload_store,
        )
        event_service = EventService(
            infra.event_repo,
            garden_service,
            activity_logger=infra.activity_logger,
            audit_logger=infra.audit_logger,
        )
        notifications_service = NotificationsService(infra.received_repo, event_service, emitter_service)
        reminder_service = ReminderService(
            infra.reminder_repo,
            notifications_service,
            tz=tz,
            emitter_service=emitter_service,
            activity_logger=infra.activity_logger,
            audit_logger=infra.audit_logger,
        )
        identification_service = PlantIdentificationService(
            self.config.plantnet_api_key,
            base_url=self.config.plantnet_base_url,
            timeout=self.config.request_timeout_seconds,
        )
        if not identification_service.configured:
            logger.warning("PLANTNET_API_KEY not set; plant identification will be unavailable")

        logger.info("✓ Application components initialized (timezone=%s)", tz)
        return ApplicationComponents(
            emitter_service=emitter_service,
            garden_service=garden_service,
            event_service=event_service,
            notifications_service=notifications_service,
            reminder_service=reminder_service,
            identification_service=identification_service,
            upload_store=upload_store,
            scheduler=UnifiedScheduler(max_workers=self.config.scheduler_max_workers),
        )

    def build(self) -> dict[str, Any]:
        """
        Build the complete service container.

        Returns:
            Dictionary with all components for ServiceContainer construction
        """
        infra = self.build_infrastructure()
        app = self.build_application(infra)

        return {
            "config": self.config,
            "database": infra.database,
            "area_repo": infra.area_repo,
            "category_repo": infra.category_repo,
            "plant_repo": infra.plant_repo,
            "event_repo": infra.event_repo,
            "reminder_repo": infra.reminder_repo,
            "received_repo": infra.received_repo,
            "audit_logger": infra.audit_logger,
            "event_bus": infra.event_bus,
            "activity_logger": infra.activity_logger,
            "emitter_service": app.emitter_service,
            "garden_service": app.garden_service,
            "event_service": app.event_service,
            "notifications_service": app.notifications_service,
            "reminder_service": app.reminder_service,
            "identification_service": app.identification_service,
            "upload_store": app.upload_store,
            "scheduler": app.scheduler,
        }
