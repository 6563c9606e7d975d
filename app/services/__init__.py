"""
Service Organization
====================
Services are organized by their lifecycle and instantiation pattern:

**application/**
  Singleton services managed by ServiceContainer. One instance per application.
  Examples: GardenService, EventService, ReminderService, NotificationsService

**utilities/**
  Stateless helpers that can be instantiated multiple times.
  Examples: PlantIdentificationService, demo data seeding
"""
