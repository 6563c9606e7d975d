"""
Blueprint Common Utilities
==========================

Shared helper functions for all API blueprints.
Import these instead of duplicating helper code in each blueprint.

Usage:
    from app.blueprints.api._common import (
        get_container, get_json, success,
        get_garden_service, get_reminder_service, ...
    )

This module centralizes:
- Service container access
- Request body parsing (JSON or multipart form)
- Standardized response helpers
- Common service accessors
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from flask import current_app, request

from app.domain.exceptions import ValidationError
from app.utils.http import success_response

logger = logging.getLogger("api._common")

# ============================================================================
# CONTAINER ACCESS
# ============================================================================


def get_container():
    """
    Get the service container from Flask app config.

    Returns:
        ServiceContainer: The application service container

    Raises:
        RuntimeError: If container is not configured
    """
    container = current_app.config.get("CONTAINER")
    if not container:
        raise RuntimeError("ServiceContainer not found in app config")
    return container


# ============================================================================
# REQUEST HELPERS
# ============================================================================


def get_json() -> dict:
    """
    Get JSON request body with silent failure.

    Returns:
        dict: Parsed JSON body or empty dict if not available
    """
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


def get_payload() -> dict[str, Any]:
    """JSON body, or the form fields of a multipart request."""
    if request.mimetype == "multipart/form-data" or request.form:
        return {key: value for key, value in request.form.items()}
    return get_json()


def parse_optional_int(value: Any, name: str) -> Optional[int]:
    """Parse a query-string id; blank means no filter."""
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be an integer", detail={name: value}) from None


# ============================================================================
# RESPONSE HELPERS
# ============================================================================


def success(data: dict | list | None = None, status: int = 200, *, message: str | None = None):
    """
    Standard success response wrapper.

    Returns:
        Flask Response with format: {"ok": true, "data": ..., "error": null}
    """
    return success_response(data, status, message=message)



# ============================================================================
# SERVICE ACCESSORS
# ============================================================================


def _service(attr: str, label: str):
    container = get_container()
    service = getattr(container, attr, None)
    if not service:
        raise RuntimeError(f"{label} not available")
    return service


def get_garden_service():
    """Get garden service (areas, categories, plants, growth log)."""
    return _service("garden_service", "Garden service")


def get_event_service():
    return _service("event_service", "Event service")


def get_reminder_service():
    return _service("reminder_service", "Reminder service")


def get_notifications_service():
    """
    Get notifications service from container.

    Raises:
        RuntimeError: If service not available
    """
    return _service("notifications_service", "Notifications service")


def get_identification_service():
    return _service("identification_service", "Plant identification service")


def get_upload_store():
    return _service("upload_store", "Upload store")
