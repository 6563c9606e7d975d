"""
Plant Identification API
========================

Species and disease identification from a single photo via PlantNet.
"""

from __future__ import annotations

import logging
from typing import Callable

from flask import Blueprint, Response, request

from app.blueprints.api._common import get_identification_service as _identification_service, success as _success
from app.constants import PlantNet
from app.domain.exceptions import ConfigurationError, ExternalServiceError, ValidationError
from app.utils.http import safe_route

identify_api = Blueprint("identify_api", __name__)
logger = logging.getLogger("identify_api")


def _run(identify: Callable) -> Response:
    image = request.files.get("image")
    if image is None or not image.filename:
        raise ValidationError(PlantNet.MISSING_IMAGE_MESSAGE)
    if not _identification_service().configured:
        raise ConfigurationError(PlantNet.MISSING_KEY_MESSAGE)

    result = identify(image.read(), image.filename)
    if not result["success"]:
        raise ExternalServiceError(result["error"], detail={"filename": image.filename})
    return _success(result)


@identify_api.post("/plant")
@safe_route("Failed to identify plant")
def identify_plant() -> Response:
    """Multipart ``image``; returns candidate species and the best match."""
    return _run(_identification_service().identify)


@identify_api.post("/disease")
@safe_route("Failed to identify disease")
def identify_disease() -> Response:
    return _run(_identification_service().identify_disease)
