"""
Plant Identification Service
============================

Identifies plant species and diseases from a single photo using the
PlantNet API (https://my-api.plantnet.org).

Features:
- Species identification (``/v2/identify/all``) with a best match
- Disease / pest identification (``/v2/diseases/identify``)
- Errors reported as ``{"success": False, "error": ...}`` instead of raised,
  so callers can show the message directly

An API key is required (``PLANTNET_API_KEY``).
"""
from __future__ import annotations

import logging
from typing import Any, BinaryIO

import requests

from app.constants import PlantNet

logger = logging.getLogger(__name__)


def image_part(image: bytes | BinaryIO, filename: str | None) -> tuple[str, bytes | BinaryIO, str]:
    """Multipart ``images`` part: PNG when the name mentions ``.png``, otherwise JPEG."""
    if filename and ".png" in filename.lower():
        return "photo.png", image, "image/png"
    return "photo.jpg", image, "image/jpeg"


class PlantIdentificationService:
    """Thin PlantNet client."""

    def __init__(
        self,
        api_key: str | None,
        *,
        base_url: str = PlantNet.BASE_URL,
        timeout: float = 30,
        session: requests.Session | None = None,
    ):
        self.api_key = api_key or None
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._http = session or requests

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def identify(self, image: bytes | BinaryIO | None, filename: str | None = None) -> dict[str, Any]:
        """Identify the species in *image*."""
        result, payload = self._post(f"/v2/identify/{PlantNet.PROJECT_ALL}", image, filename)
        if result["success"]:
            result["best_match"] = payload.get("bestMatch")
        return result

    def identify_disease(self, image: bytes | BinaryIO | None, filename: str | None = None) -> dict[str, Any]:
        """Identify diseases or pests visible in *image*."""
        result, _ = self._post("/v2/diseases/identify", image, filename)
        return result

    def _post(
        self, path: str, image: bytes | BinaryIO | None, filename: str | None
    ) -> tuple[dict[str, Any], dict[str, Any]]:
        if not self.api_key:
            return {"success": False, "error": PlantNet.MISSING_KEY_MESSAGE}, {}
        if not image:
            return {"success": False, "error": PlantNet.MISSING_IMAGE_MESSAGE}, {}

        try:
            response = self._http.post(
                f"{self.base_url}{path}",
                params={"api-key": self.api_key},
                files={"images": image_part(image, filename)},
                data={"organs": "auto"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.warning("PlantNet request to %s failed: %s", path, exc)
            return {"success": False, "error": str(exc) or "Network error"}, {}

        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {}

        if not response.ok:
            message = payload.get("message") or payload.get("error") or f"Request failed ({response.status_code})"
            logger.info("PlantNet %s returned %s: %s", path, response.status_code, message)
            return {"success": False, "error": message}, payload

        return {
            "success": True,
            "results": payload.get("results") or [],
            "remaining_requests": payload.get("remainingIdentificationRequests"),
            "version": payload.get("version"),
        }, payload
