"""Image upload storage.

Files are saved under the configured upload folder with a collision-free
name ``<epoch-ms>-<random>.<ext>`` and referenced as ``/uploads/<name>``.
"""

from __future__ import annotations

import logging
import os
import secrets

from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from app.constants import Uploads
from app.domain.exceptions import ValidationError
from app.utils.time import epoch_ms

logger = logging.getLogger(__name__)


def file_extension(filename: str | None) -> str:
    name = secure_filename(filename or "")
    return name.rsplit(".", 1)[1].lower() if "." in name else ""


class UploadStore:
    """Saves uploaded images and resolves their public paths."""

    def __init__(self, upload_folder: str):
        self.upload_folder = os.path.abspath(upload_folder)

    def ensure_folder(self) -> str:
        os.makedirs(self.upload_folder, exist_ok=True)
        return self.upload_folder

    def save(self, image_file: FileStorage | None) -> str | None:
        """Persist *image_file*; returns ``/uploads/<name>`` or None when no file was sent."""
        if image_file is None or not image_file.filename:
            return None

        ext = file_extension(image_file.filename)
        if ext not in Uploads.ALLOWED_EXTENSIONS:
            allowed = ", ".join(sorted(Uploads.ALLOWED_EXTENSIONS))
            raise ValidationError(f"Invalid image format. Allowed: {allowed}")

        unique_filename = f"{epoch_ms()}-{secrets.token_hex(4)}.{ext}"
        image_file.save(os.path.join(self.ensure_folder(), unique_filename))

        path = f"{Uploads.URL_PREFIX}/{unique_filename}"
        logger.info("Saved upload: %s", path)
        return path

    def remove(self, public_path: str | None) -> bool:
        """Delete a previously stored file; unknown or foreign paths are ignored."""
        if not public_path or not public_path.startswith(f"{Uploads.URL_PREFIX}/"):
            return False
        name = secure_filename(public_path[len(Uploads.URL_PREFIX) + 1:])
        target = os.path.join(self.upload_folder, name)
        try:
            os.remove(target)
        except FileNotFoundError:
            return False
        except OSError as exc:
            logger.warning("Failed to remove upload %s: %s", target, exc)
            return False
        return True
