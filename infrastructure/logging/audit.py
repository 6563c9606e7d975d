import json
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict

from app.utils.time import iso_now


class AuditLogger:
    """Structured audit logger that writes append-only JSON records.

    Destructive garden operations (deleting areas, plants, events, cancelling
    reminders) are recorded here in addition to the activity log.
    """

    def __init__(self, log_path: str, level: str = "INFO", *, actor: str = "api") -> None:
        self.log_path = Path(log_path)
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        self.default_actor = actor

        self.logger = logging.getLogger("garden.audit")
        self.logger.setLevel(getattr(logging, level.upper(), logging.INFO))
        self.logger.propagate = False

        # One file handler per process, even when several containers are built (tests)
        if not any(isinstance(handler, RotatingFileHandler) for handler in self.logger.handlers):
            handler = RotatingFileHandler(
                filename=str(self.log_path),
                maxBytes=10 * 1024 * 1024,  # 10 MB
                backupCount=30,
                encoding="utf-8",
                delay=True,
            )
            handler.setFormatter(
                logging.Formatter(fmt="%(asctime)sZ | %(levelname)s | %(message)s", datefmt="%Y-%m-%dT%H:%M:%S")
            )
            self.logger.addHandler(handler)

    def log_event(self, actor: str, action: str, resource: str, outcome: str, **metadata: Any) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "ts": iso_now(timespec="seconds"),
            "actor": actor,
            "action": action,
            "resource": resource,
            "outcome": outcome,
        }
        if metadata:
            payload["meta"] = metadata

        self.logger.info(json.dumps(payload, default=str, ensure_ascii=False))
        return payload

    def record_deletion(self, resource: str, resource_id: Any, *, deleted: bool, **metadata: Any) -> Dict[str, Any]:
        """Shorthand for ``delete`` actions on ``<resource>/<id>``."""
        return self.log_event(
            self.default_actor,
            "delete",
            f"{resource}/{resource_id}",
            "success" if deleted else "not_found",
            **metadata,
        )
