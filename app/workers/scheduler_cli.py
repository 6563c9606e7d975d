from __future__ import annotations

import argparse
import json
import logging
import time

from app.config import load_config, setup_logging
from app.services.container import ServiceContainer
from app.workers.scheduled_tasks import REMINDER_DISPATCH_TASK

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Run the reminder dispatcher without starting the web server."""
    parser = argparse.ArgumentParser(prog="garden-scheduler")
    parser.add_argument(
        "--once",
        action="store_true",
        help="Deliver due reminders once and exit instead of looping",
    )
    args = parser.parse_args(argv)

    config = load_config()
    setup_logging(debug=config.DEBUG)

    if args.once:
        container = ServiceContainer.build(config, start_scheduler=False)
        try:
            result = container.scheduler.run_now(REMINDER_DISPATCH_TASK)
        finally:
            container.shutdown()
        if result is None or not result.success:
            return 1
        print(json.dumps(result.result, indent=2))
        return 0

    config.enable_scheduler = True
    container = ServiceContainer.build(config)
    logger.info("Scheduler running (press Ctrl+C to stop)")
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        logger.info("Stopping scheduler...")
    finally:
        try:
            container.shutdown()
        except (RuntimeError, OSError, AttributeError, TypeError):
            logger.exception("Failed to shut down scheduler cleanly")
            return 1
    return 0


if __name__ == "__main__":
    import sys

    raise SystemExit(main(sys.argv[1:]))
