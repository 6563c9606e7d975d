from __future__ import annotations

import argparse
import json
import logging

from app.config import load_config, setup_logging
from app.services.container import ServiceContainer
from app.services.utilities.demo_data import seed_demo_data

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Load the demo garden into the configured database."""
    parser = argparse.ArgumentParser(prog="garden-seed")
    parser.add_argument("--database", help="SQLite path (default: GARDEN_DATABASE_PATH)")
    args = parser.parse_args(argv)

    config = load_config()
    if args.database:
        config.database_path = args.database
    setup_logging(debug=config.DEBUG)

    container = ServiceContainer.build(config, start_scheduler=False)
    try:
        result = seed_demo_data(container.garden_service)
    finally:
        container.shutdown()

    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    import sys

    raise SystemExit(main(sys.argv[1:]))
