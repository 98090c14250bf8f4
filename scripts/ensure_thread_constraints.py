#!/usr/bin/env python3
"""Create the ContactThread uniqueness constraints (id, service_id, phone_number).

Run from repo root with .env (NEO4J_URI, NEO4J_USER, NEO4J_PASSWORD, optional
NEO4J_DATABASE). Idempotent.
"""
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(REPO_ROOT / "src"))

from contact_threads.infrastructure import (  # noqa: E402
    Neo4jSettings,
    Neo4jThreadStore,
    get_driver,
    load_env,
)

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)
logger = logging.getLogger(__name__)


def main() -> int:
    load_env()
    settings = Neo4jSettings.from_env()
    driver = get_driver(settings)
    try:
        Neo4jThreadStore(driver, database=settings.database).ensure_constraints()
        logger.info("Constraints ready on %s", settings.uri)
        return 0
    finally:
        driver.close()


if __name__ == "__main__":
    sys.exit(main())
