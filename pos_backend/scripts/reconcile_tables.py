"""
Table occupancy reconciliation job

Recomputes every table's occupied flag from its active orders and fixes any
drift. Run periodically (e.g., via cron):

    python -m pos_backend.scripts.reconcile_tables
"""

import sys

from sqlmodel import Session
import structlog

from pos_backend.core.config import get_settings
from pos_backend.core.database import engine
from pos_backend.core.exceptions import StoreError
from pos_backend.core.logging import configure_logging
from pos_backend.services.table_occupancy import TableOccupancyTracker

logger = structlog.get_logger(__name__)


def main() -> int:
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL, settings.LOG_JSON)

    with Session(engine) as session:
        try:
            drifts = TableOccupancyTracker(session).reconcile()
        except StoreError as e:
            logger.error("Table reconciliation failed", error=e.message)
            return 1

    logger.info("Table reconciliation complete", corrected=len(drifts))
    return 0


if __name__ == "__main__":
    sys.exit(main())
