"""
Health service: storage reachability probe.
"""

import logging
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class HealthService:
    """Checks that the database answers queries."""

    def __init__(self, db: Session):
        self.db = db

    def check_database_connection(self) -> bool:
        try:
            self.db.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.error(f"[HEALTH] Database unavailable: {e}")
            return False
