"""
Database initialization and table creation script.
Run this once to set up the database schema.
"""
import logging

from birthlottery.core.database import engine, Base
from birthlottery.models.snapshot import DatasetSnapshot  # noqa: F401  (registers the table)

logger = logging.getLogger(__name__)


def init_db():
    """Create all tables."""
    Base.metadata.create_all(bind=engine)
    logger.info("All tables created successfully")


def drop_all():
    """Drop all tables (use with caution)."""
    Base.metadata.drop_all(bind=engine)
    logger.info("All tables dropped")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
    print("Database initialized successfully!")
