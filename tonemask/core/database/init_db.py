# File: tonemask/core/database/init_db.py
import logging

from sqlalchemy_utils import database_exists, create_database

from tonemask.core.database.base import Base
from tonemask.core.database.connection import engine

logger = logging.getLogger(__name__)


def init_db(bind=engine) -> None:
    """Creates the database if needed, then every registered table."""
    # Import all models to ensure they are registered
    import tonemask.core.jobs.models  # noqa: F401

    if not database_exists(bind.url):
        logger.info(f"Creating database {bind.url.database}")
        create_database(bind.url)

    Base.metadata.create_all(bind=bind)


if __name__ == "__main__":
    init_db()
    print("✅ Job store tables created.")
