# File: tonemask/core/database/connection.py

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from tonemask.core.config.settings import settings

# Resolved once: USE_SQLITE is read at import time
DATABASE_URL = settings.DATABASE_URL
IS_SQLITE = DATABASE_URL.startswith("sqlite")

# Job handlers may run off the importing thread
connect_args = {"check_same_thread": False} if IS_SQLITE else {}

engine = create_engine(
    DATABASE_URL,
    echo=False,
    pool_pre_ping=not IS_SQLITE,
    connect_args=connect_args
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
