# File: tonemask/core/database/base.py

from sqlalchemy.orm import declarative_base

# The shared registry. The job store models inherit from this.
Base = declarative_base()
