import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, JSON, Uuid
from tonemask.core.database.base import Base
from .types import JobType, JobStatus

def utc_now():
    return datetime.now(timezone.utc)

class JobModel(Base):
    __tablename__ = "jobs"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    job_type = Column(SQLEnum(JobType), nullable=False)
    status = Column(SQLEnum(JobStatus), default=JobStatus.PENDING, nullable=False, index=True)

    # Paths are assigned by the caller and unique per job
    source_path = Column(String, nullable=False)
    output_path = Column(String, nullable=False)

    payload = Column(JSON, default=dict)  # Input parameters (transcript, tone overrides)
    meta = Column(JSON, default=dict)     # RedactionResult descriptor

    # Which technique produced the artifact ('passthrough' means nothing was redacted)
    strategy_used = Column(String, nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), default=utc_now)
    started_at = Column(DateTime(timezone=True), nullable=True)
    finished_at = Column(DateTime(timezone=True), nullable=True)

    error_message = Column(String, nullable=True)
