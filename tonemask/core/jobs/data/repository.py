from typing import Optional, Dict, Any
from uuid import UUID

from tonemask.core.database.connection import SessionLocal
from tonemask.core.jobs.models import JobModel, utc_now
from tonemask.core.jobs.types import JobStatus
from ..domain.interfaces import IJobRepository
from ..domain.models import JobSubmission

class SqlJobRepository(IJobRepository):

    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory

    def create_job(self, submission: JobSubmission) -> UUID:
        with self.session_factory() as db:
            new_job = JobModel(
                job_type=submission.job_type,
                source_path=str(submission.source_path),
                output_path=str(submission.output_path),
                payload=submission.payload,
                status=JobStatus.PENDING
            )
            db.add(new_job)
            db.commit()
            db.refresh(new_job)
            return new_job.id

    def get_job(self, job_id: UUID) -> Optional[JobModel]:
        with self.session_factory() as db:
            job = db.get(JobModel, job_id)
            if job:
                db.expunge(job)
            return job

    def mark_processing(self, job_id: UUID) -> None:
        with self.session_factory() as db:
            job = self._require(db, job_id)
            job.status = JobStatus.PROCESSING
            job.started_at = utc_now()
            db.commit()

    def mark_completed(self, job_id: UUID, meta: Dict[str, Any], strategy_used: Optional[str]) -> None:
        with self.session_factory() as db:
            job = self._require(db, job_id)
            job.status = JobStatus.COMPLETED
            job.meta = meta
            job.strategy_used = strategy_used
            job.finished_at = utc_now()
            db.commit()

    def mark_failed(self, job_id: UUID, error_message: str) -> None:
        with self.session_factory() as db:
            job = self._require(db, job_id)
            job.status = JobStatus.FAILED
            job.error_message = error_message
            job.finished_at = utc_now()
            db.commit()

    @staticmethod
    def _require(db, job_id: UUID) -> JobModel:
        job = db.get(JobModel, job_id)
        if not job:
            raise ValueError(f"Job {job_id} not found.")
        return job
