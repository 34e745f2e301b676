import logging
from typing import Optional
from uuid import UUID

from tonemask.core.jobs.types import JobType
from tonemask.core.jobs.models import JobModel
from ..domain.interfaces import IJobRepository
from ..domain.models import JobSubmission
from ..data.repository import SqlJobRepository

logger = logging.getLogger(__name__)

class JobManager:
    """
    The Central Dispatcher.
    It doesn't know *how* to do the job, but it knows *who* can.
    """

    def __init__(self, repo: Optional[IJobRepository] = None):
        self.repo = repo or SqlJobRepository()

    def submit_job(self, submission: JobSubmission) -> UUID:
        """Create a Job Record in PENDING state."""
        job_id = self.repo.create_job(submission)
        logger.info(f"Job Submitted: {job_id} [{submission.job_type.value}]")
        return job_id

    def get_job(self, job_id: UUID) -> Optional[JobModel]:
        return self.repo.get_job(job_id)

    def run_job(self, job_id: UUID) -> None:
        """
        Executes a specific job by routing it to the appropriate feature handler.
        """
        job = self.repo.get_job(job_id)
        if not job:
            logger.error(f"Job {job_id} not found.")
            return

        self.repo.mark_processing(job_id)

        try:
            logger.info(f"Starting Job {job_id} ({job.job_type.value})...")

            result = self._route_to_feature(job)

            self.repo.mark_completed(job_id, result, result.get("strategyUsed"))
            logger.info(f"Job {job_id} Completed via {result.get('strategyUsed')}.")

        except NotImplementedError as e:
            # Configuration error
            self.repo.mark_failed(job_id, str(e))
            logger.error(f"Job {job_id} Failed: {e}")

        except Exception as e:
            # No output could be produced at all
            self.repo.mark_failed(job_id, str(e))
            logger.exception(f"Job {job_id} Failed: {e}")

    def _route_to_feature(self, job: JobModel) -> dict:
        """
        Routes the job to the correct Feature Handler.
        Uses lazy imports to prevent circular dependencies.
        """
        if job.job_type == JobType.AUDIO_REDACTION:
            from tonemask.features.redaction_strategy.service.job_handler import RedactionHandler
            params = dict(job.payload or {})
            params.setdefault("source_path", job.source_path)
            params.setdefault("output_path", job.output_path)
            return RedactionHandler().handle(params)

        raise NotImplementedError(f"No handler registered for JobType: {job.job_type}")
