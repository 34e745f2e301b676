from abc import ABC, abstractmethod
from typing import Optional, Dict, Any
from uuid import UUID

from tonemask.core.jobs.models import JobModel
from .models import JobSubmission

class IJobRepository(ABC):
    """
    Contract for Job persistence.
    Injected into the JobManager so the engine never touches ambient state.
    """

    @abstractmethod
    def create_job(self, submission: JobSubmission) -> UUID:
        """Creates a new Job record in PENDING state."""
        pass

    @abstractmethod
    def get_job(self, job_id: UUID) -> Optional[JobModel]:
        """Returns a detached snapshot of the job, or None."""
        pass

    @abstractmethod
    def mark_processing(self, job_id: UUID) -> None:
        pass

    @abstractmethod
    def mark_completed(self, job_id: UUID, meta: Dict[str, Any], strategy_used: Optional[str]) -> None:
        pass

    @abstractmethod
    def mark_failed(self, job_id: UUID, error_message: str) -> None:
        pass
