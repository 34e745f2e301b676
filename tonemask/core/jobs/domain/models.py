from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any
from tonemask.core.jobs.types import JobType

@dataclass(frozen=True)
class JobSubmission:
    """
    DTO for requesting a new job.
    """
    source_path: Path
    output_path: Path
    job_type: JobType = JobType.AUDIO_REDACTION
    payload: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if str(self.source_path) == str(self.output_path):
            raise ValueError("Output path must differ from the source path.")
