from enum import Enum

class JobType(str, Enum):
    AUDIO_REDACTION = "audio_redaction"

class JobStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
