import json
import uuid
from types import SimpleNamespace

import pytest

from tonemask.core.database.connection import SessionLocal
from tonemask.core.jobs.service.manager import JobManager
from tonemask.core.jobs.domain.models import JobSubmission
from tonemask.core.jobs.types import JobType, JobStatus
from tonemask.core.jobs.models import JobModel

WORDS = [
    {"word": "my", "start": 0.0, "end": 0.2},
    {"word": "pin", "start": 0.2, "end": 0.5},
    {"word": "is", "start": 0.5, "end": 0.6},
    {"word": "123", "start": 1.0, "end": 1.3},
    {"word": "45", "start": 1.3, "end": 1.5},
    {"word": "6789", "start": 1.5, "end": 1.9},
    {"word": "thanks", "start": 2.5, "end": 2.9},
]


def test_job_submission_flow(tmp_path):
    """
    Verifies that a job can be created and stored in the database.
    """
    manager = JobManager()
    job_id = manager.submit_job(JobSubmission(
        source_path=tmp_path / "in.wav",
        output_path=tmp_path / "out.wav",
        payload={"words": WORDS}
    ))

    assert job_id is not None

    with SessionLocal() as db:
        job = db.get(JobModel, job_id)
        assert job.job_type == JobType.AUDIO_REDACTION
        assert job.status == JobStatus.PENDING
        assert job.payload == {"words": WORDS}
        assert job.source_path == str(tmp_path / "in.wav")


def test_submission_rejects_same_paths(tmp_path):
    with pytest.raises(ValueError):
        JobSubmission(source_path=tmp_path / "a.wav", output_path=tmp_path / "a.wav")


def test_run_redaction_job(tmp_path, wav_file):
    manager = JobManager()
    job_id = manager.submit_job(JobSubmission(
        source_path=wav_file,
        output_path=tmp_path / "out" / "speech.wav",
        payload={"words": WORDS, "method": "mute"}
    ))

    manager.run_job(job_id)

    job = manager.get_job(job_id)
    assert job.status == JobStatus.COMPLETED
    assert job.strategy_used in ("external_tool", "in_process_buffer")
    assert job.meta["spanCount"] == 1
    assert job.meta["skippedWords"] == 0
    assert job.meta["labels"] == ["ssn"]
    assert job.started_at is not None and job.finished_at is not None
    assert (tmp_path / "out" / "speech.wav").exists()


def test_run_job_from_transcript_file(tmp_path, corrupt_wav):
    transcript = tmp_path / "transcript.json"
    transcript.write_text(json.dumps({"words": WORDS}))

    manager = JobManager()
    job_id = manager.submit_job(JobSubmission(
        source_path=corrupt_wav,
        output_path=tmp_path / "out.wav",
        payload={"transcript_path": str(transcript)}
    ))

    manager.run_job(job_id)

    # Nothing could be redacted, but the job still delivers a copy
    job = manager.get_job(job_id)
    assert job.status == JobStatus.COMPLETED
    assert job.strategy_used == "passthrough"
    assert job.meta["kind"] == "passthrough"
    assert (tmp_path / "out.wav").read_bytes() == corrupt_wav.read_bytes()


def test_run_job_without_transcript_fails(tmp_path, wav_file):
    manager = JobManager()
    job_id = manager.submit_job(JobSubmission(
        source_path=wav_file,
        output_path=tmp_path / "out.wav"
    ))

    manager.run_job(job_id)

    job = manager.get_job(job_id)
    assert job.status == JobStatus.FAILED
    assert "transcript_path" in job.error_message


class FakeRepo:
    """In-memory stand-in for the SQL repository."""

    def __init__(self, job):
        self.job = job
        self.calls = []

    def create_job(self, submission):
        return self.job.id

    def get_job(self, job_id):
        return self.job

    def mark_processing(self, job_id):
        self.calls.append(("processing",))

    def mark_completed(self, job_id, meta, strategy_used):
        self.calls.append(("completed", strategy_used))

    def mark_failed(self, job_id, error_message):
        self.calls.append(("failed", error_message))


def test_run_job_routing_failure():
    """
    A job type nobody handles fails with a routing error.
    """
    job = SimpleNamespace(
        id=uuid.uuid4(),
        job_type=SimpleNamespace(value="speech_to_text"),
        payload={},
        source_path="/tmp/a.wav",
        output_path="/tmp/b.wav"
    )
    repo = FakeRepo(job)

    JobManager(repo=repo).run_job(job.id)

    assert repo.calls[0] == ("processing",)
    assert repo.calls[1][0] == "failed"
    assert "No handler registered" in repo.calls[1][1]


def test_run_missing_job_is_ignored():
    repo = FakeRepo(None)

    JobManager(repo=repo).run_job(uuid.uuid4())

    assert repo.calls == []
