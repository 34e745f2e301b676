import json
import logging
import subprocess
import sys
from pathlib import Path

from tonemask.core.exceptions import DecodeError, ToolInvocationError
from tonemask.features.span_detection.domain.models import RedactionPlan
from tonemask.features.tone_synthesis.domain.models import ToneSettings
from .worker import run, EXIT_DECODE_ERROR

logger = logging.getLogger(__name__)

WORKER_MODULE = "tonemask.features.sample_redaction.service.worker"


def redact_audio_file(source_path: Path, plan: RedactionPlan, output_path: Path, tone: ToneSettings) -> Path:
    """
    Standalone API: decode, overwrite the spans, encode in the source's format.
    """
    return run(Path(source_path), Path(output_path), plan, tone)


def redact_audio_file_isolated(source_path: Path, plan: RedactionPlan, output_path: Path,
                               tone: ToneSettings, scratch_dir: Path) -> Path:
    """
    Same as redact_audio_file, but in a child interpreter so the decoded
    samples are released with the process.
    """
    plan_file = Path(scratch_dir) / "plan.json"
    with open(plan_file, "w", encoding="utf-8") as f:
        json.dump(plan.to_dict(), f)

    cmd = [
        sys.executable, "-m", WORKER_MODULE,
        str(source_path), str(output_path), str(plan_file),
        "--frequency", str(tone.frequency_hz),
        "--amplitude", str(tone.amplitude),
        "--method", tone.method.value
    ]

    logger.info(f"Running isolated redaction: {' '.join(cmd)}")

    try:
        proc = subprocess.run(cmd, capture_output=True, text=True)
    except OSError as e:
        raise ToolInvocationError(f"Could not start redaction worker: {e}", command=cmd) from e

    if proc.returncode == EXIT_DECODE_ERROR:
        raise DecodeError(f"Worker could not decode {source_path}: {proc.stderr.strip()}")
    if proc.returncode != 0:
        logger.error(f"Redaction worker failed: {proc.stderr}")
        raise ToolInvocationError(
            f"Redaction worker exited with {proc.returncode}",
            command=cmd, returncode=proc.returncode, stderr=proc.stderr
        )

    return Path(output_path)
