from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from tonemask.core.common.enums import FormatFamily, ResultKind, StrategyName
from tonemask.features.span_detection.domain.models import RedactionPlan
from tonemask.features.tone_synthesis.domain.models import ToneSettings


class ExecutorState(str, Enum):
    INIT = "init"
    TRY_EXTERNAL_TOOL = "try_external_tool"
    TRY_IN_PROCESS_BUFFER = "try_in_process_buffer"
    PASSTHROUGH = "passthrough"
    DONE = "done"


@dataclass(frozen=True)
class ProbeResult:
    """Stream facts reported by ffprobe for the first audio stream."""
    codec_name: str
    sample_rate: int
    channels: int
    duration: Optional[float] = None


@dataclass(frozen=True)
class Attempt:
    """One demotion: which strategy gave up and why."""
    strategy: str
    error: str

    def to_dict(self) -> Dict[str, str]:
        return {"strategy": self.strategy, "error": self.error}


@dataclass(frozen=True)
class StrategyContext:
    """
    Everything a strategy needs for one job. Built per execute() call,
    so strategies themselves stay stateless.
    """
    source_path: Path
    output_path: Path
    plan: RedactionPlan
    tone: ToneSettings
    overlay_tone: ToneSettings
    family: FormatFamily
    scratch_dir: Path


@dataclass(frozen=True)
class RedactionResult:
    kind: ResultKind
    strategy_used: StrategyName
    span_count: int
    output_path: Path
    tone_track_path: Optional[Path] = None
    descriptor_path: Optional[Path] = None
    # Compressed source decoded to PCM, redacted, then encoded back
    transcoded: bool = False
    attempts: Tuple[Attempt, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if self.kind == ResultKind.OVERLAID and (self.tone_track_path is None or self.descriptor_path is None):
            raise ValueError("An overlaid result needs both a tone track and a descriptor.")

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "kind": self.kind.value,
            "strategyUsed": self.strategy_used.value,
            "spanCount": self.span_count,
            "outputPath": str(self.output_path),
            "attempts": [a.to_dict() for a in self.attempts]
        }
        if self.kind == ResultKind.OVERLAID:
            data["toneTrackPath"] = str(self.tone_track_path)
            data["descriptorPath"] = str(self.descriptor_path)
        if self.transcoded:
            data["transcoded"] = True
        return data
