from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import numpy as np


@dataclass(frozen=True)
class TimeSpan:
    """
    Value Object representing a valid span of time.
    Enforces that start is strictly before end.
    """
    start: float
    end: float

    def __post_init__(self):
        if self.start < 0 or self.end < 0:
            raise ValueError("Timestamps cannot be negative.")
        if self.start >= self.end:
            raise ValueError(f"Start time ({self.start}) must be before end time ({self.end}).")

    @property
    def duration(self) -> float:
        return self.end - self.start


@dataclass(frozen=True)
class MediaFile:
    """
    Entity representing a media file on the filesystem.
    Encapsulates path validation and directory creation.
    """
    path: Path

    def __post_init__(self):
        if str(self.path).strip() == "." or str(self.path).strip() == "":
            raise ValueError("File path cannot be empty.")

    def exists(self) -> bool:
        return self.path.exists()

    def ensure_parent_dir(self) -> None:
        """Creates the directory structure for this file if it doesn't exist."""
        self.path.parent.mkdir(parents=True, exist_ok=True)


@dataclass
class AudioBuffer:
    """
    Decoded PCM audio.

    samples is shaped (frames, channels), the layout soundfile reads with
    always_2d=True. subtype/format describe the native encoding so the
    buffer can be written back without changing it (e.g. PCM_16 / WAV).
    A buffer has a single owner; use copy() before handing it elsewhere.
    """
    sample_rate: int
    samples: np.ndarray
    subtype: Optional[str] = None
    format: Optional[str] = None

    def __post_init__(self):
        if self.sample_rate <= 0:
            raise ValueError(f"Sample rate must be positive: {self.sample_rate}")
        if self.samples.ndim != 2:
            raise ValueError(f"Samples must be shaped (frames, channels), got {self.samples.shape}")

    @property
    def frames(self) -> int:
        return self.samples.shape[0]

    @property
    def channels(self) -> int:
        return self.samples.shape[1]

    @property
    def duration(self) -> float:
        return self.frames / self.sample_rate

    def copy(self) -> "AudioBuffer":
        return AudioBuffer(
            sample_rate=self.sample_rate,
            samples=self.samples.copy(),
            subtype=self.subtype,
            format=self.format
        )
