from abc import ABC, abstractmethod
from pathlib import Path

from tonemask.core.shared_types import AudioBuffer
from tonemask.features.span_detection.domain.models import RedactionPlan
from tonemask.features.tone_synthesis.domain.models import ToneSettings


class IAudioCodec(ABC):
    """
    Contract for reading and writing sample-addressable audio files.
    """
    @abstractmethod
    def decode(self, path: Path) -> AudioBuffer:
        """
        Reads the whole file into memory.

        Raises:
            DecodeError: the container cannot be parsed.
        """
        pass

    @abstractmethod
    def encode(self, buffer: AudioBuffer, path: Path) -> Path:
        """
        Writes the buffer in its native subtype/format. No resampling.
        """
        pass


class IAudioRedactor(ABC):
    @abstractmethod
    def redact(self, source: AudioBuffer, plan: RedactionPlan, tone: ToneSettings) -> AudioBuffer:
        pass
