from abc import ABC, abstractmethod
from pathlib import Path

from tonemask.core.common.enums import StrategyName
from tonemask.features.span_detection.domain.models import SensitiveSpan
from tonemask.features.tone_synthesis.domain.models import ToneSettings
from .models import ProbeResult, RedactionResult, StrategyContext


class IRedactionStrategy(ABC):
    """
    One state of the fallback chain.
    Raises a RedactionError (or a codec runtime error) to hand over to the next state.
    """
    name: StrategyName

    @abstractmethod
    def run(self, ctx: StrategyContext) -> RedactionResult:
        pass


class IMediaToolAdapter(ABC):
    """
    Contract for the external media toolchain.
    """
    @abstractmethod
    def probe(self, path: Path) -> ProbeResult:
        """
        Reads codec, sample rate, channels and duration of the first audio stream.

        Raises:
            ToolInvocationError: the prober can't be run or reports no audio stream.
        """
        pass

    @abstractmethod
    def apply_span(self, source: Path, destination: Path, span: SensitiveSpan,
                   tone: ToneSettings, probe: ProbeResult) -> Path:
        """
        Writes a copy of `source` with the samples of `span` replaced by tone
        (or silence for MUTE), re-encoded with the probed codec.
        """
        pass

    @abstractmethod
    def to_pcm(self, source: Path, destination: Path, alternative: bool = False) -> Path:
        """
        Converts a compressed source into a PCM file soundfile can read.
        `alternative` selects the more forgiving second attempt.
        """
        pass

    @abstractmethod
    def from_pcm(self, source: Path, destination: Path, probe: ProbeResult) -> Path:
        """
        Encodes a PCM file into the codec described by `probe`.
        """
        pass
