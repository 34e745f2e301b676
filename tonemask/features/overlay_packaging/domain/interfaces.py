from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from tonemask.features.span_detection.domain.models import RedactionPlan
from .models import OverlayArtifacts


class IOverlayPackager(ABC):
    """
    Contract for redacting audio that can't be edited sample by sample.
    """
    @abstractmethod
    def package(self, source_path: Path, plan: RedactionPlan, output_path: Path,
                source_duration: Optional[float] = None) -> OverlayArtifacts:
        """
        Copies the source untouched and writes a separate tone track plus
        a playback descriptor next to it.

        Args:
            source_path: Original (usually compressed) audio.
            plan: Spans the tone track must cover.
            output_path: Where the verbatim copy goes.
            source_duration: Known source length, extends the tone track to match.
        """
        pass
