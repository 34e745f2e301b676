from pathlib import Path
from typing import Optional

from tonemask.features.span_detection.domain.models import RedactionPlan
from ..domain.models import OverlayArtifacts
from .packager import OverlayTrackPackager


def package_overlay(source_path: str, plan: RedactionPlan, output_path: str,
                    source_duration: Optional[float] = None) -> OverlayArtifacts:
    """
    Standalone API: verbatim copy + tone track + playback descriptor.
    Does NOT interact with the database.
    """
    packager = OverlayTrackPackager()
    return packager.package(Path(source_path), plan, Path(output_path), source_duration)
