import logging
import shutil
from pathlib import Path
from typing import Optional

import numpy as np

from tonemask.core.config.settings import settings
from tonemask.core.shared_types import AudioBuffer, MediaFile
from tonemask.features.span_detection.domain.models import RedactionPlan
from tonemask.features.tone_synthesis.domain.interfaces import IToneGenerator
from tonemask.features.tone_synthesis.domain.models import ToneSettings
from tonemask.features.sample_redaction.data.soundfile_codec import SoundFileCodec
from tonemask.features.sample_redaction.service.redactor import SampleDomainRedactor
from ..domain.interfaces import IOverlayPackager
from ..domain.models import OverlayArtifacts, PlaybackDescriptor

logger = logging.getLogger(__name__)

TONE_SUFFIX = ".tone.wav"
DESCRIPTOR_SUFFIX = ".playback.json"


class OverlayTrackPackager(IOverlayPackager):
    def __init__(self, tone: Optional[ToneSettings] = None, sample_rate: Optional[int] = None,
                 channels: Optional[int] = None, tail_seconds: Optional[float] = None,
                 generator: Optional[IToneGenerator] = None):
        self.tone = tone or ToneSettings(
            frequency_hz=settings.TONE_FREQUENCY_HZ,
            amplitude=settings.OVERLAY_TONE_AMPLITUDE
        )
        self.sample_rate = sample_rate or settings.OVERLAY_SAMPLE_RATE
        self.channels = channels or settings.OVERLAY_CHANNELS
        self.tail_seconds = settings.OVERLAY_TAIL_SECONDS if tail_seconds is None else tail_seconds
        self.redactor = SampleDomainRedactor(generator)

    def package(self, source_path: Path, plan: RedactionPlan, output_path: Path,
                source_duration: Optional[float] = None) -> OverlayArtifacts:
        source_path = Path(source_path)
        output_path = Path(output_path)
        if not source_path.exists():
            raise FileNotFoundError(f"Audio not found: {source_path}")

        MediaFile(output_path).ensure_parent_dir()
        tone_path = output_path.with_name(f"{output_path.stem}{TONE_SUFFIX}")
        descriptor_path = output_path.with_name(f"{output_path.stem}{DESCRIPTOR_SUFFIX}")

        # 1. Original goes through byte for byte
        shutil.copyfile(source_path, output_path)

        # 2. Silence long enough to cover the last span and the source itself
        duration = max(plan.max_end + self.tail_seconds, source_duration or 0.0)
        frames = int(np.ceil(duration * self.sample_rate))
        track = AudioBuffer(
            sample_rate=self.sample_rate,
            samples=np.zeros((frames, self.channels), dtype=np.float32),
            subtype="PCM_16",
            format="WAV"
        )

        # 3. Tone into each span, same frame mapping as in-place redaction
        track = self.redactor.redact(track, plan, self.tone)
        SoundFileCodec().encode(track, tone_path)

        # 4. Descriptor
        descriptor = PlaybackDescriptor(
            spans=[{"start": s.start, "end": s.end} for s in plan],
            original_track=output_path.name,
            tone_track=tone_path.name,
            method=self.tone.method.value
        )
        with open(descriptor_path, "w", encoding="utf-8") as f:
            f.write(descriptor.to_json())

        logger.info(
            f"Packaged overlay for {source_path.name}: {len(plan)} spans, "
            f"{duration:.2f}s tone track -> {tone_path.name}"
        )

        return OverlayArtifacts(
            original_path=output_path,
            tone_track_path=tone_path,
            descriptor_path=descriptor_path,
            tone_duration_seconds=duration
        )
