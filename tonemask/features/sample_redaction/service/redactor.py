import logging
import math
from typing import Optional

import numpy as np

from tonemask.core.common.enums import RedactionMethod
from tonemask.core.shared_types import AudioBuffer
from tonemask.features.span_detection.domain.models import RedactionPlan
from tonemask.features.tone_synthesis.domain.interfaces import IToneGenerator
from tonemask.features.tone_synthesis.domain.models import ToneSettings
from tonemask.features.tone_synthesis.service.synthesizer import SineToneGenerator
from ..domain.interfaces import IAudioRedactor

logger = logging.getLogger(__name__)


def span_to_frames(start: float, end: float, sample_rate: int, frames: int):
    """Maps seconds to a half-open frame range clamped to [0, frames]."""
    first = min(max(int(math.floor(start * sample_rate)), 0), frames)
    last = min(max(int(math.floor(end * sample_rate)), 0), frames)
    return first, last


class SampleDomainRedactor(IAudioRedactor):
    """
    Overwrites every span of a decoded buffer in place.
    The tone restarts at phase 0 at the first frame of each span.

    Without an explicit generator, a SineToneGenerator is built from the
    ToneSettings passed to redact().
    """

    def __init__(self, generator: Optional[IToneGenerator] = None):
        self.generator = generator

    def redact(self, source: AudioBuffer, plan: RedactionPlan, tone: ToneSettings) -> AudioBuffer:
        generator = self.generator or SineToneGenerator(tone.frequency_hz, tone.amplitude)

        for span in plan:
            first, last = span_to_frames(span.start, span.end, source.sample_rate, source.frames)
            if last <= first:
                logger.debug(f"Span {span.start:.2f}-{span.end:.2f}s lies outside the audio, skipped")
                continue

            if tone.method == RedactionMethod.MUTE:
                source.samples[first:last, :] = 0
            else:
                fill = generator.samples(last - first, source.sample_rate)
                source.samples[first:last, :] = fill.astype(source.samples.dtype, copy=False)[:, np.newaxis]

        return source
