import math

import numpy as np

from tonemask.core.shared_types import AudioBuffer
from ..domain.interfaces import IToneGenerator


def tone_samples(frames: int, sample_rate: int, frequency_hz: float = 1000.0,
                 amplitude: float = 0.5) -> np.ndarray:
    """amplitude * sin(2*pi*f*n/sr) for n in [0, frames), as float32."""
    if frames < 0:
        raise ValueError(f"Frame count cannot be negative: {frames}")
    _validate(sample_rate, frequency_hz, amplitude)

    n = np.arange(frames, dtype=np.float64)
    tone = amplitude * np.sin(2.0 * np.pi * frequency_hz * n / sample_rate)
    return tone.astype(np.float32)


def synthesize(duration_seconds: float, sample_rate: int, channels: int = 1,
               frequency_hz: float = 1000.0, amplitude: float = 0.5) -> AudioBuffer:
    """
    Builds a multi-channel sine buffer. Same arguments give the same samples.
    """
    if duration_seconds < 0:
        raise ValueError(f"Duration cannot be negative: {duration_seconds}")
    if channels < 1:
        raise ValueError(f"Channel count must be at least 1: {channels}")
    _validate(sample_rate, frequency_hz, amplitude)

    frames = int(math.ceil(duration_seconds * sample_rate))
    mono = tone_samples(frames, sample_rate, frequency_hz, amplitude)

    return AudioBuffer(
        sample_rate=sample_rate,
        samples=np.repeat(mono[:, np.newaxis], channels, axis=1)
    )


class SineToneGenerator(IToneGenerator):
    """Binds a frequency/amplitude pair to the module-level helpers."""

    def __init__(self, frequency_hz: float = 1000.0, amplitude: float = 0.5):
        _validate(1, frequency_hz, amplitude)
        self.frequency_hz = frequency_hz
        self.amplitude = amplitude

    def samples(self, frames: int, sample_rate: int) -> np.ndarray:
        return tone_samples(frames, sample_rate, self.frequency_hz, self.amplitude)

    def buffer(self, duration_seconds: float, sample_rate: int, channels: int) -> AudioBuffer:
        return synthesize(duration_seconds, sample_rate, channels, self.frequency_hz, self.amplitude)


def _validate(sample_rate: int, frequency_hz: float, amplitude: float) -> None:
    if sample_rate <= 0:
        raise ValueError(f"Sample rate must be positive: {sample_rate}")
    if frequency_hz <= 0:
        raise ValueError(f"Tone frequency must be positive: {frequency_hz}")
    if not 0 < amplitude <= 1:
        raise ValueError(f"Tone amplitude must be in (0, 1]: {amplitude}")
