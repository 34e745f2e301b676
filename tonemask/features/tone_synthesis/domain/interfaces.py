from abc import ABC, abstractmethod

import numpy as np

from tonemask.core.shared_types import AudioBuffer


class IToneGenerator(ABC):
    """
    Contract for producing the audible replacement written over a span.
    """
    @abstractmethod
    def samples(self, frames: int, sample_rate: int) -> np.ndarray:
        """
        Returns a mono float32 vector of `frames` samples, phase origin at index 0.
        """
        pass

    @abstractmethod
    def buffer(self, duration_seconds: float, sample_rate: int, channels: int) -> AudioBuffer:
        """
        Returns `ceil(duration * sample_rate)` frames of tone on every channel.
        """
        pass
