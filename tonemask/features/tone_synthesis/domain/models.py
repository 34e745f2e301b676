from dataclasses import dataclass

from tonemask.core.common.enums import RedactionMethod


@dataclass(frozen=True)
class ToneSettings:
    """
    How a span is covered: a sine of `frequency_hz` at `amplitude`,
    or digital silence when method is MUTE.
    """
    frequency_hz: float = 1000.0
    amplitude: float = 0.5
    method: RedactionMethod = RedactionMethod.BEEP

    def __post_init__(self):
        if self.frequency_hz <= 0:
            raise ValueError(f"Tone frequency must be positive: {self.frequency_hz}")
        if not 0 < self.amplitude <= 1:
            raise ValueError(f"Tone amplitude must be in (0, 1]: {self.amplitude}")
        # Accept the plain string form ("beep" / "mute") from job params
        object.__setattr__(self, "method", RedactionMethod(self.method))
