from typing import Optional

from tonemask.core.config.settings import settings
from tonemask.core.common.enums import RedactionMethod
from ..domain.models import ToneSettings


def build_tone_settings(frequency: Optional[float] = None, amplitude: Optional[float] = None,
                        method: str = RedactionMethod.BEEP.value,
                        overlay: bool = False) -> ToneSettings:
    """
    Standalone API: ToneSettings with configured defaults filled in.
    `overlay` picks the separate-track amplitude instead of the in-place one.
    """
    if amplitude is None:
        amplitude = settings.OVERLAY_TONE_AMPLITUDE if overlay else settings.INPLACE_TONE_AMPLITUDE

    return ToneSettings(
        frequency_hz=settings.TONE_FREQUENCY_HZ if frequency is None else float(frequency),
        amplitude=float(amplitude),
        method=RedactionMethod(method)
    )
