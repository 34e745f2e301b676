from pathlib import Path
from typing import Any, Iterable, Optional, Sequence, Union

from tonemask.features.span_detection.domain.interfaces import IPatternClassifier
from tonemask.features.span_detection.domain.models import RedactionPlan, Word
from tonemask.features.span_detection.service.api import detect_sensitive_spans
from tonemask.features.tone_synthesis.service.api import build_tone_settings
from ..domain.models import RedactionResult
from .executor import RedactionExecutor

# Strategies are stateless, so one executor serves every call
_executor = RedactionExecutor()


def redact_file(source_path: Union[str, Path], plan: RedactionPlan, output_path: Union[str, Path],
                frequency: Optional[float] = None, amplitude: Optional[float] = None,
                method: str = "beep") -> RedactionResult:
    """
    Standalone API: redacts the planned spans of an audio file.
    Does NOT interact with the database.

    Raises:
        ValueError: frequency <= 0, amplitude outside (0, 1], or unknown method.
        FileNotFoundError: the source doesn't exist.
        PassthroughError: not even a plain copy could be written.
    """
    tone = build_tone_settings(frequency, amplitude, method)
    # An explicit amplitude applies to the overlay track as well
    overlay_tone = build_tone_settings(frequency, amplitude, method, overlay=True)

    return _executor.execute(Path(source_path), plan, Path(output_path), tone=tone, overlay_tone=overlay_tone)


def redact_with_transcript(source_path: Union[str, Path], words_or_payload: Union[Sequence[Word], Any],
                           output_path: Union[str, Path],
                           classifiers: Optional[Iterable[IPatternClassifier]] = None,
                           **tone_overrides) -> RedactionResult:
    """
    Standalone API: detect spans from a transcript, then redact.
    tone_overrides: frequency, amplitude, method.
    """
    report = detect_sensitive_spans(words_or_payload, classifiers)
    return redact_file(source_path, report.plan, output_path, **tone_overrides)
