from typing import Any, Iterable, List, Optional, Sequence, Union

from ..domain.interfaces import IPatternClassifier
from ..domain.models import Word, DetectionReport
from ..data.classifiers import DEFAULT_CLASSIFIERS
from ..data.transcript_parser import parse_words
from ..data.text_redactor import redact_text
from .detector import SpanDetector


def detect_sensitive_spans(words: Union[Sequence[Word], Any],
                           classifiers: Optional[Iterable[IPatternClassifier]] = None,
                           trailing_buffer: Optional[float] = None,
                           lookahead: Optional[int] = None) -> DetectionReport:
    """
    Standalone API: builds a RedactionPlan from a transcript.
    Accepts Word records or any provider payload parse_words() understands.
    """
    if not _is_word_list(words):
        words = parse_words(words)

    if classifiers is None:
        classifiers = DEFAULT_CLASSIFIERS

    detector = SpanDetector(trailing_buffer=trailing_buffer, lookahead=lookahead)
    return detector.detect(words, classifiers)


def redact_transcript(words: Sequence[Word],
                      classifiers: Optional[Iterable[IPatternClassifier]] = None) -> str:
    """
    Returns the transcript text with sensitive values replaced by markers.
    """
    text = " ".join(w.text for w in words if w.text)
    return redact_text(text, classifiers)


def _is_word_list(words: Any) -> bool:
    return isinstance(words, (list, tuple)) and all(isinstance(w, Word) for w in words)
