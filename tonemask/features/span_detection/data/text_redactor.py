from typing import Iterable, List, Optional, Tuple
from ..domain.interfaces import IPatternClassifier
from .classifiers import DEFAULT_CLASSIFIERS


def redact_text(text: str, classifiers: Optional[Iterable[IPatternClassifier]] = None) -> str:
    """
    Replaces every classifier match in a transcript with a marker,
    e.g. "call 555-123-4567" -> "call [REDACTED PHONE_NUMBER]".
    Earlier classifiers win where matches overlap.
    """
    if classifiers is None:
        classifiers = DEFAULT_CLASSIFIERS

    chosen: List[Tuple[int, int, str]] = []
    for classifier in classifiers:
        for start, end in classifier.find_matches(text):
            if any(start < c_end and c_start < end for c_start, c_end, _ in chosen):
                continue
            chosen.append((start, end, classifier.name))

    # Replace right-to-left so earlier offsets stay valid
    for start, end, name in sorted(chosen, reverse=True):
        text = f"{text[:start]}[REDACTED {name.upper()}]{text[end:]}"
    return text
