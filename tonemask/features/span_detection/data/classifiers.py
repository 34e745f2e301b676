# File: tonemask/features/span_detection/data/classifiers.py
import re
from typing import Dict, List, Tuple
from ..domain.interfaces import IPatternClassifier

# Everything except word characters, whitespace and the hyphen used in "555-0100"
_PUNCTUATION = re.compile(r"[^\w\s-]")
_WHITESPACE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """
    Lower-cases, drops punctuation and collapses whitespace.
    "(555) 123-4567." -> "555 123-4567"
    """
    text = _PUNCTUATION.sub("", text.lower())
    return _WHITESPACE.sub(" ", text).strip()


class RegexClassifier(IPatternClassifier):
    """
    Classifier backed by a single compiled regular expression.
    """

    def __init__(self, name: str, pattern: str):
        self.name = name
        self.pattern = re.compile(pattern)

    def find_matches(self, text: str) -> List[Tuple[int, int]]:
        return [m.span() for m in self.pattern.finditer(text)]

    def __repr__(self) -> str:
        return f"RegexClassifier({self.name!r})"


class DigitRunClassifier(RegexClassifier):
    """
    Matches any run of at least min_digits digits, allowing single spaces or
    hyphens between them. Catches numbers the transcriber split into groups.
    """

    def __init__(self, min_digits: int = 4, name: str = "digit_run"):
        if min_digits < 1:
            raise ValueError(f"min_digits must be at least 1: {min_digits}")
        self.min_digits = min_digits
        super().__init__(name, r"(?<!\d)\d(?:[\s-]?\d){%d,}(?!\d)" % (min_digits - 1))


SSN = RegexClassifier("ssn", r"\b\d{3}[-\s]?\d{2}[-\s]?\d{4}\b")
CREDIT_CARD = RegexClassifier("credit_card", r"\b\d{4}[-\s]?\d{4}[-\s]?\d{4}[-\s]?\d{4}\b")
PHONE_NUMBER = RegexClassifier("phone_number", r"\b\d{3}[-\s]?\d{3}[-\s]?\d{4}\b")
BANK_ACCOUNT = RegexClassifier("bank_account", r"\b\d{8,17}\b")
ROUTING_NUMBER = RegexClassifier("routing_number", r"\b\d{9}\b")

DEFAULT_CLASSIFIERS: Tuple[IPatternClassifier, ...] = (
    SSN,
    CREDIT_CARD,
    PHONE_NUMBER,
    BANK_ACCOUNT,
    ROUTING_NUMBER,
)

classifier_registry: Dict[str, IPatternClassifier] = {c.name: c for c in DEFAULT_CLASSIFIERS}


def get_classifiers(names: List[str]) -> List[IPatternClassifier]:
    """
    Resolves classifier names (e.g. from a job payload) to instances.
    "digit_run:<n>" builds a DigitRunClassifier with min_digits=n.
    """
    resolved = []
    for name in names:
        if name.startswith("digit_run"):
            _, _, size = name.partition(":")
            resolved.append(DigitRunClassifier(int(size) if size else 4))
            continue
        if name not in classifier_registry:
            raise ValueError(f"Unknown classifier: {name}")
        resolved.append(classifier_registry[name])
    return resolved
