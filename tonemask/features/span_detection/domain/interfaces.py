from abc import ABC, abstractmethod
from typing import Iterable, List, Sequence, Tuple
from .models import Word, DetectionReport


class IPatternClassifier(ABC):
    """
    Contract for a named matcher over normalized transcript text.
    """
    name: str = "unnamed"

    @abstractmethod
    def find_matches(self, text: str) -> List[Tuple[int, int]]:
        """
        Returns the (start, end) character offsets of every match in text.
        """
        pass

    def matches(self, text: str) -> bool:
        return bool(self.find_matches(text))


class ISpanDetector(ABC):
    @abstractmethod
    def detect(self, words: Sequence[Word], classifiers: Iterable[IPatternClassifier]) -> DetectionReport:
        """
        Converts a word-level transcript into a merged RedactionPlan.
        Never raises on malformed words; they are skipped and counted.
        """
        pass
