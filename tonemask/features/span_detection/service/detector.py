# File: tonemask/features/span_detection/service/detector.py
import logging
from typing import Iterable, List, Optional, Sequence, Set

from tonemask.core.config.settings import settings
from tonemask.core.logging import mask_digits
from ..domain.interfaces import ISpanDetector, IPatternClassifier
from ..domain.models import Word, SensitiveSpan, RedactionPlan, DetectionReport
from ..data.classifiers import normalize_text

logger = logging.getLogger(__name__)


class SpanDetector(ISpanDetector):
    """
    Turns a word-level transcript into a merged RedactionPlan.

    Each word is tested alone and as the head of a window of up to
    `lookahead` following words (joined by single spaces), so numbers the
    transcriber split into groups ("555", "123", "4567") are still caught.
    Consecutive flagged words form one span; each span gets a trailing
    buffer, then spans that meet or overlap are merged.
    """

    def __init__(self, trailing_buffer: Optional[float] = None, lookahead: Optional[int] = None):
        self.trailing_buffer = settings.TRAILING_BUFFER_SECONDS if trailing_buffer is None else trailing_buffer
        self.lookahead = settings.LOOKAHEAD_WORDS if lookahead is None else lookahead

        if self.trailing_buffer < 0:
            raise ValueError(f"Trailing buffer cannot be negative: {self.trailing_buffer}")
        if self.lookahead < 0:
            raise ValueError(f"Lookahead cannot be negative: {self.lookahead}")

    def detect(self, words: Sequence[Word], classifiers: Iterable[IPatternClassifier]) -> DetectionReport:
        classifiers = list(classifiers)
        valid = [w for w in words if w.is_valid]
        skipped = len(words) - len(valid)

        if skipped:
            logger.warning(f"Skipped {skipped} malformed word(s) (empty text or end <= start).")

        if not valid or not classifiers:
            return DetectionReport(plan=RedactionPlan.empty(), skipped_words=skipped)

        flags = self._flag_words(valid, classifiers)
        spans = self._accumulate(valid, flags)
        plan = RedactionPlan.from_spans(spans)

        flagged = sum(1 for f in flags if f)
        labels = tuple(sorted(set().union(*flags)))

        if len(spans) != len(plan):
            logger.info(f"Reduced from {len(spans)} to {len(plan)} spans after merging")
        logger.info(f"Detected {len(plan)} sensitive span(s) from {flagged}/{len(valid)} flagged words.")

        return DetectionReport(plan=plan, skipped_words=skipped, flagged_words=flagged, labels=labels)

    def _flag_words(self, words: List[Word], classifiers: List[IPatternClassifier]) -> List[Set[str]]:
        """
        Returns, for every word, the set of classifier names that flagged it.
        """
        normalized = [normalize_text(w.text) for w in words]
        flags: List[Set[str]] = [set() for _ in words]

        for i in range(len(words)):
            # 1. The word on its own
            for classifier in classifiers:
                if normalized[i] and classifier.matches(normalized[i]):
                    flags[i].add(classifier.name)

            if flags[i]:
                logger.debug(f"Word {i} '{mask_digits(words[i].text)}' flagged as {sorted(flags[i])}")
                continue

            # 2. Windows headed by this word, shortest first
            for size in range(2, self.lookahead + 2):
                if i + size > len(words):
                    break
                if self._flag_window(i, size, normalized, classifiers, flags):
                    logger.debug(f"Words {i}-{i + size - 1} flagged as {sorted(flags[i])}")
                    break

        return flags

    @staticmethod
    def _flag_window(head: int, size: int, normalized: List[str],
                     classifiers: List[IPatternClassifier], flags: List[Set[str]]) -> bool:
        parts = normalized[head:head + size]
        text = " ".join(parts)

        # Character range of every word inside the joined window
        ranges = []
        pos = 0
        for part in parts:
            ranges.append((pos, pos + len(part)))
            pos += len(part) + 1

        hit = False
        for classifier in classifiers:
            for m_start, m_end in classifier.find_matches(text):
                touched = [
                    head + k for k, (w_start, w_end) in enumerate(ranges)
                    if w_start < w_end and w_start < m_end and m_start < w_end
                ]
                # Matches not involving the head word are found from their own head
                if head not in touched:
                    continue
                for idx in touched:
                    flags[idx].add(classifier.name)
                hit = True
        return hit

    def _accumulate(self, words: List[Word], flags: List[Set[str]]) -> List[SensitiveSpan]:
        spans: List[SensitiveSpan] = []
        start = end = None
        labels: Set[str] = set()

        for word, word_flags in zip(words, flags):
            if word_flags:
                if start is None:
                    # Open a new span
                    start, end, labels = word.start, word.end, set(word_flags)
                else:
                    end = max(end, word.end)
                    labels |= word_flags
            elif start is not None:
                spans.append(self._close(start, end, labels))
                start = end = None

        # Flush a span still open at the end of the transcript
        if start is not None:
            spans.append(self._close(start, end, labels))

        return spans

    def _close(self, start: float, end: float, labels: Set[str]) -> SensitiveSpan:
        return SensitiveSpan(
            start=start,
            end=end + self.trailing_buffer,
            labels=tuple(sorted(labels))
        )
