# File: tonemask/features/span_detection/domain/models.py
from dataclasses import dataclass, field
from typing import Dict, Any, Iterable, Iterator, List, Tuple
from tonemask.core.shared_types import TimeSpan


@dataclass(frozen=True)
class Word:
    """
    A single transcribed word with its time bounds, as delivered by the
    transcription provider. Not validated on construction: malformed words
    are skipped by the detector rather than aborting the whole transcript.
    """
    text: str
    start: float
    end: float

    @property
    def is_valid(self) -> bool:
        return bool(self.text and self.text.strip()) and self.start >= 0 and self.end > self.start


@dataclass(frozen=True)
class SensitiveSpan(TimeSpan):
    """
    A TimeSpan that needs redacting, tagged with the classifiers that fired.
    end already includes the trailing buffer.
    """
    labels: Tuple[str, ...] = ()

    def merged_with(self, other: "SensitiveSpan") -> "SensitiveSpan":
        labels = tuple(sorted(set(self.labels) | set(other.labels)))
        return SensitiveSpan(
            start=min(self.start, other.start),
            end=max(self.end, other.end),
            labels=labels
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"start": self.start, "end": self.end, "labels": list(self.labels)}


@dataclass(frozen=True)
class RedactionPlan:
    """
    Sorted, non-overlapping sequence of SensitiveSpan.
    Build it with from_spans() so the merge invariant always holds:
    overlapping spans would otherwise get tone written into them twice.
    """
    spans: Tuple[SensitiveSpan, ...] = ()

    def __post_init__(self):
        for previous, current in zip(self.spans, self.spans[1:]):
            if current.start <= previous.end:
                raise ValueError(
                    f"Plan spans overlap or touch: [{previous.start}, {previous.end}] and [{current.start}, {current.end}]"
                )

    @classmethod
    def from_spans(cls, spans: Iterable[SensitiveSpan]) -> "RedactionPlan":
        ordered = sorted(spans, key=lambda s: (s.start, s.end))
        merged: List[SensitiveSpan] = []
        for span in ordered:
            # Meeting or overlapping spans collapse into one
            if merged and span.start <= merged[-1].end:
                merged[-1] = merged[-1].merged_with(span)
            else:
                merged.append(span)
        return cls(spans=tuple(merged))

    @classmethod
    def from_dict(cls, items: Iterable[Dict[str, Any]]) -> "RedactionPlan":
        """Inverse of to_dict(); spans are re-merged on the way in."""
        return cls.from_spans(
            SensitiveSpan(
                start=float(item["start"]),
                end=float(item["end"]),
                labels=tuple(item.get("labels") or ())
            )
            for item in items
        )

    @classmethod
    def empty(cls) -> "RedactionPlan":
        return cls(spans=())

    @property
    def max_end(self) -> float:
        return max((s.end for s in self.spans), default=0.0)

    def __len__(self) -> int:
        return len(self.spans)

    def __iter__(self) -> Iterator[SensitiveSpan]:
        return iter(self.spans)

    def __bool__(self) -> bool:
        return bool(self.spans)

    def to_dict(self) -> List[Dict[str, Any]]:
        return [s.to_dict() for s in self.spans]


@dataclass(frozen=True)
class DetectionReport:
    """
    Output of a detection pass.
    skipped_words counts malformed entries (end <= start, empty text).
    """
    plan: RedactionPlan
    skipped_words: int = 0
    flagged_words: int = 0
    labels: Tuple[str, ...] = field(default_factory=tuple)
