# File: tonemask/features/span_detection/data/transcript_parser.py
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Union

from ..domain.models import Word

logger = logging.getLogger(__name__)

# Providers disagree on what they call the token text
_TEXT_KEYS = ("punctuated_word", "word", "text")


def parse_words(payload: Union[Dict[str, Any], List[Any]]) -> List[Word]:
    """
    Converts a transcription provider payload into Word records.

    Accepted shapes:
        - [{"text"|"word": ..., "start": ..., "end": ...}, ...]
        - {"words": [...]}                                  (Deepgram alternative)
        - {"results": {"channels": [{"alternatives": [{"words": [...]}]}]}}  (Deepgram response)
        - {"segments": [{"words": [...]}, ...]}             (Whisper word_timestamps)

    Entries without numeric start/end are dropped and counted.
    Time-bound validation is left to the detector.
    """
    raw_words = _extract_raw_words(payload)

    words: List[Word] = []
    dropped = 0
    for raw in raw_words:
        word = _to_word(raw)
        if word is None:
            dropped += 1
            continue
        words.append(word)

    if dropped:
        logger.warning(f"Dropped {dropped} transcript entries without usable timing.")

    return words


def load_words(transcript_path: Union[str, Path]) -> List[Word]:
    """Reads a transcript JSON file and parses its words."""
    path = Path(transcript_path)
    if not path.exists():
        raise FileNotFoundError(f"Transcript not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        payload = json.load(f)

    return parse_words(payload)


def _extract_raw_words(payload: Union[Dict[str, Any], List[Any]]) -> Iterable[Any]:
    if isinstance(payload, list):
        return payload

    if not isinstance(payload, dict):
        raise ValueError(f"Unsupported transcript payload: {type(payload).__name__}")

    if "words" in payload:
        return payload.get("words") or []

    if "results" in payload:
        try:
            alternative = payload["results"]["channels"][0]["alternatives"][0]
        except (KeyError, IndexError, TypeError) as e:
            raise ValueError(f"Malformed provider response: {e}") from e
        return alternative.get("words") or []

    if "segments" in payload:
        collected = []
        for seg in payload.get("segments") or []:
            collected.extend(seg.get("words") or [])
        return collected

    raise ValueError("Transcript payload has no 'words', 'results' or 'segments' key.")


def _to_word(raw: Any):
    if isinstance(raw, Word):
        return raw
    if not isinstance(raw, dict):
        return None

    text = next((raw[k] for k in _TEXT_KEYS if raw.get(k) is not None), "")

    try:
        start = float(raw["start"])
        end = float(raw["end"])
    except (KeyError, TypeError, ValueError):
        return None

    return Word(text=str(text).strip(), start=start, end=end)
