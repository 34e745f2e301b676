import logging
from pathlib import Path

from tonemask.core.config.settings import settings
from tonemask.features.span_detection.data.classifiers import DEFAULT_CLASSIFIERS, get_classifiers
from tonemask.features.span_detection.data.transcript_parser import parse_words, load_words
from tonemask.features.span_detection.service.detector import SpanDetector
from tonemask.features.tone_synthesis.service.api import build_tone_settings
from .executor import RedactionExecutor

logger = logging.getLogger(__name__)


class RedactionHandler:
    """
    Worker for JobType.AUDIO_REDACTION.

    params:
        source_path                   required
        output_path                   defaults to OUTPUT_DIR/<stem>_redacted<ext>
        words | transcript_path       inline transcript payload or a JSON file
        classifiers                   optional list of classifier names
        frequency, amplitude, method  optional tone overrides
    """

    def handle(self, params: dict) -> dict:
        source_path = params.get("source_path")
        if not source_path:
            raise ValueError("Redaction job needs a 'source_path'.")

        output_path = params.get("output_path")
        if not output_path:
            settings.ensure_dirs()
            source = Path(source_path)
            output_path = settings.OUTPUT_DIR / f"{source.stem}_redacted{source.suffix}"

        # 1. Transcript
        if params.get("words") is not None:
            words = parse_words(params["words"])
        elif params.get("transcript_path"):
            words = load_words(Path(params["transcript_path"]))
        else:
            raise ValueError("Redaction job needs 'words' or 'transcript_path'.")

        names = params.get("classifiers")
        classifiers = get_classifiers(names) if names else DEFAULT_CLASSIFIERS

        # 2. Spans
        report = SpanDetector().detect(words, classifiers)
        logger.info(
            f"Redaction job for {Path(source_path).name}: {len(report.plan)} spans, "
            f"{report.skipped_words} skipped words"
        )

        # 3. Audio
        frequency = params.get("frequency")
        amplitude = params.get("amplitude")
        method = params.get("method") or "beep"

        result = RedactionExecutor().execute(
            Path(source_path),
            report.plan,
            Path(output_path),
            tone=build_tone_settings(frequency, amplitude, method),
            overlay_tone=build_tone_settings(frequency, amplitude, method, overlay=True)
        )

        data = result.to_dict()
        data["skippedWords"] = report.skipped_words
        data["labels"] = list(report.labels)
        return data
