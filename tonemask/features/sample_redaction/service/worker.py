"""
Out-of-process entry point for sample-domain redaction.

    python -m tonemask.features.sample_redaction.service.worker SRC DST PLAN_JSON \
        [--frequency F] [--amplitude A] [--method beep|mute]

PLAN_JSON is a file holding [{"start": ..., "end": ..., "labels": [...]}].
Large sources are redacted here so their decoded samples never live in the
calling process. Exit codes: 0 success, 3 undecodable source, 1 anything else. argparse
keeps 2 for bad command lines.
"""
import argparse
import json
import logging
import sys
from pathlib import Path

from tonemask.core.config.settings import settings
from tonemask.core.common.enums import RedactionMethod
from tonemask.core.exceptions import DecodeError
from tonemask.core.logging import setup_logging
from tonemask.features.span_detection.domain.models import RedactionPlan
from tonemask.features.tone_synthesis.domain.models import ToneSettings
from ..data.soundfile_codec import SoundFileCodec
from .redactor import SampleDomainRedactor

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_DECODE_ERROR = 3

# Named explicitly: under `-m` __name__ is "__main__", outside the tonemask logger tree
logger = logging.getLogger("tonemask.sample_redaction.worker")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Redact spans of a PCM audio file.")
    parser.add_argument("source", type=Path)
    parser.add_argument("destination", type=Path)
    parser.add_argument("plan", type=Path, help="JSON file with the spans to redact")
    parser.add_argument("--frequency", type=float, default=settings.TONE_FREQUENCY_HZ)
    parser.add_argument("--amplitude", type=float, default=settings.INPLACE_TONE_AMPLITUDE)
    parser.add_argument("--method", choices=[m.value for m in RedactionMethod], default=RedactionMethod.BEEP.value)
    return parser


def run(source: Path, destination: Path, plan: RedactionPlan, tone: ToneSettings) -> Path:
    """decode -> redact -> encode"""
    codec = SoundFileCodec()
    buffer = codec.decode(source)
    buffer = SampleDomainRedactor().redact(buffer, plan, tone)
    return codec.encode(buffer, destination)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(settings.LOG_LEVEL)

    try:
        with open(args.plan, "r", encoding="utf-8") as f:
            plan = RedactionPlan.from_dict(json.load(f))
        tone = ToneSettings(frequency_hz=args.frequency, amplitude=args.amplitude, method=args.method)

        run(args.source, args.destination, plan, tone)
    except DecodeError as e:
        logger.error(f"Worker could not decode {args.source}: {e}")
        return EXIT_DECODE_ERROR
    except Exception as e:
        logger.exception(f"Worker failed on {args.source}: {e}")
        return EXIT_FAILURE

    logger.info(f"Worker wrote {args.destination} ({len(plan)} spans)")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
