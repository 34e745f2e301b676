import logging
import shutil
from pathlib import Path
from typing import List, Optional

import soundfile as sf

from tonemask.core.config.settings import settings
from tonemask.core.common.enums import FormatFamily, ResultKind, StrategyName
from tonemask.core.shared_types import MediaFile
from tonemask.core.exceptions import PassthroughError, ToolInvocationError, UnsupportedFormatError
from tonemask.features.sample_redaction.data.soundfile_codec import is_decodable
from tonemask.features.sample_redaction.service.api import redact_audio_file, redact_audio_file_isolated
from tonemask.features.overlay_packaging.service.packager import OverlayTrackPackager, TONE_SUFFIX, DESCRIPTOR_SUFFIX
from ..data.ffmpeg_adapter import FFmpegAdapter
from ..domain.interfaces import IRedactionStrategy, IMediaToolAdapter
from ..domain.models import Attempt, RedactionResult, StrategyContext

logger = logging.getLogger(__name__)

PCM_CONVERSION = "pcm_conversion"


class ExternalToolStrategy(IRedactionStrategy):
    """
    Chains one ffmpeg pass per span: the output of span i is the input of span i+1.
    """
    name = StrategyName.EXTERNAL_TOOL

    def __init__(self, adapter: Optional[IMediaToolAdapter] = None):
        self.adapter = adapter or FFmpegAdapter()

    def run(self, ctx: StrategyContext) -> RedactionResult:
        if ctx.family != FormatFamily.SAMPLE_ADDRESSABLE:
            raise UnsupportedFormatError(f"External tool path only handles PCM sources, got {ctx.family.value}")

        probe = self.adapter.probe(ctx.source_path)
        logger.debug(f"Probed {ctx.source_path.name}: {probe}")

        work_dir = ctx.scratch_dir / "external"
        work_dir.mkdir(parents=True, exist_ok=True)

        current = ctx.source_path
        for i, span in enumerate(ctx.plan):
            step = work_dir / f"step_{i:04d}{ctx.source_path.suffix}"
            current = self.adapter.apply_span(current, step, span, ctx.tone, probe)

        ctx.output_path.parent.mkdir(parents=True, exist_ok=True)
        if current == ctx.source_path:
            # Nothing to redact
            shutil.copyfile(ctx.source_path, ctx.output_path)
        else:
            shutil.move(str(current), str(ctx.output_path))

        return RedactionResult(
            kind=ResultKind.MUTATED,
            strategy_used=self.name,
            span_count=len(ctx.plan),
            output_path=ctx.output_path
        )


class InProcessBufferStrategy(IRedactionStrategy):
    """
    decode -> overwrite samples -> encode, in this interpreter or,
    above the size threshold, in a worker subprocess.
    """
    name = StrategyName.IN_PROCESS_BUFFER

    def __init__(self, isolation_threshold_bytes: Optional[int] = None):
        self.isolation_threshold_bytes = (
            settings.ISOLATION_THRESHOLD_BYTES if isolation_threshold_bytes is None else isolation_threshold_bytes
        )

    def run(self, ctx: StrategyContext) -> RedactionResult:
        if ctx.family != FormatFamily.SAMPLE_ADDRESSABLE:
            raise UnsupportedFormatError(f"Cannot edit samples of a {ctx.family.value} source")

        size = ctx.source_path.stat().st_size
        if size > self.isolation_threshold_bytes:
            logger.info(f"{ctx.source_path.name} is {size} bytes, redacting in a worker process")
            redact_audio_file_isolated(ctx.source_path, ctx.plan, ctx.output_path, ctx.tone, ctx.scratch_dir)
        else:
            redact_audio_file(ctx.source_path, ctx.plan, ctx.output_path, ctx.tone)

        return RedactionResult(
            kind=ResultKind.MUTATED,
            strategy_used=self.name,
            span_count=len(ctx.plan),
            output_path=ctx.output_path
        )


class TranscodeStrategy(IRedactionStrategy):
    """
    Compressed sources: ffmpeg decodes to PCM (with one more forgiving retry),
    the samples are redacted in the sample domain, and the result is encoded
    back with the source's codec.
    """
    name = StrategyName.EXTERNAL_TOOL

    def __init__(self, adapter: Optional[IMediaToolAdapter] = None,
                 isolation_threshold_bytes: Optional[int] = None):
        self.adapter = adapter or FFmpegAdapter()
        self.isolation_threshold_bytes = (
            settings.ISOLATION_THRESHOLD_BYTES if isolation_threshold_bytes is None else isolation_threshold_bytes
        )

    def run(self, ctx: StrategyContext) -> RedactionResult:
        if ctx.family != FormatFamily.COMPRESSED:
            raise UnsupportedFormatError(f"Transcoding is for compressed sources, got {ctx.family.value}")

        ctx.output_path.parent.mkdir(parents=True, exist_ok=True)
        if not ctx.plan:
            # Re-encoding would only lose quality
            shutil.copyfile(ctx.source_path, ctx.output_path)
            return RedactionResult(
                kind=ResultKind.MUTATED,
                strategy_used=self.name,
                span_count=0,
                output_path=ctx.output_path
            )

        probe = self.adapter.probe(ctx.source_path)

        work_dir = ctx.scratch_dir / "transcode"
        work_dir.mkdir(parents=True, exist_ok=True)
        decoded = work_dir / "decoded.wav"
        redacted = work_dir / "redacted.wav"

        recovered = self._convert(ctx.source_path, decoded)

        if decoded.stat().st_size > self.isolation_threshold_bytes:
            redact_audio_file_isolated(decoded, ctx.plan, redacted, ctx.tone, work_dir)
        else:
            redact_audio_file(decoded, ctx.plan, redacted, ctx.tone)

        self.adapter.from_pcm(redacted, ctx.output_path, probe)
        logger.info(f"Redacted {ctx.source_path.name} through PCM, re-encoded as {probe.codec_name}")

        return RedactionResult(
            kind=ResultKind.MUTATED,
            strategy_used=self.name,
            span_count=len(ctx.plan),
            output_path=ctx.output_path,
            transcoded=True,
            attempts=tuple(recovered)
        )

    def _convert(self, source: Path, destination: Path) -> List[Attempt]:
        """
        Returns the failed passes that preceded the successful one.
        Raises ToolInvocationError when both passes fail.
        """
        failures: List[Attempt] = []
        for alternative in (False, True):
            try:
                self.adapter.to_pcm(source, destination, alternative=alternative)
                _verify_pcm(destination)
                return failures
            except ToolInvocationError as e:
                logger.warning(f"PCM conversion of {source.name} failed (alternative={alternative}): {e}")
                failures.append(Attempt(PCM_CONVERSION, f"{type(e).__name__}: {e}"))

        raise ToolInvocationError(
            f"Could not convert {source.name} to PCM: " + "; ".join(f.error for f in failures)
        )


class OverlayStrategy(IRedactionStrategy):
    """
    Compressed sources stay untouched; the tone ships as a separate track.
    """
    name = StrategyName.OVERLAY

    def __init__(self, adapter: Optional[IMediaToolAdapter] = None):
        self.adapter = adapter or FFmpegAdapter()

    def run(self, ctx: StrategyContext) -> RedactionResult:
        if ctx.family != FormatFamily.COMPRESSED:
            raise UnsupportedFormatError(f"Overlay packaging is for compressed sources, got {ctx.family.value}")

        duration = self._probe_duration(ctx.source_path)
        packager = OverlayTrackPackager(tone=ctx.overlay_tone)

        try:
            artifacts = packager.package(ctx.source_path, ctx.plan, ctx.output_path, source_duration=duration)
        except Exception:
            _remove_overlay_leftovers(ctx.output_path)
            raise

        return RedactionResult(
            kind=ResultKind.OVERLAID,
            strategy_used=self.name,
            span_count=len(ctx.plan),
            output_path=artifacts.original_path,
            tone_track_path=artifacts.tone_track_path,
            descriptor_path=artifacts.descriptor_path
        )

    def _probe_duration(self, path: Path) -> Optional[float]:
        try:
            return self.adapter.probe(path).duration
        except ToolInvocationError as e:
            # The tone track just ends at the last span plus the tail
            logger.warning(f"Could not probe duration of {path.name}, using span extent: {e}")
            return None


class PassthroughStrategy(IRedactionStrategy):
    """
    Terminal state: the source copied verbatim.
    """
    name = StrategyName.PASSTHROUGH

    def run(self, ctx: StrategyContext) -> RedactionResult:
        try:
            MediaFile(ctx.output_path).ensure_parent_dir()
            shutil.copyfile(ctx.source_path, ctx.output_path)
        except OSError as e:
            raise PassthroughError(f"Could not copy {ctx.source_path} to {ctx.output_path}: {e}") from e

        return RedactionResult(
            kind=ResultKind.PASSTHROUGH,
            strategy_used=self.name,
            span_count=len(ctx.plan),
            output_path=ctx.output_path
        )


def _remove_overlay_leftovers(output_path: Path) -> None:
    for leftover in (
        output_path.with_name(f"{output_path.stem}{TONE_SUFFIX}"),
        output_path.with_name(f"{output_path.stem}{DESCRIPTOR_SUFFIX}")
    ):
        if leftover.exists():
            leftover.unlink()


def _verify_pcm(path: Path) -> None:
    if not is_decodable(path) or sf.info(str(path)).frames == 0:
        raise ToolInvocationError(f"Converted file {path.name} is not readable PCM audio")
