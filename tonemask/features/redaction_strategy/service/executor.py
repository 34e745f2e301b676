import dataclasses
import logging
import tempfile
from pathlib import Path
from typing import List, Optional

from tonemask.core.config.settings import settings
from tonemask.core.common.enums import FormatFamily, StrategyName
from tonemask.core.exceptions import RedactionError
from tonemask.features.span_detection.domain.models import RedactionPlan
from tonemask.features.tone_synthesis.domain.models import ToneSettings
from ..data.format_registry import classify
from ..domain.interfaces import IRedactionStrategy
from ..domain.models import Attempt, ExecutorState, RedactionResult, StrategyContext
from .strategies import (
    ExternalToolStrategy, InProcessBufferStrategy, OverlayStrategy, PassthroughStrategy, TranscodeStrategy
)

logger = logging.getLogger(__name__)

# Errors that hand the job to the next state instead of failing it.
# LibsndfileError is a RuntimeError; numpy raises ValueError/MemoryError.
DEMOTABLE_ERRORS = (RedactionError, RuntimeError, ValueError, MemoryError, OSError)


class RedactionExecutor:
    """
    Runs one redaction job through the fallback chain:

        INIT -> TRY_EXTERNAL_TOOL -> TRY_IN_PROCESS_BUFFER -> PASSTHROUGH -> DONE

    Compressed sources take the transcode path in TRY_EXTERNAL_TOOL and the
    overlay packager in TRY_IN_PROCESS_BUFFER.
    A strategy that raises is recorded as an attempt and the job moves on.
    PASSTHROUGH always produces the source bytes unless the filesystem itself
    fails, in which case PassthroughError propagates.

    Holds only the (stateless) strategies, so one instance can serve many jobs.
    """

    def __init__(self,
                 external_tool: Optional[IRedactionStrategy] = None,
                 transcode: Optional[IRedactionStrategy] = None,
                 in_process: Optional[IRedactionStrategy] = None,
                 overlay: Optional[IRedactionStrategy] = None,
                 passthrough: Optional[IRedactionStrategy] = None):
        self.external_tool = external_tool or ExternalToolStrategy()
        self.transcode = transcode or TranscodeStrategy()
        self.in_process = in_process or InProcessBufferStrategy()
        self.overlay = overlay or OverlayStrategy()
        self.passthrough = passthrough or PassthroughStrategy()

    def execute(self, source_path: Path, plan: RedactionPlan, output_path: Path,
                tone: Optional[ToneSettings] = None,
                overlay_tone: Optional[ToneSettings] = None) -> RedactionResult:
        source_path = Path(source_path)
        output_path = Path(output_path)

        if not source_path.exists():
            raise FileNotFoundError(f"Audio not found: {source_path}")
        if source_path.resolve() == output_path.resolve():
            raise ValueError("Output path must differ from the source path.")

        tone = tone or ToneSettings(
            frequency_hz=settings.TONE_FREQUENCY_HZ,
            amplitude=settings.INPLACE_TONE_AMPLITUDE
        )
        overlay_tone = overlay_tone or ToneSettings(
            frequency_hz=tone.frequency_hz,
            amplitude=settings.OVERLAY_TONE_AMPLITUDE,
            method=tone.method
        )

        attempts: List[Attempt] = []
        result: Optional[RedactionResult] = None
        family = FormatFamily.UNSUPPORTED
        state = ExecutorState.INIT

        with tempfile.TemporaryDirectory(prefix="tonemask_") as scratch:
            ctx = None

            while state != ExecutorState.DONE:
                if state == ExecutorState.INIT:
                    family = classify(source_path)
                    logger.info(f"Redacting {source_path.name} ({family.value}, {len(plan)} spans)")
                    ctx = StrategyContext(
                        source_path=source_path,
                        output_path=output_path,
                        plan=plan,
                        tone=tone,
                        overlay_tone=overlay_tone,
                        family=family,
                        scratch_dir=Path(scratch)
                    )

                    if family == FormatFamily.UNSUPPORTED:
                        self._demote(attempts, "format", f"Unsupported audio format: {source_path.suffix or '<none>'}")
                        state = ExecutorState.PASSTHROUGH
                    else:
                        state = ExecutorState.TRY_EXTERNAL_TOOL

                elif state == ExecutorState.TRY_EXTERNAL_TOOL:
                    strategy = self.transcode if family == FormatFamily.COMPRESSED else self.external_tool
                    result = self._attempt(strategy, ctx, attempts)
                    state = ExecutorState.DONE if result else ExecutorState.TRY_IN_PROCESS_BUFFER

                elif state == ExecutorState.TRY_IN_PROCESS_BUFFER:
                    strategy = self.overlay if family == FormatFamily.COMPRESSED else self.in_process
                    result = self._attempt(strategy, ctx, attempts)
                    state = ExecutorState.DONE if result else ExecutorState.PASSTHROUGH

                elif state == ExecutorState.PASSTHROUGH:
                    result = self.passthrough.run(ctx)
                    state = ExecutorState.DONE

        # Attempts a strategy recovered from internally come after the demotions
        result = dataclasses.replace(result, attempts=tuple(attempts) + result.attempts)
        logger.info(
            f"Finished {source_path.name} with {result.strategy_used.value} "
            f"({result.span_count} spans, {len(attempts)} prior attempts)"
        )
        return result

    def _attempt(self, strategy: IRedactionStrategy, ctx: StrategyContext,
                 attempts: List[Attempt]) -> Optional[RedactionResult]:
        try:
            return strategy.run(ctx)
        except DEMOTABLE_ERRORS as e:
            # Never leave a half-written file for the next state to trip over
            if ctx.output_path.exists():
                ctx.output_path.unlink()
            self._demote(attempts, strategy.name.value, f"{type(e).__name__}: {e}")
            return None

    @staticmethod
    def _demote(attempts: List[Attempt], strategy: str, error: str) -> None:
        attempts.append(Attempt(strategy, error))
        logger.warning(f"Strategy {strategy} failed, demoting: {error}")
