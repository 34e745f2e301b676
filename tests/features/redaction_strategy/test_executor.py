import json

import numpy as np
import pytest
import soundfile as sf

from conftest import write_wav
from tonemask.core.common.enums import FormatFamily, ResultKind, StrategyName
from tonemask.core.exceptions import PassthroughError
from tonemask.features.span_detection.domain.models import RedactionPlan, SensitiveSpan
from tonemask.features.redaction_strategy.data.ffmpeg_adapter import FFmpegAdapter
from tonemask.features.redaction_strategy.data.format_registry import classify
from tonemask.features.redaction_strategy.service.executor import RedactionExecutor
from tonemask.features.redaction_strategy.service.strategies import (
    ExternalToolStrategy, InProcessBufferStrategy, OverlayStrategy, TranscodeStrategy
)

PLAN = RedactionPlan.from_spans([SensitiveSpan(1.0, 2.0, ("ssn",))])


def broken_adapter():
    """Points at binaries that don't exist, so every tool call fails to spawn."""
    return FFmpegAdapter(ffmpeg_binary="/nonexistent/ffmpeg", ffprobe_binary="/nonexistent/ffprobe")


@pytest.fixture
def toolless_executor():
    adapter = broken_adapter()
    return RedactionExecutor(
        external_tool=ExternalToolStrategy(adapter),
        transcode=TranscodeStrategy(adapter),
        overlay=OverlayStrategy(adapter)
    )


def test_total_fallback_is_a_byte_copy(tmp_path, corrupt_wav, toolless_executor):
    out = tmp_path / "out.wav"

    result = toolless_executor.execute(corrupt_wav, PLAN, out)

    assert out.read_bytes() == corrupt_wav.read_bytes()
    assert result.kind == ResultKind.PASSTHROUGH
    assert result.to_dict()["strategyUsed"] == "passthrough"
    assert [a.strategy for a in result.attempts] == ["external_tool", "in_process_buffer"]
    assert "ToolInvocationError" in result.attempts[0].error
    assert "DecodeError" in result.attempts[1].error


def test_in_process_buffer_when_tool_missing(tmp_path, wav_file, toolless_executor):
    out = tmp_path / "out.wav"

    result = toolless_executor.execute(wav_file, PLAN, out)

    assert result.strategy_used == StrategyName.IN_PROCESS_BUFFER
    assert result.kind == ResultKind.MUTATED
    assert result.span_count == 1

    original, _ = sf.read(str(wav_file), dtype="int16")
    redacted, _ = sf.read(str(out), dtype="int16")
    assert np.array_equal(original[:16000], redacted[:16000])
    assert not np.array_equal(original[16000:32000], redacted[16000:32000])
    assert np.array_equal(original[32000:], redacted[32000:])


def test_in_process_buffer_in_worker(tmp_path):
    source = write_wav(tmp_path / "big.wav", seconds=2.5)
    executor = RedactionExecutor(
        external_tool=ExternalToolStrategy(broken_adapter()),
        in_process=InProcessBufferStrategy(isolation_threshold_bytes=0)
    )

    result = executor.execute(source, PLAN, tmp_path / "out.wav")

    assert result.strategy_used == StrategyName.IN_PROCESS_BUFFER
    assert sf.info(str(tmp_path / "out.wav")).frames == 40000


def test_empty_plan_still_produces_output(tmp_path, wav_file, toolless_executor):
    out = tmp_path / "out.wav"

    result = toolless_executor.execute(wav_file, RedactionPlan.empty(), out)

    assert result.span_count == 0
    original, _ = sf.read(str(wav_file), dtype="int16")
    copied, _ = sf.read(str(out), dtype="int16")
    assert np.array_equal(original, copied)


def test_compressed_source_gets_overlay(tmp_path, toolless_executor):
    source = tmp_path / "call.mp3"
    source.write_bytes(b"ID3" + b"\x00" * 512)
    out = tmp_path / "redacted" / "call.mp3"

    result = toolless_executor.execute(source, PLAN, out)

    assert result.kind == ResultKind.OVERLAID
    assert result.strategy_used == StrategyName.OVERLAY
    assert out.read_bytes() == source.read_bytes()
    assert result.tone_track_path.exists()

    data = result.to_dict()
    assert data["toneTrackPath"].endswith("call.tone.wav")
    assert data["descriptorPath"].endswith("call.playback.json")
    assert data["attempts"][0]["strategy"] == "external_tool"
    assert "ToolInvocationError" in data["attempts"][0]["error"]
    assert "transcoded" not in data
    with open(result.descriptor_path) as f:
        assert json.load(f)["spans"] == [{"start": 1.0, "end": 2.0}]


def test_unsupported_format_goes_to_passthrough(tmp_path, toolless_executor):
    source = tmp_path / "notes.txt"
    source.write_text("not audio at all")

    result = toolless_executor.execute(source, PLAN, tmp_path / "notes_out.txt")

    assert result.kind == ResultKind.PASSTHROUGH
    assert result.attempts[0].strategy == "format"
    assert "toneTrackPath" not in result.to_dict()


def test_passthrough_failure_propagates(tmp_path, corrupt_wav, toolless_executor):
    blocker = tmp_path / "blocker"
    blocker.write_text("a file where a directory should be")

    with pytest.raises(PassthroughError) as excinfo:
        toolless_executor.execute(corrupt_wav, PLAN, blocker / "out.wav")
    assert isinstance(excinfo.value, OSError)


def test_caller_errors_raise(tmp_path, wav_file, toolless_executor):
    with pytest.raises(FileNotFoundError):
        toolless_executor.execute(tmp_path / "missing.wav", PLAN, tmp_path / "out.wav")
    with pytest.raises(ValueError):
        toolless_executor.execute(wav_file, PLAN, wav_file)


def test_classify(tmp_path, wav_file, corrupt_wav):
    unknown_ext = write_wav(tmp_path / "voice.rawdata", seconds=0.1, format="WAV")
    (tmp_path / "x.bin").write_bytes(b"\x00\x01")

    assert classify(wav_file) == FormatFamily.SAMPLE_ADDRESSABLE
    assert classify(corrupt_wav) == FormatFamily.SAMPLE_ADDRESSABLE
    assert classify(tmp_path / "a.M4A") == FormatFamily.COMPRESSED
    assert classify(unknown_ext) == FormatFamily.SAMPLE_ADDRESSABLE
    assert classify(tmp_path / "x.bin") == FormatFamily.UNSUPPORTED
