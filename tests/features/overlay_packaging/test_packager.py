import json

import numpy as np
import pytest
import soundfile as sf

from tonemask.features.span_detection.domain.models import RedactionPlan, SensitiveSpan
from tonemask.features.tone_synthesis.domain.interfaces import IToneGenerator
from tonemask.features.overlay_packaging.domain.models import PlaybackDescriptor
from tonemask.features.overlay_packaging.service.packager import OverlayTrackPackager
from tonemask.features.overlay_packaging.service.api import package_overlay


@pytest.fixture
def fake_mp3(tmp_path):
    # Never decoded, only copied
    path = tmp_path / "call.mp3"
    path.write_bytes(b"ID3\x03\x00" + bytes(range(256)) * 20)
    return path


def test_tone_track_covers_span_only(tmp_path, fake_mp3):
    plan = RedactionPlan.from_spans([SensitiveSpan(2.0, 3.0)])
    out = tmp_path / "out" / "call.mp3"

    artifacts = OverlayTrackPackager().package(fake_mp3, plan, out, source_duration=4.0)

    data, sr = sf.read(str(artifacts.tone_track_path), dtype="int16", always_2d=True)
    assert sr == 44100
    assert data.shape[1] == 2
    assert len(data) / sr >= 4.0

    first, last = 2 * sr, 3 * sr
    assert not np.any(data[:first])
    assert not np.any(data[last:])
    assert np.any(data[first:last])
    assert sf.info(str(artifacts.tone_track_path)).subtype == "PCM_16"


def test_original_is_copied_byte_for_byte(tmp_path, fake_mp3):
    out = tmp_path / "call_redacted.mp3"

    artifacts = package_overlay(str(fake_mp3), RedactionPlan.from_spans([SensitiveSpan(0.5, 1.0)]), str(out))

    assert out.read_bytes() == fake_mp3.read_bytes()
    assert artifacts.tone_track_path.name == "call_redacted.tone.wav"
    assert artifacts.descriptor_path.name == "call_redacted.playback.json"


def test_descriptor_references_sibling_files(tmp_path, fake_mp3):
    plan = RedactionPlan.from_spans([SensitiveSpan(1.0, 1.5, ("ssn",)), SensitiveSpan(3.0, 4.0)])
    out = tmp_path / "call_redacted.mp3"

    artifacts = OverlayTrackPackager().package(fake_mp3, plan, out)

    with open(artifacts.descriptor_path) as f:
        data = json.load(f)

    assert data["originalTrack"] == "call_redacted.mp3"
    assert data["toneTrack"] == "call_redacted.tone.wav"
    assert data["spans"] == [{"start": 1.0, "end": 1.5}, {"start": 3.0, "end": 4.0}]
    assert PlaybackDescriptor.from_dict(data).tone_track == "call_redacted.tone.wav"

    # Without a known duration the track ends one second after the last span
    assert artifacts.tone_duration_seconds == pytest.approx(5.0)


def test_empty_plan_gives_silent_track(tmp_path, fake_mp3):
    artifacts = OverlayTrackPackager().package(fake_mp3, RedactionPlan.empty(), tmp_path / "o.mp3")

    data, sr = sf.read(str(artifacts.tone_track_path), dtype="int16")
    assert len(data) == sr
    assert not np.any(data)


def test_missing_source(tmp_path):
    with pytest.raises(FileNotFoundError):
        OverlayTrackPackager().package(tmp_path / "nope.mp3", RedactionPlan.empty(), tmp_path / "o.mp3")


class HalfScaleGenerator(IToneGenerator):
    def samples(self, frames, sample_rate):
        return np.full(frames, 0.5, dtype=np.float32)

    def buffer(self, duration_seconds, sample_rate, channels):
        raise NotImplementedError


def test_tone_track_uses_injected_generator(tmp_path, fake_mp3):
    plan = RedactionPlan.from_spans([SensitiveSpan(1.0, 2.0)])
    packager = OverlayTrackPackager(sample_rate=8000, channels=1, generator=HalfScaleGenerator())

    artifacts = packager.package(fake_mp3, plan, tmp_path / "o.mp3")

    data, sr = sf.read(str(artifacts.tone_track_path), dtype="int16")
    assert sr == 8000
    assert np.all(np.abs(data[8000:16000].astype(np.int32) - 16384) <= 1)
    assert not np.any(data[:8000])
    assert not np.any(data[16000:])
