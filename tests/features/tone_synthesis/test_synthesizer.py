import numpy as np
import pytest

from tonemask.core.common.enums import RedactionMethod
from tonemask.features.tone_synthesis.domain.models import ToneSettings
from tonemask.features.tone_synthesis.service.synthesizer import synthesize, tone_samples, SineToneGenerator
from tonemask.features.tone_synthesis.service.api import build_tone_settings


def test_synthesize_is_deterministic():
    first = synthesize(0.5, 22050, 2, 1000.0, 0.5)
    second = synthesize(0.5, 22050, 2, 1000.0, 0.5)

    assert first.samples.dtype == np.float32
    assert first.samples.tobytes() == second.samples.tobytes()


def test_synthesize_shape_and_channels():
    buffer = synthesize(0.1001, 8000, 3)

    # ceil(0.1001 * 8000) = 801
    assert buffer.frames == 801
    assert buffer.channels == 3
    assert np.array_equal(buffer.samples[:, 0], buffer.samples[:, 2])


def test_tone_samples_follow_sine():
    samples = tone_samples(16, 16000, 1000.0, 0.5)

    expected = 0.5 * np.sin(2 * np.pi * 1000.0 * np.arange(16) / 16000)
    assert samples[0] == 0.0
    assert np.allclose(samples, expected, atol=1e-6)
    assert np.max(np.abs(samples)) <= 0.5 + 1e-6


def test_zero_duration_gives_empty_buffer():
    assert synthesize(0.0, 44100, 2).frames == 0


@pytest.mark.parametrize("kwargs", [
    {"duration_seconds": -1.0, "sample_rate": 8000},
    {"duration_seconds": 1.0, "sample_rate": 0},
    {"duration_seconds": 1.0, "sample_rate": 8000, "channels": 0},
    {"duration_seconds": 1.0, "sample_rate": 8000, "frequency_hz": 0.0},
    {"duration_seconds": 1.0, "sample_rate": 8000, "amplitude": 1.5},
])
def test_invalid_arguments(kwargs):
    with pytest.raises(ValueError):
        synthesize(**kwargs)


def test_generator_matches_helpers():
    generator = SineToneGenerator(frequency_hz=440.0, amplitude=0.3)

    assert np.array_equal(generator.samples(100, 8000), tone_samples(100, 8000, 440.0, 0.3))
    assert generator.buffer(0.01, 8000, 2).samples.shape == (80, 2)


def test_tone_settings_validation():
    assert ToneSettings(method="mute").method == RedactionMethod.MUTE

    with pytest.raises(ValueError):
        ToneSettings(frequency_hz=-5)
    with pytest.raises(ValueError):
        ToneSettings(amplitude=0.0)
    with pytest.raises(ValueError):
        ToneSettings(method="whistle")


def test_build_tone_settings_defaults():
    inplace = build_tone_settings()
    overlay = build_tone_settings(overlay=True)

    assert inplace.frequency_hz == 1000.0
    assert inplace.amplitude == 0.5
    assert overlay.amplitude == 0.7
    assert build_tone_settings(amplitude=0.2, overlay=True).amplitude == 0.2
