# File: tests/conftest.py

import os
import sys
import shutil

import numpy as np
import pytest
import soundfile as sf
import sqlalchemy
from sqlalchemy import text

# 1. Add project root to path
sys.path.append(os.getcwd())

# 2. Tests always run against SQLite (must be set before settings are read)
os.environ["USE_SQLITE"] = "true"

# 3. Import the application engine so repositories and tests share one database
from tonemask.core.database.connection import engine as TEST_ENGINE


@pytest.fixture(scope="session", autouse=True)
def global_setup():
    """
    Runs once per test session.
    Ensures DB exists and tables are created.
    """
    from tonemask.core.database.init_db import init_db
    init_db(TEST_ENGINE)

    yield


@pytest.fixture(scope="function", autouse=True)
def clean_db(global_setup):
    """
    Runs before EVERY test.
    """
    inspector = sqlalchemy.inspect(TEST_ENGINE)
    table_names = inspector.get_table_names()

    with TEST_ENGINE.begin() as conn:
        for table in table_names:
            conn.execute(text(f'DELETE FROM "{table}";'))

    yield


# --- Audio fixtures ---

def write_wav(path, seconds=3.0, sample_rate=16000, channels=1, subtype="PCM_16", frequency=220.0, format=None):
    """Writes a quiet sine so "unchanged" regions are distinguishable from silence."""
    frames = int(seconds * sample_rate)
    t = np.arange(frames) / sample_rate
    mono = (0.25 * np.sin(2 * np.pi * frequency * t)).astype(np.float32)
    data = np.repeat(mono[:, np.newaxis], channels, axis=1)
    sf.write(str(path), data, sample_rate, subtype=subtype, format=format)
    return path


@pytest.fixture
def wav_file(tmp_path):
    """3 s, 16 kHz, mono, PCM_16."""
    return write_wav(tmp_path / "speech.wav")


@pytest.fixture
def stereo_flac(tmp_path):
    return write_wav(tmp_path / "speech.flac", seconds=2.0, sample_rate=44100, channels=2, subtype="PCM_24")


@pytest.fixture
def corrupt_wav(tmp_path):
    path = tmp_path / "broken.wav"
    path.write_bytes(b"this is not a RIFF header" * 40)
    return path


requires_ffmpeg = pytest.mark.skipif(
    shutil.which("ffmpeg") is None or shutil.which("ffprobe") is None,
    reason="ffmpeg/ffprobe not installed"
)
