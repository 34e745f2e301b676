# File: tonemask/core/config/settings.py

import os
import shutil
from pathlib import Path


class Settings:
    # --- Paths ---
    # tonemask/core/config/settings.py -> tonemask/core/config -> tonemask/core -> tonemask -> ROOT
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent.parent
    DATA_DIR: Path = BASE_DIR / "data"
    OUTPUT_DIR: Path = DATA_DIR / "redacted"

    # --- Database (job store) ---
    POSTGRES_USER: str = os.getenv("POSTGRES_USER", "postgres")
    POSTGRES_PASSWORD: str = os.getenv("POSTGRES_PASSWORD", "password")
    POSTGRES_SERVER: str = os.getenv("POSTGRES_SERVER", "localhost")
    POSTGRES_PORT: str = os.getenv("POSTGRES_PORT", "5432")
    POSTGRES_DB: str = os.getenv("POSTGRES_DB", "tonemask_db")

    @property
    def DATABASE_URL(self) -> str:
        # Only fallback to SQLite if explicitly requested.
        if os.getenv("USE_SQLITE", "false").lower() == "true":
            return "sqlite:///./tonemask.db"

        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # --- External Tools ---
    # Auto-detect ffmpeg/ffprobe or use env var
    FFMPEG_BINARY: str = os.getenv("FFMPEG_BINARY_PATH", shutil.which("ffmpeg") or "ffmpeg")
    FFPROBE_BINARY: str = os.getenv("FFPROBE_BINARY_PATH", shutil.which("ffprobe") or "ffprobe")

    # --- Tone ---
    TONE_FREQUENCY_HZ: float = float(os.getenv("TONE_FREQUENCY_HZ", "1000"))
    # Quieter when overwriting speech so it doesn't clip against neighbouring audio
    INPLACE_TONE_AMPLITUDE: float = float(os.getenv("INPLACE_TONE_AMPLITUDE", "0.5"))
    # Louder when it plays as a separate track over the original
    OVERLAY_TONE_AMPLITUDE: float = float(os.getenv("OVERLAY_TONE_AMPLITUDE", "0.7"))

    # --- Span Detection ---
    # Empirical values, tune against real transcripts
    TRAILING_BUFFER_SECONDS: float = float(os.getenv("TRAILING_BUFFER_SECONDS", "0.2"))
    LOOKAHEAD_WORDS: int = int(os.getenv("LOOKAHEAD_WORDS", "3"))

    # --- Overlay Track ---
    OVERLAY_SAMPLE_RATE: int = 44100
    OVERLAY_CHANNELS: int = 2
    OVERLAY_TAIL_SECONDS: float = 1.0

    # --- Compressed sources ---
    # Layout forced by the second PCM conversion attempt
    TRANSCODE_RETRY_SAMPLE_RATE: int = 48000
    TRANSCODE_RETRY_CHANNELS: int = 2

    # --- In-process buffer ---
    # Files above this size are redacted in a separate interpreter
    ISOLATION_THRESHOLD_BYTES: int = int(os.getenv("ISOLATION_THRESHOLD_BYTES", str(200 * 1024 * 1024)))

    # --- Logging ---
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    def ensure_dirs(self):
        """Creates necessary data directories if they don't exist."""
        self.DATA_DIR.mkdir(parents=True, exist_ok=True)
        self.OUTPUT_DIR.mkdir(parents=True, exist_ok=True)


settings = Settings()
