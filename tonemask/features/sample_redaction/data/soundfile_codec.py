import logging
from pathlib import Path

import soundfile as sf

from tonemask.core.exceptions import DecodeError
from tonemask.core.shared_types import AudioBuffer
from ..domain.interfaces import IAudioCodec

logger = logging.getLogger(__name__)


class SoundFileCodec(IAudioCodec):
    """
    libsndfile-backed codec (WAV, FLAC, AIFF, AU, CAF, W64, ...).
    Samples are handled as float64, which holds every PCM_32 value exactly,
    and written back in the source subtype.
    """

    def decode(self, path: Path) -> AudioBuffer:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Audio not found: {path}")

        try:
            info = sf.info(str(path))
            samples, sample_rate = sf.read(str(path), dtype="float64", always_2d=True)
        except (sf.LibsndfileError, RuntimeError, TypeError) as e:
            raise DecodeError(f"Cannot decode {path.name}: {e}") from e

        logger.debug(
            f"Decoded {path.name}: {samples.shape[0]} frames, {samples.shape[1]} ch, "
            f"{sample_rate} Hz, {info.format}/{info.subtype}"
        )

        return AudioBuffer(
            sample_rate=sample_rate,
            samples=samples,
            subtype=info.subtype,
            format=info.format
        )

    def encode(self, buffer: AudioBuffer, path: Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        sf.write(
            str(path),
            buffer.samples,
            buffer.sample_rate,
            subtype=buffer.subtype,
            format=buffer.format
        )
        return path


def is_decodable(path: Path) -> bool:
    """True when libsndfile recognises the container."""
    try:
        sf.info(str(path))
    except (sf.LibsndfileError, RuntimeError, TypeError):
        return False
    return True
