import logging
from pathlib import Path

from tonemask.core.common.enums import FormatFamily
from tonemask.features.sample_redaction.data.soundfile_codec import is_decodable

logger = logging.getLogger(__name__)

# PCM containers libsndfile reads and writes without loss
SAMPLE_ADDRESSABLE_EXTENSIONS = {
    ".wav", ".wave", ".flac", ".aiff", ".aif", ".aifc", ".au", ".snd",
    ".caf", ".w64", ".rf64", ".voc", ".sf", ".ircam", ".nist", ".sph"
}

# Lossy codecs: decode/re-encode would degrade them, so they get an overlay track
COMPRESSED_EXTENSIONS = {
    ".mp3", ".m4a", ".mp4", ".aac", ".ogg", ".oga", ".opus", ".wma", ".webm", ".amr"
}


def classify(path: Path) -> FormatFamily:
    """
    Extension first; unknown extensions are probed with libsndfile.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix in SAMPLE_ADDRESSABLE_EXTENSIONS:
        return FormatFamily.SAMPLE_ADDRESSABLE
    if suffix in COMPRESSED_EXTENSIONS:
        return FormatFamily.COMPRESSED

    if path.exists() and is_decodable(path):
        logger.debug(f"Unknown extension '{suffix}' recognised by libsndfile: {path.name}")
        return FormatFamily.SAMPLE_ADDRESSABLE

    return FormatFamily.UNSUPPORTED
