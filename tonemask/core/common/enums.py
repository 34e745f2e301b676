# File: tonemask/core/common/enums.py

from enum import Enum, unique

@unique
class FormatFamily(str, Enum):
    SAMPLE_ADDRESSABLE = "sample_addressable"  # raw PCM containers (wav, flac, aiff...)
    COMPRESSED = "compressed"                  # lossy codecs (mp3, aac, ogg...)
    UNSUPPORTED = "unsupported"

@unique
class RedactionMethod(str, Enum):
    BEEP = "beep"
    MUTE = "mute"

@unique
class StrategyName(str, Enum):
    EXTERNAL_TOOL = "external_tool"
    IN_PROCESS_BUFFER = "in_process_buffer"
    OVERLAY = "overlay"
    PASSTHROUGH = "passthrough"

@unique
class ResultKind(str, Enum):
    MUTATED = "mutated"
    OVERLAID = "overlaid"
    PASSTHROUGH = "passthrough"
