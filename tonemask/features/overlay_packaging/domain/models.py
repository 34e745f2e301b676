import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List


@dataclass(frozen=True)
class PlaybackDescriptor:
    """
    Tells a player to run the original and the tone track side by side.
    Track references are file names relative to the descriptor's directory.
    """
    spans: List[Dict[str, float]]
    original_track: str
    tone_track: str
    # "mute" means the player should silence the original during spans
    method: str = "beep"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "spans": self.spans,
            "originalTrack": self.original_track,
            "toneTrack": self.tone_track,
            "method": self.method
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlaybackDescriptor":
        return cls(
            spans=list(data.get("spans") or []),
            original_track=data["originalTrack"],
            tone_track=data["toneTrack"],
            method=data.get("method", "beep")
        )


@dataclass
class OverlayArtifacts:
    """
    The files written by the packager.
    """
    original_path: Path
    tone_track_path: Path
    descriptor_path: Path
    tone_duration_seconds: float = 0.0
