import json
import logging
import math
import subprocess
from pathlib import Path
from typing import List, Optional

from tonemask.core.config.settings import settings
from tonemask.core.common.enums import RedactionMethod
from tonemask.core.exceptions import ToolInvocationError
from tonemask.features.span_detection.domain.models import SensitiveSpan
from tonemask.features.tone_synthesis.domain.models import ToneSettings
from ..domain.interfaces import IMediaToolAdapter
from ..domain.models import ProbeResult

logger = logging.getLogger(__name__)


class FFmpegAdapter(IMediaToolAdapter):
    def __init__(self, ffmpeg_binary: Optional[str] = None, ffprobe_binary: Optional[str] = None):
        self.ffmpeg_binary = ffmpeg_binary or settings.FFMPEG_BINARY
        self.ffprobe_binary = ffprobe_binary or settings.FFPROBE_BINARY

    def probe(self, path: Path) -> ProbeResult:
        cmd = [
            self.ffprobe_binary,
            "-v", "error",
            "-select_streams", "a:0",
            "-show_entries", "stream=codec_name,sample_rate,channels:format=duration",
            "-of", "json",
            str(path)
        ]

        stdout = self._run_tool(cmd)

        try:
            data = json.loads(stdout or "{}")
            stream = data["streams"][0]
            duration = data.get("format", {}).get("duration")
            return ProbeResult(
                codec_name=stream["codec_name"],
                sample_rate=int(stream["sample_rate"]),
                channels=int(stream["channels"]),
                duration=float(duration) if duration not in (None, "N/A") else None
            )
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ToolInvocationError(f"No usable audio stream in {path}: {e}", command=cmd) from e

    def apply_span(self, source: Path, destination: Path, span: SensitiveSpan,
                   tone: ToneSettings, probe: ProbeResult) -> Path:
        # Span edges as sample indices, same floor rule as the in-process redactor
        first = int(math.floor(span.start * probe.sample_rate))
        last = int(math.floor(span.end * probe.sample_rate))
        inside = f"gte(n,{first})*lt(n,{last})"

        if tone.method == RedactionMethod.MUTE:
            fill = "0"
        else:
            # Phase 0 at the first sample of the span
            fill = f"{tone.amplitude}*sin(2*PI*{tone.frequency_hz}*(n-{first})/{probe.sample_rate})"

        # One expression serves every channel with c=same
        cmd = [
            self.ffmpeg_binary, "-y",
            "-i", str(source),
            "-af", f"aeval=exprs='if({inside},{fill},val(ch))':c=same",
            "-c:a", probe.codec_name,
            "-ar", str(probe.sample_rate),
            "-ac", str(probe.channels),
            str(destination)
        ]

        self._run_tool(cmd, expected_output=Path(destination))
        return Path(destination)

    def to_pcm(self, source: Path, destination: Path, alternative: bool = False) -> Path:
        """
        Decodes any ffmpeg-readable source into 16-bit PCM WAV. The alternative
        pass skips damaged packets and forces a fixed rate and layout.
        """
        cmd = [self.ffmpeg_binary, "-y"]
        if alternative:
            cmd += ["-err_detect", "ignore_err"]
        cmd += ["-i", str(source), "-vn", "-acodec", "pcm_s16le"]
        if alternative:
            cmd += [
                "-ar", str(settings.TRANSCODE_RETRY_SAMPLE_RATE),
                "-ac", str(settings.TRANSCODE_RETRY_CHANNELS)
            ]
        cmd.append(str(destination))

        self._run_tool(cmd, expected_output=Path(destination))
        return Path(destination)

    def from_pcm(self, source: Path, destination: Path, probe: ProbeResult) -> Path:
        """Encodes PCM back into the codec, rate and layout the source was probed with."""
        cmd = [
            self.ffmpeg_binary, "-y",
            "-i", str(source),
            "-c:a", probe.codec_name,
            "-ar", str(probe.sample_rate),
            "-ac", str(probe.channels),
            str(destination)
        ]

        self._run_tool(cmd, expected_output=Path(destination))
        return Path(destination)

    def _run_tool(self, cmd: List[str], expected_output: Optional[Path] = None) -> str:
        logger.info(f"Running: {' '.join(cmd)}")

        try:
            proc = subprocess.run(cmd, check=True, capture_output=True, text=True)
        except OSError as e:
            # Binary missing or not executable
            raise ToolInvocationError(f"Could not start {cmd[0]}: {e}", command=cmd) from e
        except subprocess.CalledProcessError as e:
            logger.error(f"{Path(cmd[0]).name} failed: {e.stderr}")
            raise ToolInvocationError(
                f"{Path(cmd[0]).name} exited with {e.returncode}",
                command=cmd, returncode=e.returncode, stderr=e.stderr or ""
            ) from e

        if expected_output is not None:
            if not expected_output.exists() or expected_output.stat().st_size == 0:
                raise ToolInvocationError(
                    f"{Path(cmd[0]).name} produced no output at {expected_output}",
                    command=cmd, returncode=proc.returncode, stderr=proc.stderr
                )

        return proc.stdout
