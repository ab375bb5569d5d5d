"""ffmpeg argument builders for capture and thumbnail extraction.

Everything here is pure: the same inputs always give the same Invocation, and
nothing is spawned. The launcher turns an Invocation into a process.
"""

from __future__ import annotations

import re
import shlex
from dataclasses import dataclass
from datetime import datetime
from urllib.parse import urlencode

from camdvr.filenames import DvrPaths, segment_output_pattern
from camdvr.models.config import DvrConfig

FFMPEG = "ffmpeg"

STILL_SEEK = "00:00:15"
THUMBNAIL_WIDTH = 200
ANIMATED_FRAME_RATE = 1
ANIMATED_SPEEDUP = "0.025"

_PASSWORD_RE = re.compile(r"(pwd=)[^&\s']*")


@dataclass(frozen=True)
class Invocation:
    """Executable plus argument list handed to the process launcher."""

    executable: str
    args: tuple[str, ...]

    @property
    def argv(self) -> list[str]:
        return [self.executable, *self.args]

    def redacted(self) -> str:
        """Shell-style rendering with camera passwords masked."""
        return _PASSWORD_RE.sub(r"\g<1>***", shlex.join(self.argv))


def _scale_filter() -> str:
    return f"scale={THUMBNAIL_WIDTH}:-1"


def camera_stream_urls(config: DvrConfig) -> tuple[str, str]:
    """Return the (video, audio) HTTP endpoints for the camera."""
    query = urlencode({"user": config.username, "pwd": config.resolved_password()})
    base = f"http://{config.device_ip}"
    return f"{base}/videostream.cgi?{query}", f"{base}/videostream.asf?{query}"


def build_capture_command(
    config: DvrConfig,
    segment_length_s: int,
    *,
    paths: DvrPaths | None = None,
    now: datetime | None = None,
    start_number: int = 0,
) -> Invocation:
    """Pull video and audio, remux without re-encoding, and split into segments.

    Segment names are prefixed with the wall-clock minute the capture started.
    ``start_number`` is the first sequence ffmpeg writes; a restart within the
    same minute passes the next free one so earlier segments are not reopened.
    """
    paths = paths or DvrPaths()
    started = now or datetime.now()
    video_url, audio_url = camera_stream_urls(config)
    output = segment_output_pattern(paths, started)
    args = (
        "-use_wallclock_as_timestamps", "1",
        "-f", "mjpeg",
        "-i", video_url,
        "-i", audio_url,
        "-map", "0:v",
        "-map", "1:a",
        "-acodec", "copy",
        "-vcodec", "copy",
        "-f", "segment",
        "-segment_time", str(segment_length_s),
        "-reset_timestamps", "1",
    )  # fmt: skip
    if start_number:
        args += ("-segment_start_number", str(start_number))
    return Invocation(FFMPEG, (*args, str(output)))


def build_still_thumbnail_command(base_name: str, *, paths: DvrPaths | None = None) -> Invocation:
    paths = paths or DvrPaths()
    args = (
        "-ss", STILL_SEEK,
        "-i", str(paths.container_path(base_name)),
        "-vframes", "1",
        "-q:v", "10",
        "-vf", _scale_filter(),
        str(paths.still_path(base_name)),
    )  # fmt: skip
    return Invocation(FFMPEG, args)


def build_animated_thumbnail_command(
    base_name: str, *, paths: DvrPaths | None = None
) -> Invocation:
    paths = paths or DvrPaths()
    args = (
        "-i", str(paths.container_path(base_name)),
        "-r", str(ANIMATED_FRAME_RATE),
        "-vf", f"setpts={ANIMATED_SPEEDUP}*PTS,{_scale_filter()}",
        str(paths.animated_path(base_name)),
    )  # fmt: skip
    return Invocation(FFMPEG, args)
