from __future__ import annotations

import json
import subprocess
import sys
from pathlib import Path

from beartype import beartype

from .config import FFMPEG_PATH, FFPROBE_PATH
from .errors import FFmpegError
from .logging_utils import get_logger

log = get_logger(__name__)


@beartype
def default_ffprobe_path(ffmpeg_path: str) -> str:
    """Derive the ffprobe executable from an FFmpeg path.

    `/opt/ffmpeg/bin/ffmpeg` -> `/opt/ffmpeg/bin/ffprobe`, `ffmpeg` -> `ffprobe`
    """
    path = Path(ffmpeg_path)
    name = path.name.replace("ffmpeg", "ffprobe") if "ffmpeg" in path.name else "ffprobe" + path.suffix
    if path.parent == Path("."):
        return name
    return str(path.with_name(name))


@beartype
def _run(cmd: list[str]) -> subprocess.CompletedProcess[str]:
    log.debug("running %s", " ".join(cmd))
    try:
        return subprocess.run(cmd, capture_output=True, text=True)
    except FileNotFoundError as err:
        raise FFmpegError(f"Executable not found: '{cmd[0]}'") from err


@beartype
def get_duration(media_path: Path, ffprobe_path: str | None = None) -> int:
    """Get media duration using ffprobe.

    Args:
        media_path: Path to the audio or video file
        ffprobe_path: ffprobe executable, derived from the FFmpeg path if not set

    Returns:
        Duration in milliseconds
    """
    cmd = [
        ffprobe_path or FFPROBE_PATH or default_ffprobe_path(FFMPEG_PATH),
        "-v", "quiet",
        "-print_format", "json",
        "-show_format",
        str(media_path),
    ]

    result = _run(cmd)
    if result.returncode != 0:
        raise FFmpegError(f"ffprobe failed for '{media_path}': {result.stderr}")

    try:
        data = json.loads(result.stdout)
        seconds = float(data["format"]["duration"])
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as err:
        raise FFmpegError(f"No duration reported for '{media_path}'") from err

    return round(seconds * 1000)


@beartype
def extract_timespan(
    source: Path,
    start_ms: int,
    end_ms: int,
    destination: Path,
    ffmpeg_path: str | None = None,
) -> Path:
    """Cut a timespan from a media file without re-encoding.

    Args:
        source: Media file to cut from
        start_ms: Start of the timespan in milliseconds
        end_ms: End of the timespan in milliseconds
        destination: Output path, overwritten if it exists
        ffmpeg_path: FFmpeg executable (default: FFMPEG_PATH env or `ffmpeg`)

    Returns:
        Path to the created file
    """
    if end_ms < start_ms:
        raise FFmpegError(f"Invalid timespan {start_ms}-{end_ms} ms for '{source}'")

    cmd = [
        ffmpeg_path or FFMPEG_PATH,
        "-loglevel", "error",
        "-ss", f"{start_ms / 1000:.3f}",
        "-i", str(source),
        "-t", f"{(end_ms - start_ms) / 1000:.3f}",
        "-c", "copy",
        "-y",  # Overwrite output
        str(destination),
    ]

    result = _run(cmd)

    if result.returncode != 0:
        print(f"FFmpeg error: {result.stderr}", file=sys.stderr)
        raise FFmpegError(
            f"Failed to extract '{destination}' from '{source}' "
            f"(FFmpeg exited with code {result.returncode}): {result.stderr.strip()}"
        )

    return destination
