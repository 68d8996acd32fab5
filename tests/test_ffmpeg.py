from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from elantools.errors import FFmpegError
from elantools.ffmpeg import default_ffprobe_path, extract_timespan, get_duration


def _completed(returncode: int = 0, stdout: str = "", stderr: str = "") -> subprocess.CompletedProcess[str]:
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


def test_default_ffprobe_path():
    assert default_ffprobe_path("ffmpeg") == "ffprobe"
    assert default_ffprobe_path("/opt/ffmpeg/bin/ffmpeg") == "/opt/ffmpeg/bin/ffprobe"
    assert default_ffprobe_path("ffmpeg.exe") == "ffprobe.exe"


def test_extract_timespan_stream_copies(tmp_path: Path):
    source, destination = tmp_path / "in.mp4", tmp_path / "out.mp4"
    with patch("elantools.ffmpeg.subprocess.run", return_value=_completed()) as run:
        assert extract_timespan(source, 1200, 3400, destination, "/usr/bin/ffmpeg") == destination

    cmd = run.call_args.args[0]
    assert cmd == [
        "/usr/bin/ffmpeg",
        "-loglevel", "error",
        "-ss", "1.200",
        "-i", str(source),
        "-t", "2.200",
        "-c", "copy",
        "-y",
        str(destination),
    ]


def test_extract_timespan_failure_names_both_paths(tmp_path: Path, capsys):
    source, destination = tmp_path / "in.mp4", tmp_path / "out.mp4"
    with patch("elantools.ffmpeg.subprocess.run", return_value=_completed(1, stderr="Invalid data")):
        with pytest.raises(FFmpegError) as exc_info:
            extract_timespan(source, 0, 1000, destination)

    message = str(exc_info.value)
    assert str(source) in message
    assert str(destination) in message
    assert "Invalid data" in message
    assert "FFmpeg error: Invalid data" in capsys.readouterr().err


def test_missing_executable(tmp_path: Path):
    with patch("elantools.ffmpeg.subprocess.run", side_effect=FileNotFoundError):
        with pytest.raises(FFmpegError, match="Executable not found: 'nope'"):
            extract_timespan(tmp_path / "in.mp4", 0, 1000, tmp_path / "out.mp4", "nope")


def test_invalid_timespan(tmp_path: Path):
    with pytest.raises(FFmpegError, match="Invalid timespan"):
        extract_timespan(tmp_path / "in.mp4", 2000, 1000, tmp_path / "out.mp4")


def test_get_duration(tmp_path: Path):
    output = '{"format": {"duration": "12.3456"}}'
    with patch("elantools.ffmpeg.subprocess.run", return_value=_completed(stdout=output)) as run:
        assert get_duration(tmp_path / "in.mp4", "ffprobe") == 12346
    assert run.call_args.args[0][0] == "ffprobe"


def test_get_duration_errors(tmp_path: Path):
    with patch("elantools.ffmpeg.subprocess.run", return_value=_completed(1, stderr="boom")):
        with pytest.raises(FFmpegError, match="ffprobe failed"):
            get_duration(tmp_path / "in.mp4", "ffprobe")
    with patch("elantools.ffmpeg.subprocess.run", return_value=_completed(stdout="{}")):
        with pytest.raises(FFmpegError, match="No duration"):
            get_duration(tmp_path / "in.mp4", "ffprobe")
