"""Defaults for elantools, overridable through the environment or a .env file."""

from __future__ import annotations

import os
import sys

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

_FFMPEG_DEFAULT = "ffmpeg.exe" if sys.platform == "win32" else "ffmpeg"
_FFPROBE_DEFAULT = "ffprobe.exe" if sys.platform == "win32" else "ffprobe"

# External tools
FFMPEG_PATH: str = os.getenv("FFMPEG_PATH", _FFMPEG_DEFAULT)
FFPROBE_PATH: str | None = os.getenv("FFPROBE_PATH") or None

# Max characters of an annotation value used in clip file names
MAX_VALUE_LENGTH: int = int(os.getenv("ELANTOOLS_MAX_VALUE_LENGTH", "20"))

# Ask before listing tiers with more annotations than this
LARGE_TIER_THRESHOLD: int = int(os.getenv("ELANTOOLS_LARGE_TIER", "40"))

# Whisper segments with a no_speech_prob at or above this are discarded
NO_SPEECH_THRESHOLD: float = float(os.getenv("ELANTOOLS_NO_SPEECH_THRESHOLD", "0.6"))

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "WARNING")

# Common characters removed from tokens with the 'strip' option
COMMON_PREFIXES: str = "#*_<{([-\"'="
COMMON_SUFFIXES: str = "#*_>})]-\"'=.,:;!?"

# Common characters removed before n-gram generation
COMMON_NGRAM_REMOVE: str = "\"'#*<>{}()[].,:;!/?=\\_"
