from __future__ import annotations


class ElanToolsError(Exception):
    """Base error for elantools commands."""


class DocumentError(ElanToolsError):
    """Raised when an ELAN-file can not be read, parsed or written."""


class MediaNotFoundError(ElanToolsError, FileNotFoundError):
    """Raised when linked media files can not be located."""


class LedgerError(ElanToolsError):
    """Raised when a clip ledger file is not valid."""


class ClipError(ElanToolsError):
    """Raised when clip boundaries or output paths can not be determined."""


class FFmpegError(ElanToolsError):
    """Raised when an FFmpeg or ffprobe call fails."""


class UserAbortError(ElanToolsError):
    """Raised when the user declines a prompt that the run depends on."""


class CsvFormatError(ElanToolsError):
    """Raised when a CSV-file is missing columns or has invalid time stamps."""


class TranscriptError(ElanToolsError):
    """Raised when a Whisper transcript can not be read or placed in time."""


class MergeError(ElanToolsError):
    """Raised when two ELAN-files can not be merged."""
