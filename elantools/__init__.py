"""elantools - Command line utilities for ELAN annotation files."""

from __future__ import annotations

from .clips import ClipNameOptions, ClipRunSummary, extract_clips, run_clips
from .compare import run_compare
from .csv2eaf import add_csv_tiers, parse_timestamp, read_csv, run_csv2eaf
from .eaf import (
    Annotation,
    AnnotationDocument,
    MediaLink,
    Tier,
    load_eaf,
    new_eaf,
    write_eaf,
)
from .errors import (
    ClipError,
    CsvFormatError,
    DocumentError,
    ElanToolsError,
    FFmpegError,
    LedgerError,
    MediaNotFoundError,
    MergeError,
    TranscriptError,
    UserAbortError,
)
from .export import document_to_dict, run_json
from .ffmpeg import extract_timespan, get_duration
from .filter import filter_document, run_filter
from .inspect import run_inspect
from .ledger import ClipLedger, ClipRecord
from .main import main
from .media import run_media
from .merge import merge_eafs, run_merge
from .search import query, run_search
from .shift import run_shift
from .text import sanitize, truncate
from .tokens import ngram_counts, run_ngram, run_tokens, token_distribution
from .tree import format_tree, run_tree
from .whisper import WhisperTranscript, run_whisper2eaf

__all__ = [
    # clips
    "ClipNameOptions",
    "ClipRunSummary",
    "extract_clips",
    "run_clips",
    # compare
    "run_compare",
    # csv2eaf
    "add_csv_tiers",
    "parse_timestamp",
    "read_csv",
    "run_csv2eaf",
    # eaf
    "Annotation",
    "AnnotationDocument",
    "MediaLink",
    "Tier",
    "load_eaf",
    "new_eaf",
    "write_eaf",
    # errors
    "ClipError",
    "CsvFormatError",
    "DocumentError",
    "ElanToolsError",
    "FFmpegError",
    "LedgerError",
    "MediaNotFoundError",
    "MergeError",
    "TranscriptError",
    "UserAbortError",
    # export
    "document_to_dict",
    "run_json",
    # ffmpeg
    "extract_timespan",
    "get_duration",
    # filter
    "filter_document",
    "run_filter",
    # inspect
    "run_inspect",
    # ledger
    "ClipLedger",
    "ClipRecord",
    # main
    "main",
    # media
    "run_media",
    # merge
    "merge_eafs",
    "run_merge",
    # search
    "query",
    "run_search",
    # shift
    "run_shift",
    # text
    "sanitize",
    "truncate",
    # tokens
    "ngram_counts",
    "run_ngram",
    "run_tokens",
    "token_distribution",
    # tree
    "format_tree",
    "run_tree",
    # whisper
    "WhisperTranscript",
    "run_whisper2eaf",
]
