from __future__ import annotations

import argparse
import sys
from pathlib import Path

from beartype import beartype

from .clips import ClipNameOptions, run_clips
from .compare import DEFAULT_MAX_LENGTH, run_compare
from .config import FFMPEG_PATH, MAX_VALUE_LENGTH, NO_SPEECH_THRESHOLD
from .csv2eaf import DELIMITERS, run_csv2eaf
from .errors import ElanToolsError
from .export import run_json
from .filter import run_filter
from .inspect import run_inspect
from .logging_utils import setup_logging
from .media import run_media
from .merge import run_merge
from .search import run_search
from .shift import run_shift
from .tokens import NGRAM_SCOPES, run_ngram, run_tokens
from .tree import run_tree
from .whisper import run_whisper2eaf


@beartype
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="elantools",
        description="Utilities for ELAN annotation files (.eaf)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Log level for diagnostics, e.g. INFO or DEBUG (default: WARNING or LOG_LEVEL env)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # clips
    clips = subparsers.add_parser("clips", help="Cut media clips from annotation boundaries")
    clips.add_argument("--eaf", type=Path, required=True, help="Path to the ELAN-file")
    clips.add_argument(
        "--outdir",
        type=Path,
        default=None,
        help="Parent directory for <eaf stem>_CLIPS (default: directory of the ELAN-file)",
    )
    clips.add_argument("--tier-id", action="store_true", help="Add tier ID to clip file names")
    clips.add_argument("--annotation-id", action="store_true", help="Add annotation ID to clip file names")
    clips.add_argument("--value", action="store_true", help="Add annotation value to clip file names")
    clips.add_argument("--time", action="store_true", help="Add start-end in milliseconds to clip file names")
    clips.add_argument(
        "--max-length",
        type=int,
        default=MAX_VALUE_LENGTH,
        help=f"Max characters of the annotation value in file names (default: {MAX_VALUE_LENGTH})",
    )
    clips.add_argument("--ascii-path", action="store_true", help="Replace non-ASCII characters in file names with '_'")
    clips.add_argument("--min-duration", type=int, default=None, help="Skip annotations shorter than this (ms)")
    clips.add_argument("--single", action="store_true", help="Select a single annotation to cut")
    clips.add_argument("--all", action="store_true", help="Cut clips for all tiers")
    clips.add_argument("--dry-run", action="store_true", help="Print paths without cutting anything")
    clips.add_argument("--ffmpeg", type=str, default=FFMPEG_PATH, help="FFmpeg executable")
    clips.set_defaults(func=_run_clips)

    # csv2eaf
    csv2eaf = subparsers.add_parser("csv2eaf", help="Generate an ELAN-file from a CSV-file")
    csv2eaf.add_argument("--csv", type=Path, required=True, help="Path to the CSV-file")
    csv2eaf.add_argument("--delimiter", choices=sorted(DELIMITERS), default="comma", help="CSV delimiter")
    csv2eaf.add_argument("--start", type=str, default="start", help="Column with start times")
    csv2eaf.add_argument("--end", type=str, default="end", help="Column with end times")
    csv2eaf.add_argument("--values", type=str, default="values", help="Column with annotation values")
    csv2eaf.add_argument("--refs", type=str, nargs="+", default=None, help="Columns added as referring tiers")
    csv2eaf.add_argument("--offset", type=int, default=0, help="Milliseconds added to all time stamps")
    csv2eaf.add_argument("--video", type=Path, default=None, help="Media file to link")
    csv2eaf.add_argument("--eaf", type=Path, default=None, help="Add tiers to this ELAN-file instead of a new one")
    csv2eaf.add_argument("--debug", action="store_true", help="Print headers and rows, then exit")
    csv2eaf.set_defaults(func=_run_csv2eaf)

    # shift
    shift = subparsers.add_parser("shift", help="Shift all annotations in time")
    shift.add_argument("--eaf", type=Path, required=True, help="Path to the ELAN-file")
    shift.add_argument("--shift", type=int, required=True, help="Milliseconds, negative to shift backwards")
    shift.set_defaults(func=_run_shift)

    # filter
    filt = subparsers.add_parser("filter", help="Extract a timespan into a new ELAN-file")
    filt.add_argument("--eaf", type=Path, required=True, help="Path to the ELAN-file")
    filt.add_argument("--start", type=int, default=None, help="Start of timespan (ms)")
    filt.add_argument("--end", type=int, default=None, help="End of timespan (ms)")
    filt.add_argument("--media", action="store_true", help="Cut and re-link linked media")
    filt.add_argument("--tier-prefix", type=str, default=None, help="Prefix added to all tier IDs")
    filt.add_argument("--ffmpeg", type=str, default=FFMPEG_PATH, help="FFmpeg executable")
    filt.set_defaults(func=_run_filter)

    # merge
    merge = subparsers.add_parser("merge", help="Merge two ELAN-files")
    merge.add_argument("--eaf", type=Path, nargs="+", required=True, help="Two ELAN-files")
    merge.add_argument("--join", action="store_true", help="Join overlapping annotations")
    merge.set_defaults(func=_run_merge)

    # search
    search = subparsers.add_parser("search", help="Find text in ELAN-files")
    source = search.add_mutually_exclusive_group(required=True)
    source.add_argument("--eaf", type=Path, help="Path to an ELAN-file")
    source.add_argument("--dir", type=Path, help="Search all ELAN-files below this directory")
    query = search.add_mutually_exclusive_group(required=True)
    query.add_argument("--pattern", type=str, help="Substring to find")
    query.add_argument("--regex", type=str, help="Regular expression to match")
    search.add_argument("--ignore-case", action="store_true", help="Ignore case")
    search.add_argument("--context", action="store_true", help="Print parent annotation of each match")
    search.add_argument("--full-path", action="store_true", help="Print full file paths")
    search.add_argument("--verbose", action="store_true", help="Also list files without matches")
    search.set_defaults(func=_run_search)

    # tokens
    tokens = subparsers.add_parser("tokens", help="List words/tokens")
    tokens.add_argument("--eaf", type=Path, required=True, help="Path to the ELAN-file")
    tokens.add_argument("--prefix", type=str, default=None, help="Characters to strip from token starts")
    tokens.add_argument("--suffix", type=str, default=None, help="Characters to strip from token ends")
    tokens.add_argument("--strip", action="store_true", help="Strip common prefixes and suffixes")
    tokens.add_argument("--unique", action="store_true", help="Only list unique tokens")
    tokens.add_argument("--case", action="store_true", help="Ignore case")
    tokens.add_argument("--distribution", action="store_true", help="Print token frequencies")
    tokens.add_argument("--alpha", action="store_true", help="Sort distribution alphabetically")
    tokens.add_argument("--reverse", action="store_true", help="Reverse distribution order")
    tokens.add_argument("--tier", action="store_true", help="Select a tier")
    tokens.set_defaults(func=_run_tokens)

    # ngram
    ngram = subparsers.add_parser("ngram", help="n-gram frequencies")
    ngram.add_argument("--eaf", type=Path, required=True, help="Path to the ELAN-file")
    ngram.add_argument("--size", type=int, default=2, help="n-gram size (default: 2)")
    ngram.add_argument("--scope", choices=NGRAM_SCOPES, default="annotation", help="n-gram scope")
    ngram.add_argument("--remove", action="store_true", help="Remove common characters first")
    ngram.add_argument("--custom", type=str, default=None, help="Additional characters to remove")
    ngram.add_argument("--case", action="store_true", help="Ignore case")
    ngram.set_defaults(func=_run_ngram)

    # media
    media = subparsers.add_parser("media", help="Add, remove or scrub linked media")
    target = media.add_mutually_exclusive_group(required=True)
    target.add_argument("--eaf", type=Path, help="Path to an ELAN-file")
    target.add_argument("--dir", type=Path, help="Process all ELAN-files below this directory")
    media.add_argument("--media", type=Path, default=None, help="Media file to add or remove")
    action = media.add_mutually_exclusive_group(required=True)
    action.add_argument("--add", action="store_true", help="Link media file")
    action.add_argument("--remove", action="store_true", help="Unlink media file")
    action.add_argument("--scrub", action="store_true", help="Remove all media links")
    action.add_argument("--filename", action="store_true", help="Reduce media links to file names")
    media.set_defaults(func=_run_media)

    # inspect
    inspect = subparsers.add_parser("inspect", help="Overview of an ELAN-file")
    inspect.add_argument("--eaf", type=Path, required=True, help="Path to the ELAN-file")
    inspect.add_argument("--annotations", action="store_true", help="List annotations in a selected tier")
    inspect.add_argument("--verbose", action="store_true", help="Also print header information")
    inspect.set_defaults(func=_run_inspect)

    # compare
    compare = subparsers.add_parser("compare", aliases=["cmp"], help="Compare annotation values of two tiers")
    compare.add_argument("--eaf", type=Path, required=True, help="Path to the ELAN-file")
    layout = compare.add_mutually_exclusive_group()
    layout.add_argument("--compact", action="store_true", help="Pair annotations by position (default)")
    layout.add_argument(
        "--timeline",
        action="store_true",
        help="Interleave annotations by start time. Requires time values for all annotations",
    )
    compare.add_argument(
        "--len",
        dest="max_length",
        type=int,
        default=DEFAULT_MAX_LENGTH,
        help=f"Max length of listed annotation values (default: {DEFAULT_MAX_LENGTH})",
    )
    compare.set_defaults(func=_run_compare)

    # json
    json_cmd = subparsers.add_parser("json", help="Export an ELAN-file to JSON")
    json_cmd.add_argument("--eaf", type=Path, required=True, help="Path to the ELAN-file")
    json_cmd.add_argument("--simple", action="store_true", help="Tiers and annotations only")
    json_cmd.set_defaults(func=_run_json)

    # tree
    tree = subparsers.add_parser("tree", help="Print tier hierarchy")
    tree.add_argument("--eaf", type=Path, required=True, help="Path to the ELAN-file")
    tree.set_defaults(func=_run_tree)

    # whisper2eaf
    whisper = subparsers.add_parser("whisper2eaf", help="Generate ELAN-files from Whisper JSON")
    transcripts = whisper.add_mutually_exclusive_group(required=True)
    transcripts.add_argument("--json", type=Path, help="Whisper JSON-file")
    transcripts.add_argument("--dir", type=Path, help="Directory with Whisper JSON-files")
    whisper.add_argument("--clips", type=Path, default=None, help="Clip ledger from the 'clips' command")
    whisper.add_argument("--join", action="store_true", help="Join transcripts into <dir>.eaf using the clip ledger")
    whisper.add_argument("--prefix-tiers", action="store_true", help="Prefix tier IDs with the clip ledger name")
    whisper.add_argument("--media", type=Path, nargs="+", default=None, help="Media files to link")
    whisper.add_argument(
        "--no-speech",
        type=float,
        default=NO_SPEECH_THRESHOLD,
        help=f"Discard segments with no_speech_prob at or above this (default: {NO_SPEECH_THRESHOLD})",
    )
    whisper.set_defaults(func=_run_whisper2eaf)

    return parser


@beartype
def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    try:
        args.func(args)
    except EOFError:
        print("Error: Unexpected end of input", file=sys.stderr)
        sys.exit(1)
    except (ElanToolsError, OSError) as err:
        print(f"Error: {err}", file=sys.stderr)
        sys.exit(1)


@beartype
def _run_clips(args: argparse.Namespace) -> None:
    options = ClipNameOptions(
        use_tier_id=args.tier_id,
        use_annotation_id=args.annotation_id,
        use_value=args.value,
        use_time=args.time,
        max_value_length=args.max_length,
        ascii_only=args.ascii_path,
    )
    run_clips(
        args.eaf,
        outdir=args.outdir,
        options=options,
        min_duration=args.min_duration,
        single=args.single,
        extract_all=args.all,
        dry_run=args.dry_run,
        ffmpeg_path=args.ffmpeg,
    )


@beartype
def _run_csv2eaf(args: argparse.Namespace) -> None:
    run_csv2eaf(
        args.csv,
        delimiter=args.delimiter,
        start_col=args.start,
        end_col=args.end,
        values_col=args.values,
        ref_cols=args.refs,
        offset=args.offset,
        video=args.video,
        eaf_path=args.eaf,
        debug=args.debug,
    )


@beartype
def _run_shift(args: argparse.Namespace) -> None:
    run_shift(args.eaf, args.shift)


@beartype
def _run_filter(args: argparse.Namespace) -> None:
    if (args.start is None) != (args.end is None):
        raise ElanToolsError("Specify both '--start' and '--end', or neither to select an annotation")
    run_filter(
        args.eaf,
        start=args.start,
        end=args.end,
        process_media=args.media,
        tier_prefix=args.tier_prefix,
        ffmpeg_path=args.ffmpeg,
    )


@beartype
def _run_merge(args: argparse.Namespace) -> None:
    run_merge(args.eaf, join=args.join)


@beartype
def _run_search(args: argparse.Namespace) -> None:
    run_search(
        eaf_path=args.eaf,
        directory=args.dir,
        pattern=args.pattern,
        regex=args.regex,
        ignore_case=args.ignore_case,
        context=args.context,
        full_path=args.full_path,
        verbose=args.verbose,
    )
    if args.regex is not None:
        print("If '--regex' returned unexpected results, try adding quotes around the pattern.")


@beartype
def _run_tokens(args: argparse.Namespace) -> None:
    run_tokens(
        args.eaf,
        prefix=args.prefix,
        suffix=args.suffix,
        strip=args.strip,
        unique=args.unique,
        ignore_case=args.case,
        distribution=args.distribution,
        alphabetical=args.alpha,
        reverse=args.reverse,
        select=args.tier,
    )


@beartype
def _run_ngram(args: argparse.Namespace) -> None:
    run_ngram(
        args.eaf,
        size=args.size,
        scope=args.scope,
        remove_common=args.remove,
        remove_custom=args.custom,
        ignore_case=args.case,
    )


@beartype
def _run_media(args: argparse.Namespace) -> None:
    if (args.add or args.remove) and args.media is None:
        raise ElanToolsError("'--add' and '--remove' require '--media'")
    run_media(
        eaf_path=args.eaf,
        directory=args.dir,
        media=args.media if (args.add or args.remove) else None,
        add=args.add,
        remove=args.remove,
        scrub=args.scrub,
        filename_only=args.filename,
    )


@beartype
def _run_inspect(args: argparse.Namespace) -> None:
    run_inspect(args.eaf, annotations=args.annotations, verbose=args.verbose)


@beartype
def _run_compare(args: argparse.Namespace) -> None:
    run_compare(args.eaf, timeline=args.timeline, max_len=args.max_length)


@beartype
def _run_json(args: argparse.Namespace) -> None:
    run_json(args.eaf, simple=args.simple)


@beartype
def _run_tree(args: argparse.Namespace) -> None:
    run_tree(args.eaf)


@beartype
def _run_whisper2eaf(args: argparse.Namespace) -> None:
    run_whisper2eaf(
        json_path=args.json,
        directory=args.dir,
        clips=args.clips,
        join=args.join,
        prefix_tiers=args.prefix_tiers,
        media=args.media,
        no_speech_threshold=args.no_speech,
    )


if __name__ == "__main__":
    main()
