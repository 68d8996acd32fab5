"""Filter a timespan of an ELAN-file into a new ELAN-file.

All tiers are kept. Alignable annotations fully inside the timespan are kept
together with everything referring to them. Linked media can optionally be
cut to the same timespan and re-linked, in which case all time values are
rebased to start at 0.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from pathlib import Path

from beartype import beartype
from pympi.Elan import Eaf  # type: ignore[import-untyped]

from .clips import resolve_media_paths
from .config import FFMPEG_PATH, FFPROBE_PATH, LARGE_TIER_THRESHOLD
from .eaf import (
    AnnotationDocument,
    add_media_link,
    load_eaf,
    remove_annotations,
    rename_tier,
    shift_timeslots,
    timeslot_bounds,
    write_eaf,
)
from .errors import ClipError, UserAbortError
from .ffmpeg import default_ffprobe_path, extract_timespan, get_duration
from .files import append_file_name, confirm
from .logging_utils import get_logger
from .prompt import select_annotation, select_tier

log = get_logger(__name__)


@dataclass
class FilterResult:
    """Filtered copy of a document."""

    eaf: Eaf
    annotations_in: int
    annotations_out: int
    media: list[Path]


@beartype
def select_timespan(document: AnnotationDocument, large_tier: int = LARGE_TIER_THRESHOLD) -> tuple[int, int]:
    """Use the boundaries of an interactively selected annotation as timespan."""
    tier = select_tier(document, reject_tokenized=True)
    if len(tier) > large_tier:
        if not confirm(f"The tier '{tier.tier_id}' has {len(tier)} annotations. List all?"):
            raise UserAbortError("Aborted process.")
    annotation = select_annotation(tier, require_times=True)
    if annotation.start is None or annotation.end is None:
        raise ClipError("Annotation has no time values specified.")
    return annotation.start, annotation.end


@beartype
def filter_annotations(eaf: Eaf, start: int, end: int) -> int:
    """Remove all annotations not fully inside `start`-`end` (in place).

    Returns:
        Number of annotations removed
    """
    bounds = timeslot_bounds(eaf)
    outside: set[str] = set()
    for aligned, _, _, _ in eaf.tiers.values():
        for aid, (begin, stop, _, _) in aligned.items():
            start_ms = bounds.get(begin, (None, None))[0]
            end_ms = bounds.get(stop, (None, None))[1]
            if start_ms is None or end_ms is None or start_ms < start or end_ms > end:
                outside.add(aid)
    return remove_annotations(eaf, outside)


@beartype
def cut_media(
    media: list[Path],
    start: int,
    end: int,
    outdir: Path,
    ffmpeg_path: str = FFMPEG_PATH,
    ffprobe_path: str | None = None,
) -> list[Path]:
    """Cut each media file to a timespan, skipping files that end before `start`.

    Returns:
        Paths to the cut files, `<outdir>/<stem>_<start>-<end><suffix>`
    """
    cuts: list[Path] = []
    for media_in in media:
        duration = get_duration(media_in, ffprobe_path)
        if start >= duration:
            print(f"(!) Start {start} ms is past the end of '{media_in}' ({duration} ms). Skipping.")
            continue
        media_end = min(end, duration)
        out_path = append_file_name(outdir / media_in.name, f"{start}-{media_end}")
        if out_path.exists() and not confirm(f"'{out_path}' already exists. Overwrite?"):
            raise UserAbortError("User aborted process.")
        extract_timespan(media_in, start, media_end, out_path, ffmpeg_path)
        print(f"Wrote '{out_path}'")
        cuts.append(out_path)
    return cuts


@beartype
def filter_document(
    document: AnnotationDocument,
    start: int,
    end: int,
    process_media: bool = False,
    outdir: Path | None = None,
    tier_prefix: str | None = None,
    ffmpeg_path: str = FFMPEG_PATH,
    ffprobe_path: str | None = None,
) -> FilterResult:
    """Copy of the document with only the annotations inside a timespan.

    Args:
        document: Source document, left unchanged
        start: Start of the timespan (ms)
        end: End of the timespan (ms)
        process_media: Cut linked media, re-link the cuts and rebase times to 0
        outdir: Directory for media cuts, defaults to the ELAN-file directory
        tier_prefix: Prefix added to all tier IDs
        ffmpeg_path: FFmpeg executable
        ffprobe_path: ffprobe executable

    Returns:
        Filtered document and annotation counts
    """
    if start < 0 or end <= start:
        raise ClipError(f"Invalid timespan {start}-{end} ms")

    eaf = copy.deepcopy(document.eaf)
    filter_annotations(eaf, start, end)

    cuts: list[Path] = []
    if process_media:
        media = resolve_media_paths(document.media_links())
        if outdir is None:
            outdir = document.path.parent if document.path is not None else Path.cwd()
        ffprobe_path = ffprobe_path or FFPROBE_PATH or default_ffprobe_path(ffmpeg_path)
        cuts = cut_media(media, start, end, outdir, ffmpeg_path, ffprobe_path)
        eaf.media_descriptors = []
        for cut in cuts:
            add_media_link(eaf, cut, outdir)
        shift_timeslots(eaf, -start)

    if tier_prefix:
        for tier_id in list(eaf.tiers):
            rename_tier(eaf, tier_id, f"{tier_prefix}{tier_id}")

    return FilterResult(
        eaf=eaf,
        annotations_in=len(document.eaf.annotations),
        annotations_out=len(eaf.annotations),
        media=cuts,
    )


@beartype
def run_filter(
    eaf_path: Path,
    start: int | None = None,
    end: int | None = None,
    process_media: bool = False,
    tier_prefix: str | None = None,
    ffmpeg_path: str = FFMPEG_PATH,
) -> Path | None:
    """Entry point for the `filter` command."""
    document = load_eaf(eaf_path)

    if start is None or end is None:
        start, end = select_timespan(document)
    print(f"{start}-{end}")

    result = filter_document(
        document,
        start,
        end,
        process_media=process_media,
        outdir=eaf_path.parent,
        tier_prefix=tier_prefix,
        ffmpeg_path=ffmpeg_path,
    )

    out_path = append_file_name(eaf_path, f"{start}-{end}")
    written = write_eaf(result.eaf, out_path)
    if written:
        print(f"Wrote '{out_path}'")
    else:
        print("Write to file aborted by user")

    print(f"EAF IN:  {result.annotations_in} annotations")
    print(f"EAF OUT: {result.annotations_out} annotations")
    return out_path if written else None
