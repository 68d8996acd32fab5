"""Cut media clips from annotation boundaries.

Each linked media file is cut once per annotation in the selected tier(s)
using FFmpeg (stream copy, no re-encoding). Clips are written to one
sub-directory per tier together with a clip ledger, `<tier_id>.json`, that
maps every clip back to its timespan in the original media.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from beartype import beartype

from .config import FFMPEG_PATH, LARGE_TIER_THRESHOLD, MAX_VALUE_LENGTH
from .eaf import MediaLink, Tier, load_eaf
from .errors import ClipError, MediaNotFoundError, UserAbortError
from .ffmpeg import extract_timespan
from .files import clips_dir, confirm
from .ledger import ClipLedger, ClipRecord
from .logging_utils import get_logger
from .prompt import select_annotation, select_tier
from .text import UNSAFE_FILENAME_CHARS, sanitize

log = get_logger(__name__)


@dataclass
class ClipNameOptions:
    """Optional components of clip file names, added in this order."""

    use_tier_id: bool = False
    use_annotation_id: bool = False
    use_value: bool = False
    use_time: bool = False
    max_value_length: int = MAX_VALUE_LENGTH
    ascii_only: bool = False


@dataclass
class Boundary:
    """Timespan and identity of one annotation to cut."""

    start: int
    end: int
    annotation_id: str
    value: str

    @property
    def duration(self) -> int:
        return self.end - self.start


@dataclass
class ClipRunSummary:
    """Outcome of a clip run across all processed tiers."""

    ledgers: list[Path] = field(default_factory=list)
    clip_count: int = 0
    durations: list[int] = field(default_factory=list)

    @property
    def longest(self) -> int:
        return max(self.durations, default=0)

    @property
    def shortest(self) -> int:
        return min(self.durations, default=0)


@beartype
def resolve_media_paths(links: list[MediaLink], dry_run: bool = False) -> list[Path]:
    """Locate linked media files on disk.

    The absolute path is used if it exists, otherwise the relative path
    (made absolute). In dry-run mode an unresolved link is kept as is.

    Args:
        links: Media links from the ELAN-file header
        dry_run: Keep unresolved paths instead of failing

    Returns:
        One path per link, in link order

    Raises:
        MediaNotFoundError: If a link can not be resolved outside dry-run
    """
    resolved: list[Path] = []
    for link in links:
        if link.absolute.is_file():
            resolved.append(link.absolute)
        elif link.relative is not None and link.relative.is_file():
            resolved.append(link.relative.resolve())
        elif dry_run:
            resolved.append(link.absolute)
        else:
            listing = "\n".join(
                f"    {i:2}. ABS: {l.absolute}\n        REL: {l.relative or 'NONE'}"
                for i, l in enumerate(links, start=1)
            )
            raise MediaNotFoundError(
                f"Linked media files could not be located:\n{listing}\n"
                "    Re-link them in ELAN and try again."
            )
    return resolved


@beartype
def collect_boundaries(tier: Tier, min_duration: int | None = None) -> tuple[list[Boundary], list[int]]:
    """Boundaries for all timed annotations in a tier.

    Args:
        tier: Tier to collect from
        min_duration: Skip annotations shorter than this (ms)

    Returns:
        Boundaries and their durations
    """
    boundaries: list[Boundary] = []
    durations: list[int] = []
    for annotation in tier.annotations:
        if annotation.start is None or annotation.end is None:
            continue
        duration = annotation.end - annotation.start
        if min_duration is not None and duration < min_duration:
            continue
        boundaries.append(
            Boundary(annotation.start, annotation.end, annotation.annotation_id, annotation.value)
        )
        durations.append(duration)
    return boundaries, durations


@beartype
def select_single_boundary(tier: Tier, large_tier: int = LARGE_TIER_THRESHOLD) -> Boundary:
    """Let the user pick one annotation in a tier."""
    if len(tier) > large_tier:
        if not confirm(f"The tier '{tier.tier_id}' contains {len(tier)} annotations. List all?"):
            raise UserAbortError("User aborted process.")

    annotation = select_annotation(tier, require_times=True)
    if annotation.start is None or annotation.end is None:
        raise ClipError(
            f"Annotation '{annotation.annotation_id}' has no time values specified"
        )
    return Boundary(annotation.start, annotation.end, annotation.annotation_id, annotation.value)


@beartype
def compose_clip_stem(index: int, tier_id: str, boundary: Boundary, options: ClipNameOptions) -> str:
    """Annotation part of a clip file name.

    `annotation_0003_utterance_a7_Hello world_1200-3400` with all options
    enabled for the third boundary.

    Args:
        index: 1-based position of the boundary in the tier
        tier_id: Tier the boundary belongs to
        boundary: Boundary to name
        options: Enabled name components

    Returns:
        File stem without media name or extension
    """
    stem = f"annotation_{index:04}"
    if options.use_tier_id:
        stem += f"_{tier_id}"
    if options.use_annotation_id:
        stem += f"_{boundary.annotation_id}"
    if options.use_value:
        value = sanitize(
            boundary.value,
            ascii_substitute="_" if options.ascii_only else None,
            strip_pattern=UNSAFE_FILENAME_CHARS,
            max_len=options.max_value_length,
        )
        stem += f"_{value}"
    if options.use_time:
        stem += f"_{boundary.start}-{boundary.end}"
    return stem


@beartype
def clip_output_path(tier_dir: Path, media: Path, stem: str) -> Path:
    """`<tier_dir>/<media stem>_<stem><media suffix>`"""
    if not media.suffix:
        raise ClipError(f"Could not determine file type for '{media}'.")
    # with_suffix would cut multi-dot stems such as 'audio.wav.wav'
    return tier_dir / f"{media.stem}_{stem}{media.suffix}"


@beartype
def extract_tier_clips(
    tier_id: str,
    boundaries: list[Boundary],
    media: list[Path],
    tier_dir: Path,
    ledger: ClipLedger,
    options: ClipNameOptions,
    dry_run: bool = False,
    ffmpeg_path: str = FFMPEG_PATH,
) -> ClipLedger:
    """Cut all boundaries in one tier from every media file.

    The ledger is filled in and returned, not written. Any failure aborts
    before the caller gets to write it.

    Args:
        tier_id: Tier being processed
        boundaries: Annotation boundaries to cut
        media: Resolved media files
        tier_dir: Output directory for this tier
        ledger: Ledger to add clip records to
        options: File name components
        dry_run: Print paths without cutting anything
        ffmpeg_path: FFmpeg executable

    Returns:
        The filled in ledger
    """
    for index, boundary in enumerate(boundaries, start=1):
        print(f"[ {boundary.start:6}ms - {boundary.end:6}ms... '{boundary.value}' ]")
        stem = compose_clip_stem(index, tier_id, boundary, options)
        record = ClipRecord(start=boundary.start, end=boundary.end)

        for media_in in media:
            out_path = clip_output_path(tier_dir, media_in, stem)

            if dry_run:
                print(
                    f"  IN (exists {str(media_in.exists()):5}): {media_in}\n"
                    f" OUT (exists {str(out_path.exists()):5}): {out_path}"
                )
                record.add(out_path)
                continue

            if out_path.exists() and not confirm(f"'{out_path}' already exists. Overwrite?"):
                raise UserAbortError("User aborted process.")

            extract_timespan(media_in, boundary.start, boundary.end, out_path, ffmpeg_path)
            print(f"Wrote '{out_path}'")
            record.add(out_path)

        ledger.add(record)

    return ledger


@beartype
def extract_clips(
    tiers: list[Tier],
    media: list[Path],
    outdir: Path,
    options: ClipNameOptions,
    min_duration: int | None = None,
    single: bool = False,
    dry_run: bool = False,
    ffmpeg_path: str = FFMPEG_PATH,
) -> ClipRunSummary:
    """Cut clips for each tier and write one clip ledger per tier.

    Args:
        tiers: Tiers to process
        media: Resolved media files
        outdir: Output directory, one sub-directory per tier is created
        options: File name components
        min_duration: Batch mode only, skip shorter annotations (ms)
        single: Select one annotation interactively per tier
        dry_run: Print paths without creating directories, clips or ledgers
        ffmpeg_path: FFmpeg executable

    Returns:
        Run summary
    """
    summary = ClipRunSummary()
    base_ledger = ClipLedger.with_media(media)

    for tier in tiers:
        tier_dir = outdir / tier.tier_id
        if not dry_run:
            tier_dir.mkdir(parents=True, exist_ok=True)

        if single:
            boundaries = [select_single_boundary(tier)]
        else:
            boundaries, durations = collect_boundaries(tier, min_duration)
            summary.durations.extend(durations)

        log.info("tier '%s': %d boundaries, %d media files", tier.tier_id, len(boundaries), len(media))

        ledger = extract_tier_clips(
            tier.tier_id,
            boundaries,
            media,
            tier_dir,
            base_ledger.copy(),
            options,
            dry_run=dry_run,
            ffmpeg_path=ffmpeg_path,
        )
        summary.clip_count += len(ledger)

        ledger_path = tier_dir / f"{tier.tier_id}.json"
        if dry_run:
            print(f"Ledger: {ledger_path} ({len(ledger)} clips, not written)")
        else:
            ledger.write(ledger_path)
            print(f"Wrote {ledger_path}")
        summary.ledgers.append(ledger_path)

    return summary


@beartype
def run_clips(
    eaf_path: Path,
    outdir: Path | None = None,
    options: ClipNameOptions | None = None,
    min_duration: int | None = None,
    single: bool = False,
    extract_all: bool = False,
    dry_run: bool = False,
    ffmpeg_path: str = FFMPEG_PATH,
) -> ClipRunSummary:
    """Entry point for the `clips` command."""
    document = load_eaf(eaf_path)
    outdir = clips_dir(eaf_path, outdir)

    links = document.media_links()
    if not links and not dry_run:
        raise MediaNotFoundError(f"No linked media files in '{eaf_path}'")

    if not dry_run:
        outdir.mkdir(parents=True, exist_ok=True)

    media = resolve_media_paths(links, dry_run=dry_run)

    tiers = list(document.tiers) if extract_all else [select_tier(document, reject_tokenized=True)]

    summary = extract_clips(
        tiers,
        media,
        outdir,
        options or ClipNameOptions(),
        min_duration=min_duration,
        single=single,
        dry_run=dry_run,
        ffmpeg_path=ffmpeg_path,
    )

    print(f"Longest clip:  {summary.longest} ms")
    print(f"Shortest clip: {summary.shortest} ms")
    return summary
