"""Read-only view of ELAN-files plus the few write helpers the commands need.

Parsing and serialization is done by pympi (`pympi.Elan.Eaf`). The view
resolves what pympi leaves implicit: tier order, annotation order, time
values for referring annotations, tokenized tiers and media paths.
"""

from __future__ import annotations

import mimetypes
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import unquote, urlparse

from beartype import beartype
from pympi.Elan import Eaf  # type: ignore[import-untyped]

from .errors import DocumentError
from .files import confirm_overwrite
from .logging_utils import get_logger

log = get_logger(__name__)

TOKENIZED_CONSTRAINT = "Symbolic_Subdivision"


@dataclass
class Annotation:
    """Single annotation with resolved time values."""

    annotation_id: str
    value: str
    start: int | None  # ms, None if the time slot has no value
    end: int | None
    tier_id: str = ""
    ref_id: str | None = None  # referred (parent) annotation, if any

    @property
    def has_times(self) -> bool:
        return self.start is not None and self.end is not None

    @property
    def duration(self) -> int | None:
        if self.start is None or self.end is None:
            return None
        return self.end - self.start


@dataclass
class Tier:
    """Tier with annotations in document order."""

    tier_id: str
    parent_id: str | None = None
    linguistic_type: str = ""
    participant: str | None = None
    annotator: str | None = None
    tokenized: bool = False
    annotations: list[Annotation] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.annotations)

    @property
    def is_ref(self) -> bool:
        return self.parent_id is not None

    def find(self, annotation_id: str) -> Annotation | None:
        for annotation in self.annotations:
            if annotation.annotation_id == annotation_id:
                return annotation
        return None

    def tokens(
        self,
        prefix: str | None = None,
        suffix: str | None = None,
        unique: bool = False,
        ignore_case: bool = False,
    ) -> list[str]:
        return tokenize([a.value for a in self.annotations], prefix, suffix, unique, ignore_case)


@dataclass
class MediaLink:
    """Linked media file as specified in the ELAN-file header."""

    absolute: Path
    relative: Path | None
    mime_type: str = ""


@beartype
def tokenize(
    values: list[str],
    prefix: str | None = None,
    suffix: str | None = None,
    unique: bool = False,
    ignore_case: bool = False,
) -> list[str]:
    """Split annotation values on whitespace into tokens.

    Args:
        values: Annotation values
        prefix: Characters stripped from the start of each token
        suffix: Characters stripped from the end of each token
        unique: Only keep the first occurrence of each token
        ignore_case: Lower case all tokens

    Returns:
        Tokens in order of appearance
    """
    tokens: list[str] = []
    seen: set[str] = set()
    for value in values:
        for token in value.split():
            if prefix:
                token = token.lstrip(prefix)
            if suffix:
                token = token.rstrip(suffix)
            if not token:
                continue
            if ignore_case:
                token = token.lower()
            if unique:
                if token in seen:
                    continue
                seen.add(token)
            tokens.append(token)
    return tokens


@beartype
def media_url_to_path(url: str) -> Path:
    """Convert a MEDIA_URL/RELATIVE_MEDIA_URL value to a path.

    `file:///home/user/video.mp4` -> `/home/user/video.mp4`
    `file:./video.mp4` and `./video.mp4` -> `video.mp4`
    """
    if url.startswith("file:"):
        parsed = urlparse(url)
        if parsed.netloc or url.startswith("file:/"):
            path = unquote(parsed.path)
            # Windows drive, e.g. /C:/Users/...
            if re.match(r"^/[A-Za-z]:", path):
                path = path[1:]
            return Path(path)
        return Path(unquote(url[len("file:"):]))
    return Path(url)


@beartype
def path_to_media_url(path: Path) -> str:
    """Absolute `file://` URL for a media path."""
    return path.resolve().as_uri()


class AnnotationDocument:
    """An ELAN-file as an ordered list of tiers.

    The underlying `pympi.Elan.Eaf` is kept as `eaf` for commands that write
    a modified copy. Call `reload()` after modifying it.
    """

    def __init__(self, eaf: Eaf, path: Path | None = None) -> None:
        self.eaf = eaf
        self.path = path
        self.tiers: list[Tier] = []
        self.reload()

    def reload(self) -> None:
        self._ts_order = {ts: i for i, ts in enumerate(self.eaf.timeslots)}
        ordered = sorted(self.eaf.tiers.items(), key=lambda item: item[1][3])
        self.tiers = [self._build_tier(tier_id) for tier_id, _ in ordered]

    def __len__(self) -> int:
        return len(self.tiers)

    @property
    def tier_ids(self) -> list[str]:
        return [t.tier_id for t in self.tiers]

    def get_tier(self, tier_id: str) -> Tier | None:
        for tier in self.tiers:
            if tier.tier_id == tier_id:
                return tier
        return None

    def parent_tier(self, tier_id: str) -> Tier | None:
        tier = self.get_tier(tier_id)
        if tier is None or tier.parent_id is None:
            return None
        return self.get_tier(tier.parent_id)

    def child_tiers(self, tier_id: str) -> list[Tier]:
        return [t for t in self.tiers if t.parent_id == tier_id]

    def is_tokenized(self, tier_id: str, recursive: bool = True) -> bool:
        """True if the tier, or optionally any of its ancestors, is tokenized."""
        seen: set[str] = set()
        tier = self.get_tier(tier_id)
        while tier is not None and tier.tier_id not in seen:
            if tier.tokenized:
                return True
            if not recursive:
                return False
            seen.add(tier.tier_id)
            tier = self.parent_tier(tier.tier_id)
        return False

    def find_annotation(self, annotation_id: str) -> Annotation | None:
        tier_id = self.eaf.annotations.get(annotation_id)
        tier = self.get_tier(tier_id) if tier_id is not None else None
        return tier.find(annotation_id) if tier is not None else None

    def main_annotation(self, annotation_id: str) -> Annotation | None:
        """Root alignable annotation that `annotation_id` refers to (or itself)."""
        annotation = self.find_annotation(annotation_id)
        seen: set[str] = set()
        while annotation is not None and annotation.ref_id is not None:
            if annotation.annotation_id in seen:
                return None
            seen.add(annotation.annotation_id)
            annotation = self.find_annotation(annotation.ref_id)
        return annotation

    def annotation_count(self) -> int:
        return sum(len(t) for t in self.tiers)

    def tokens(
        self,
        prefix: str | None = None,
        suffix: str | None = None,
        unique: bool = False,
        ignore_case: bool = False,
    ) -> list[str]:
        values = [a.value for t in self.tiers for a in t.annotations]
        return tokenize(values, prefix, suffix, unique, ignore_case)

    def media_links(self) -> list[MediaLink]:
        """Linked media with relative paths resolved against the ELAN-file directory."""
        links: list[MediaLink] = []
        base = self.path.parent if self.path is not None else None
        for descriptor in self.eaf.media_descriptors:
            absolute = media_url_to_path(descriptor.get("MEDIA_URL") or "")
            relative_url = descriptor.get("RELATIVE_MEDIA_URL")
            relative: Path | None = None
            if relative_url:
                relative = media_url_to_path(relative_url)
                if base is not None and not relative.is_absolute():
                    relative = base / relative
            links.append(MediaLink(absolute, relative, descriptor.get("MIME_TYPE") or ""))
        return links

    # Internals

    def _resolve_times(self, annotation_id: str) -> tuple[int | None, int | None]:
        seen: set[str] = set()
        aid = annotation_id
        while aid not in seen:
            seen.add(aid)
            tier_id = self.eaf.annotations.get(aid)
            if tier_id is None or tier_id not in self.eaf.tiers:
                break
            aligned, referring = self.eaf.tiers[tier_id][0], self.eaf.tiers[tier_id][1]
            if aid in aligned:
                begin, end = aligned[aid][0], aligned[aid][1]
                return self.eaf.timeslots.get(begin), self.eaf.timeslots.get(end)
            if aid in referring:
                aid = referring[aid][0]
                continue
            break
        return None, None

    def _build_tier(self, tier_id: str) -> Tier:
        aligned, referring, attributes, _ = self.eaf.tiers[tier_id]
        ling_type = attributes.get("LINGUISTIC_TYPE_REF") or ""
        constraint = self.eaf.linguistic_types.get(ling_type, {}).get("CONSTRAINTS")

        annotations: list[tuple[tuple[Any, ...], Annotation]] = []
        for aid, (begin, end, value, _) in aligned.items():
            start_ms = self.eaf.timeslots.get(begin)
            end_ms = self.eaf.timeslots.get(end)
            key = (start_ms is None, start_ms or 0, self._ts_order.get(begin, 0), 0)
            annotations.append((key, Annotation(aid, value or "", start_ms, end_ms, tier_id)))

        # Symbolic subdivisions form chains via their 'previous' annotation
        chain_index: dict[str, int] = {}
        by_parent: dict[str, list[str]] = {}
        for aid, (ref, _, _, _) in referring.items():
            by_parent.setdefault(ref, []).append(aid)
        for siblings in by_parent.values():
            previous_of = {aid: referring[aid][2] for aid in siblings}
            current: str | None = next((a for a in siblings if not previous_of[a]), None)
            index = 0
            while current is not None and current not in chain_index:
                chain_index[current] = index
                index += 1
                current = next((a for a in siblings if previous_of[a] == current), None)
            for aid in siblings:
                chain_index.setdefault(aid, index)
                index += 1

        for aid, (ref, value, _, _) in referring.items():
            start_ms, end_ms = self._resolve_times(aid)
            key = (start_ms is None, start_ms or 0, 0, chain_index[aid])
            annotations.append(
                (key, Annotation(aid, value or "", start_ms, end_ms, tier_id, ref_id=ref))
            )

        annotations.sort(key=lambda item: item[0])

        return Tier(
            tier_id=tier_id,
            parent_id=attributes.get("PARENT_REF") or None,
            linguistic_type=ling_type,
            participant=attributes.get("PARTICIPANT") or None,
            annotator=attributes.get("ANNOTATOR") or None,
            tokenized=constraint == TOKENIZED_CONSTRAINT,
            annotations=[a for _, a in annotations],
        )


@beartype
def load_eaf(path: Path) -> AnnotationDocument:
    """Parse an ELAN-file.

    Args:
        path: Path to the ELAN-file

    Returns:
        Parsed document

    Raises:
        DocumentError: If the file does not exist or can not be parsed
    """
    if path.is_dir():
        raise DocumentError(f"'{path}' is a directory")
    if not path.exists():
        raise DocumentError(f"ELAN-file not found: {path}")
    try:
        eaf = Eaf(str(path))
    except Exception as err:  # pympi raises a plain Exception on malformed XML
        raise DocumentError(f"Failed to parse '{path}': {err}") from err
    log.debug("parsed %s: %d tiers", path, len(eaf.tiers))
    return AnnotationDocument(eaf, path)


@beartype
def new_eaf() -> Eaf:
    """Empty ELAN-file without pympi's placeholder tier."""
    eaf = Eaf(author="elantools")
    if "default" in eaf.tiers:
        eaf.remove_tier("default")
    return eaf


@beartype
def write_eaf(eaf: Eaf, path: Path) -> bool:
    """Write ELAN-file, asking before overwriting.

    Returns:
        False if the user declined to overwrite an existing file
    """
    if not confirm_overwrite(path):
        return False
    eaf.to_file(str(path))
    return True


@beartype
def ensure_linguistic_type(
    eaf: Eaf,
    lingtype: str,
    constraint: str | None = None,
    time_alignable: bool = True,
) -> str:
    if lingtype not in eaf.linguistic_types:
        eaf.add_linguistic_type(lingtype, constraints=constraint, timealignable=time_alignable)
    return lingtype


@beartype
def add_tier(
    eaf: Eaf,
    tier_id: str,
    lingtype: str,
    parent: str | None = None,
    participant: str | None = None,
    annotator: str | None = None,
) -> str:
    if tier_id in eaf.tiers:
        raise DocumentError(f"Tier '{tier_id}' already exists")
    eaf.add_tier(tier_id, ling=lingtype, parent=parent, part=participant, ann=annotator)
    return tier_id


@beartype
def add_aligned_annotation(eaf: Eaf, tier_id: str, start: int | None, end: int | None, value: str) -> str:
    """Add a time-aligned annotation with new time slots.

    Returns:
        The new annotation ID
    """
    if start is not None and start < 0:
        raise DocumentError(f"Negative time value {start} ms in tier '{tier_id}'")
    begin_ts = eaf.generate_ts_id(start)
    end_ts = eaf.generate_ts_id(end)
    aid = eaf.generate_annotation_id()
    eaf.annotations[aid] = tier_id
    eaf.tiers[tier_id][0][aid] = (begin_ts, end_ts, value, None)
    return aid


@beartype
def add_ref_annotation(
    eaf: Eaf,
    tier_id: str,
    parent_id: str,
    value: str,
    previous: str | None = None,
) -> str:
    """Add a referring annotation pointing to `parent_id`.

    Returns:
        The new annotation ID
    """
    if parent_id not in eaf.annotations:
        raise DocumentError(f"No annotation with ID '{parent_id}' to refer to")
    aid = eaf.generate_annotation_id()
    eaf.annotations[aid] = tier_id
    eaf.tiers[tier_id][1][aid] = (parent_id, value, previous, None)
    return aid


@beartype
def remove_annotations(eaf: Eaf, annotation_ids: set[str]) -> int:
    """Remove annotations and everything referring to them.

    Returns:
        Number of annotations removed
    """
    doomed = set(annotation_ids)
    changed = True
    while changed:
        changed = False
        for tier in eaf.tiers.values():
            for aid, (ref, _, _, _) in tier[1].items():
                if ref in doomed and aid not in doomed:
                    doomed.add(aid)
                    changed = True

    removed = 0
    for tier in eaf.tiers.values():
        for aid in [a for a in tier[0] if a in doomed]:
            del tier[0][aid]
            removed += 1
        for aid in [a for a in tier[1] if a in doomed]:
            del tier[1][aid]
            removed += 1
    for aid in doomed:
        eaf.annotations.pop(aid, None)

    eaf.clean_time_slots()
    return removed


@beartype
def shift_timeslots(eaf: Eaf, shift: int) -> int:
    """Shift all time slot values, clamping at 0.

    Alignable annotations that collapse to zero length are removed.

    Returns:
        Number of annotations removed
    """
    for ts, value in eaf.timeslots.items():
        if value is not None:
            eaf.timeslots[ts] = max(0, value + shift)

    collapsed: set[str] = set()
    for tier in eaf.tiers.values():
        for aid, (begin, end, _, _) in tier[0].items():
            start_ms, end_ms = eaf.timeslots.get(begin), eaf.timeslots.get(end)
            if start_ms is not None and end_ms is not None and end_ms <= start_ms:
                collapsed.add(aid)

    if not collapsed:
        return 0
    return remove_annotations(eaf, collapsed)


@beartype
def add_media_link(eaf: Eaf, media: Path, base_dir: Path | None = None) -> dict[str, str]:
    """Link a media file, with a URL relative to `base_dir` (the ELAN-file directory) if set."""
    mime_type = mimetypes.guess_type(media.name)[0] or "unknown"
    descriptor = {"MEDIA_URL": path_to_media_url(media), "MIME_TYPE": mime_type}
    if base_dir is not None:
        relative = Path(os.path.relpath(media.resolve(), base_dir.resolve())).as_posix()
        descriptor["RELATIVE_MEDIA_URL"] = relative if relative.startswith("..") else f"./{relative}"
    eaf.media_descriptors.append(descriptor)
    return descriptor


@beartype
def rename_tier(eaf: Eaf, tier_id: str, new_id: str) -> None:
    """Rename a tier, updating child tiers and the annotation index."""
    if tier_id not in eaf.tiers:
        raise DocumentError(f"No tier with ID '{tier_id}'")
    if new_id in eaf.tiers:
        raise DocumentError(f"Tier '{new_id}' already exists")
    eaf.tiers[new_id] = eaf.tiers.pop(tier_id)
    eaf.tiers[new_id][2]["TIER_ID"] = new_id
    for _, _, attributes, _ in eaf.tiers.values():
        if attributes.get("PARENT_REF") == tier_id:
            attributes["PARENT_REF"] = new_id
    for aid, owner in eaf.annotations.items():
        if owner == tier_id:
            eaf.annotations[aid] = new_id


@beartype
def copy_linguistic_type(source: Eaf, target: Eaf, lingtype: str) -> None:
    """Copy a linguistic type and its constraint definition, unless already present."""
    if lingtype in target.linguistic_types or lingtype not in source.linguistic_types:
        return
    params = dict(source.linguistic_types[lingtype])
    constraint = params.get("CONSTRAINTS")
    if constraint and constraint not in target.constraints:
        target.constraints[constraint] = source.constraints.get(constraint, "")
    target.linguistic_types[lingtype] = params


@beartype
def timeslot_bounds(eaf: Eaf) -> dict[str, tuple[int | None, int | None]]:
    """Closest time value at or before, and at or after, each time slot.

    Slots without a value sit between slots with values in time order, so
    an annotation starting or ending at one can still be placed in time.
    """
    order = list(eaf.timeslots)
    before: dict[str, int | None] = {}
    last: int | None = None
    for ts in order:
        if eaf.timeslots[ts] is not None:
            last = eaf.timeslots[ts]
        before[ts] = last

    bounds: dict[str, tuple[int | None, int | None]] = {}
    last = None
    for ts in reversed(order):
        if eaf.timeslots[ts] is not None:
            last = eaf.timeslots[ts]
        bounds[ts] = (before[ts], last)
    return bounds
