"""Merge two ELAN-files.

Tiers that only exist in the second file are copied over. Tiers that exist
in both are combined. Alignable annotations without time values are
discarded. Overlapping annotations in a combined tier abort the merge,
unless they are joined into a single annotation.
"""

from __future__ import annotations

import copy
from pathlib import Path

from beartype import beartype
from pympi.Elan import Eaf  # type: ignore[import-untyped]

from .eaf import (
    AnnotationDocument,
    add_aligned_annotation,
    add_ref_annotation,
    copy_linguistic_type,
    load_eaf,
    remove_annotations,
    write_eaf,
)
from .errors import MergeError
from .logging_utils import get_logger

log = get_logger(__name__)


def _untimed(eaf: Eaf) -> set[str]:
    untimed: set[str] = set()
    for aligned, _, _, _ in eaf.tiers.values():
        for aid, (begin, end, _, _) in aligned.items():
            if eaf.timeslots.get(begin) is None or eaf.timeslots.get(end) is None:
                untimed.add(aid)
    return untimed


def _tier_order(eaf: Eaf) -> list[str]:
    """Tier IDs with parents before children."""
    ordered: list[str] = []
    pending = sorted(eaf.tiers, key=lambda t: eaf.tiers[t][3])
    while pending:
        remaining = []
        for tier_id in pending:
            parent = eaf.tiers[tier_id][2].get("PARENT_REF")
            if parent is None or parent in ordered or parent not in eaf.tiers:
                ordered.append(tier_id)
            else:
                remaining.append(tier_id)
        if len(remaining) == len(pending):
            # Parent cycle, keep document order
            ordered.extend(remaining)
            break
        pending = remaining
    return ordered


def _join(merged: Eaf, tier_id: str, aid: str, start: int, end: int, value: str) -> None:
    """Extend an annotation to also cover `start`-`end` and append `value`."""
    begin_ts, end_ts, old_value, svg = merged.tiers[tier_id][0][aid]
    old_start, old_end = merged.timeslots[begin_ts], merged.timeslots[end_ts]
    # Time slots may be shared with other annotations
    new_begin = merged.generate_ts_id(min(start, old_start))
    new_end = merged.generate_ts_id(max(end, old_end))
    joined = f"{old_value} {value}" if old_value and value else (old_value or value)
    merged.tiers[tier_id][0][aid] = (new_begin, new_end, joined, svg)


@beartype
def merge_eafs(first: Eaf, second: Eaf, join: bool = False) -> Eaf:
    """Merge `second` into a copy of `first`.

    Args:
        first: Base document, left unchanged
        second: Document merged into the base
        join: Join overlapping annotations instead of failing

    Returns:
        Merged document

    Raises:
        MergeError: On overlapping annotations in a combined tier, unless join is set
    """
    merged = copy.deepcopy(first)
    remove_annotations(merged, _untimed(merged))
    dropped = _untimed(second)

    # second file annotation ID -> merged annotation ID
    id_map: dict[str, str] = {}
    ref_queue: list[tuple[str, str, tuple[str, str, str | None, str | None]]] = []

    for tier_id in _tier_order(second):
        aligned, referring, attributes, _ = second.tiers[tier_id]
        combined = tier_id in merged.tiers
        if not combined:
            copy_linguistic_type(second, merged, attributes.get("LINGUISTIC_TYPE_REF", ""))
            merged.add_tier(tier_id, tier_dict=dict(attributes))

        existing = [
            (aid, merged.timeslots[b], merged.timeslots[e])
            for aid, (b, e, _, _) in merged.tiers[tier_id][0].items()
        ]

        for aid, (begin, end, value, _) in aligned.items():
            if aid in dropped:
                continue
            start_ms, end_ms = second.timeslots[begin], second.timeslots[end]

            overlap = next(
                (e for e in existing if combined and e[1] < end_ms and start_ms < e[2]),
                None,
            )
            if overlap is None:
                new_aid = add_aligned_annotation(merged, tier_id, start_ms, end_ms, value or "")
                existing.append((new_aid, start_ms, end_ms))
                id_map[aid] = new_aid
                continue

            if not join:
                raise MergeError(
                    f"Overlapping annotations in tier '{tier_id}': "
                    f"{overlap[1]}-{overlap[2]} ms and {start_ms}-{end_ms} ms"
                )
            _join(merged, tier_id, overlap[0], start_ms, end_ms, value or "")
            index = existing.index(overlap)
            existing[index] = (overlap[0], min(start_ms, overlap[1]), max(end_ms, overlap[2]))
            id_map[aid] = overlap[0]

        for aid, params in referring.items():
            ref_queue.append((tier_id, aid, params))

    # Referring annotations can only be added once what they refer to exists
    while ref_queue:
        remaining = []
        for tier_id, aid, (ref, value, previous, _) in ref_queue:
            if ref in id_map:
                id_map[aid] = add_ref_annotation(
                    merged, tier_id, id_map[ref], value or "", id_map.get(previous or "")
                )
            elif ref in second.annotations and ref not in dropped:
                remaining.append((tier_id, aid, (ref, value, previous, None)))
        if len(remaining) == len(ref_queue):
            log.warning("%d referring annotations without a parent discarded", len(remaining))
            break
        ref_queue = remaining

    known = {d.get("MEDIA_URL") for d in merged.media_descriptors}
    for descriptor in second.media_descriptors:
        if descriptor.get("MEDIA_URL") not in known:
            merged.media_descriptors.append(dict(descriptor))
            known.add(descriptor.get("MEDIA_URL"))

    merged.clean_time_slots()
    return merged


@beartype
def merged_path(first: Path, second: Path) -> Path:
    """`<dir of first>/<stem1>_<stem2>_merged.eaf`"""
    return first.parent / f"{first.stem}_{second.stem}_merged.eaf"


@beartype
def run_merge(paths: list[Path], join: bool = False) -> Path | None:
    """Entry point for the `merge` command."""
    if len(paths) != 2:
        raise MergeError("Please specify two ELAN-files.")

    documents: list[AnnotationDocument] = [load_eaf(p) for p in paths]
    merged = merge_eafs(documents[0].eaf, documents[1].eaf, join=join)

    out_path = merged_path(paths[0], paths[1])
    if not write_eaf(merged, out_path):
        print("Write to file aborted by user")
        return None

    print(f"Merged {len(merged.annotations)} annotations in {len(merged.tiers)} tiers")
    print(f"Wrote '{out_path}'")
    return out_path
