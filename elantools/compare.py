"""Compare the annotation values of two tiers side by side.

Two layouts:
    compact   annotations paired by index, time values next to each value
    timeline  annotations of both tiers interleaved by start time, requires
              every annotation to have time values
"""

from __future__ import annotations

from itertools import zip_longest
from pathlib import Path

from beartype import beartype

from .eaf import Annotation, Tier, load_eaf
from .errors import DocumentError
from .prompt import select_tier
from .text import truncate

DEFAULT_MAX_LENGTH = 50


def _time(value: int | None) -> str:
    return str(value) if value is not None else "NONE"


@beartype
def format_comparison_header(first: Tier, second: Tier, max_len: int, timeline: bool = False) -> list[str]:
    line_len = max_len * 2 + (30 if timeline else 48)
    width = max_len + (5 if timeline else 18)
    pad = 23 if timeline else 8
    rule = "." * line_len
    return [rule, f"  {first.tier_id:>{width}}{' ' * pad}{second.tier_id}", rule]


@beartype
def compact_rows(first: Tier, second: Tier, max_len: int) -> list[str]:
    """Pair annotations by position. The longer tier fills one side only."""
    rows: list[str] = []
    pairs = zip_longest(first.annotations, second.annotations)
    for i, (left, right) in enumerate(pairs, start=1):
        if left is not None:
            row = f"{_time(left.start):>8} - {_time(left.end):<8} {truncate(left.value, max_len):>{max_len}} |{i:04}|"
        else:
            row = f"{' ' * (max_len + 21)} |{i:04}|"
        if right is not None:
            row += f" {truncate(right.value, max_len):<{max_len}} {_time(right.start):>8} - {_time(right.end):<8}"
        rows.append(row)
    return rows


@beartype
def timeline_rows(first: Tier, second: Tier, max_len: int) -> list[str]:
    """Interleave both tiers by start time.

    Values of the first tier are printed to the left of the time values,
    values of the second tier to the right.

    Raises:
        DocumentError: If an annotation has no time values
    """
    tagged: list[tuple[int, Annotation]] = []
    for side, tier in enumerate((first, second)):
        for annotation in tier.annotations:
            if not annotation.has_times:
                raise DocumentError(f"Missing time value for annotation with ID '{annotation.annotation_id}'")
            tagged.append((side, annotation))
    tagged.sort(key=lambda item: item[1].start)

    rows: list[str] = []
    for i, (side, annotation) in enumerate(tagged, start=1):
        value = truncate(annotation.value, max_len)
        times = f"{annotation.start:8} - {annotation.end:<8}"
        if side == 0:
            rows.append(f"{i:04} | {value:>{max_len}} |{times}|")
        else:
            rows.append(f"{i:04} | {' ' * max_len} |{times}| {value:<{max_len}}")
    return rows


@beartype
def run_compare(eaf_path: Path, timeline: bool = False, max_len: int = DEFAULT_MAX_LENGTH) -> None:
    """Entry point for the `compare` command."""
    document = load_eaf(eaf_path)
    first = select_tier(document)
    second = select_tier(document)

    for line in format_comparison_header(first, second, max_len, timeline):
        print(line)
    rows = timeline_rows(first, second, max_len) if timeline else compact_rows(first, second, max_len)
    for row in rows:
        print(row)
