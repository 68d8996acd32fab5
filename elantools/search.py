"""Find text in a single ELAN-file or in all ELAN-files below a directory.

Lists tier ID, annotation index (the row number in ELAN's grid view),
annotation ID and value for each match.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

from beartype import beartype

from .eaf import AnnotationDocument, load_eaf
from .errors import DocumentError, ElanToolsError
from .files import find_eaf_files
from .logging_utils import get_logger
from .text import truncate

log = get_logger(__name__)


@dataclass
class SearchMatch:
    index: int  # 1-based position in tier
    tier_id: str
    annotation_id: str
    value: str
    ref_id: str | None = None


@dataclass
class SearchSummary:
    """Totals for a directory search."""

    matches: int = 0
    files_with_matches: int = 0
    files_searched: int = 0
    parse_errors: dict[str, list[Path]] = field(default_factory=dict)


@beartype
def compile_pattern(regex: str, ignore_case: bool = False) -> re.Pattern[str]:
    try:
        return re.compile(regex, re.IGNORECASE if ignore_case else 0)
    except re.error as err:
        raise ElanToolsError(f"'{regex}' is not a valid regular expression: {err}") from err


@beartype
def query(
    document: AnnotationDocument,
    pattern: str | None = None,
    regex: re.Pattern[str] | None = None,
    ignore_case: bool = False,
) -> list[SearchMatch]:
    """Annotations containing a substring or matching a regular expression.

    Args:
        document: Document to search
        pattern: Substring to find
        regex: Compiled pattern, used instead of `pattern` if set
        ignore_case: Case-insensitive substring search

    Returns:
        Matches in tier and annotation order
    """
    if pattern is None and regex is None:
        raise ElanToolsError("No search pattern provided.")

    needle = pattern.lower() if pattern is not None and ignore_case else pattern
    matches: list[SearchMatch] = []
    for tier in document.tiers:
        for i, annotation in enumerate(tier.annotations, start=1):
            if regex is not None:
                found = regex.search(annotation.value) is not None
            else:
                haystack = annotation.value.lower() if ignore_case else annotation.value
                found = needle in haystack
            if found:
                matches.append(
                    SearchMatch(i, tier.tier_id, annotation.annotation_id, annotation.value, annotation.ref_id)
                )
    return matches


@beartype
def format_matches(
    document: AnnotationDocument,
    matches: list[SearchMatch],
    title: str,
    context: bool = False,
) -> list[str]:
    lines = [f"╭─[{title}]", "│     Tier          Index / ID       Value"]
    for i, match in enumerate(matches, start=1):
        if context:
            main = document.main_annotation(match.annotation_id)
            parent = document.parent_tier(match.tier_id)
            if parent is not None and match.ref_id is not None:
                ref = document.find_annotation(match.ref_id)
                lines.append(f"│     {parent.tier_id:10} [PARENT] {ref.value if ref else 'None'}")
            elif main is not None and main.annotation_id != match.annotation_id:
                lines.append(f"│{' ' * 29}MAIN   {main.value}")
        lines.append(
            f"│ {i:2}. {truncate(match.tier_id, 10):10}  {match.index:>7} / {match.annotation_id:<8} {match.value}"
        )
    lines.append("╰────")
    return lines


def _display(path: Path, full_path: bool) -> str:
    return str(path) if full_path else path.name


@beartype
def search_file(
    eaf_path: Path,
    pattern: str | None = None,
    regex: re.Pattern[str] | None = None,
    ignore_case: bool = False,
    context: bool = False,
    full_path: bool = False,
    verbose: bool = False,
) -> list[SearchMatch]:
    if eaf_path.is_dir():
        raise DocumentError(f"{eaf_path} is a directory. Try '--dir <DIR>'.")

    document = load_eaf(eaf_path)
    matches = query(document, pattern, regex, ignore_case)
    title = _display(eaf_path, full_path)
    if matches:
        for line in format_matches(document, matches, title, context):
            print(line)
    elif verbose:
        print(f"╭─[{title}]")
        print("│ No matches")
        print("╰────")
    return matches


@beartype
def search_directory(
    directory: Path,
    pattern: str | None = None,
    regex: re.Pattern[str] | None = None,
    ignore_case: bool = False,
    context: bool = False,
    full_path: bool = False,
    verbose: bool = False,
) -> SearchSummary:
    """Search all ELAN-files below a directory, collecting parse errors."""
    if directory.is_file():
        raise DocumentError(f"{directory} is a file. Try '--eaf'.")

    summary = SearchSummary()
    for path in find_eaf_files(directory):
        summary.files_searched += 1
        title = _display(path, full_path)
        try:
            document = load_eaf(path)
        except DocumentError as err:
            if verbose:
                print(f"╭─[{summary.files_searched:4}. {title}]")
                print(f"│ (!) {err}")
                print("╰────")
            summary.parse_errors.setdefault(str(err.__cause__ or err), []).append(path)
            continue

        matches = query(document, pattern, regex, ignore_case)
        summary.matches += len(matches)
        if matches:
            summary.files_with_matches += 1
            numbered = f"{summary.files_with_matches}. {title}"
            for line in format_matches(document, matches, numbered, context):
                print(line)
        elif verbose:
            print(f"╭─[{summary.files_searched:4}. {title}]")
            print("│ No matches")
            print("╰────")

    done = (
        f"Done. Found {summary.matches} matches in {summary.files_with_matches} files. "
        f"Searched {summary.files_searched} files."
    )
    if not summary.parse_errors:
        print(f"{done} No errors.")
    else:
        print(done)
        print("\nSome files failed to parse due to errors:")
        for message, paths in summary.parse_errors.items():
            print(f"[ERR: {message}]")
            for path in paths:
                print(f"  {path}")
    return summary


@beartype
def run_search(
    eaf_path: Path | None = None,
    directory: Path | None = None,
    pattern: str | None = None,
    regex: str | None = None,
    ignore_case: bool = False,
    context: bool = False,
    full_path: bool = False,
    verbose: bool = False,
) -> int:
    """Entry point for the `search` command.

    Returns:
        Total number of matches
    """
    compiled = compile_pattern(regex, ignore_case) if regex is not None else None
    total = 0
    if eaf_path is not None:
        total += len(search_file(eaf_path, pattern, compiled, ignore_case, context, full_path, verbose))
    if directory is not None:
        total += search_directory(directory, pattern, compiled, ignore_case, context, full_path, verbose).matches
    return total
