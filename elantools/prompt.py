"""Interactive selection of tiers and annotations on stdin.

Selections loop until a valid 1-based index is entered. EOF on stdin raises
`EOFError`, which is fatal at the command line.
"""

from __future__ import annotations

from beartype import beartype

from .eaf import Annotation, AnnotationDocument, Tier
from .text import truncate


@beartype
def format_tier_table(document: AnnotationDocument, id_header: str = "ID") -> list[str]:
    """Numbered tier overview, one line per tier plus a header line."""
    lines = [
        f"      {id_header:21}Parent               Tokenized  Annotations  "
        "Tokens unique/total  Participant     Annotator       Start of first annotation"
    ]
    for i, tier in enumerate(document.tiers, start=1):
        unique = len(tier.tokens(unique=True, ignore_case=True))
        total = len(tier.tokens())
        first = (
            f"'{truncate(tier.annotations[0].value, 30)} ...'"
            if tier.annotations
            else "[empty]"
        )
        lines.append(
            f"  {i:2}. {truncate(tier.tier_id, 20):21}"
            f"{truncate(tier.parent_id or 'None', 20):21}"
            f"{str(tier.tokenized):5}      {len(tier):>9}     {unique:>6} / {total:<6}    "
            f"{truncate(tier.participant or 'None', 15):15} "
            f"{truncate(tier.annotator or 'None', 15):15} {first}"
        )
    return lines


@beartype
def format_annotation_line(index: int, annotation: Annotation) -> str:
    if annotation.start is not None and annotation.end is not None:
        return (
            f"{index:3}. [{annotation.end - annotation.start:>8}ms | "
            f"{annotation.start:>8}-{annotation.end:<8}ms] {annotation.value}"
        )
    return f"{index:3}. [NO TIMESTAMPS] {annotation.value}"


def _read_index() -> int | None:
    """Read one line, None if it is not a number."""
    line = input("> ").strip()
    try:
        return int(line)
    except ValueError:
        print("(!) Not a number.")
        return None


@beartype
def select_tier(document: AnnotationDocument, reject_tokenized: bool = False) -> Tier:
    """List tiers and let the user pick one.

    Args:
        document: Document to select from
        reject_tokenized: Refuse tiers that are tokenized, or have a tokenized ancestor

    Returns:
        The selected tier
    """
    print("Select tier:")
    for line in format_tier_table(document):
        print(line)

    while True:
        index = _read_index()
        if index is None:
            continue
        if not 1 <= index <= len(document.tiers):
            print("(!) No such tier.")
            continue
        tier = document.tiers[index - 1]
        if reject_tokenized and document.is_tokenized(tier.tier_id, recursive=True):
            print(f"(!) '{tier.tier_id}' or one of its parents is tokenized.")
            continue
        return tier


@beartype
def select_annotation(tier: Tier, require_times: bool = True) -> Annotation:
    """List annotations in a tier and let the user pick one.

    Args:
        tier: Tier to select from
        require_times: Refuse annotations without resolved time values

    Returns:
        The selected annotation
    """
    print(f"Select annotation in '{tier.tier_id}' ({len(tier)} annotations):")
    for i, annotation in enumerate(tier.annotations, start=1):
        print(format_annotation_line(i, annotation))

    while True:
        index = _read_index()
        if index is None:
            continue
        if not 1 <= index <= len(tier.annotations):
            print("(!) No such annotation.")
            continue
        annotation = tier.annotations[index - 1]
        if require_times and not annotation.has_times:
            print("(!) Annotation has no timestamp.")
            continue
        return annotation
