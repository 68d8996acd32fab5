"""Print an overview of an ELAN-file.

`verbose` also prints the header: author, media, properties, linguistic
types and constraints. Optionally list all annotations in a selected tier.
"""

from __future__ import annotations

from pathlib import Path

from beartype import beartype

from .config import LARGE_TIER_THRESHOLD
from .eaf import Annotation, AnnotationDocument, load_eaf
from .errors import UserAbortError
from .files import confirm
from .prompt import format_tier_table, select_tier


def _time(value: int | None) -> str:
    return str(value) if value is not None else "<Timeslot not set>"


@beartype
def first_and_last(document: AnnotationDocument) -> tuple[Annotation | None, Annotation | None]:
    """Annotations with the earliest start and the latest end time."""
    timed = [a for t in document.tiers for a in t.annotations if a.has_times]
    if not timed:
        return None, None
    first = min(timed, key=lambda a: (a.start, a.end))
    last = max(timed, key=lambda a: (a.end, a.start))
    return first, last


@beartype
def format_header(document: AnnotationDocument) -> list[str]:
    eaf = document.eaf
    lines = [
        "[ General ]",
        f"   Author:      {eaf.adocument.get('AUTHOR', '')}",
        f"   Date:        {eaf.adocument.get('DATE', '')}",
        f"   EAF version: {eaf.adocument.get('VERSION', '')}",
        "[ Media ]",
    ]
    for i, media in enumerate(eaf.media_descriptors, start=1):
        lines.append(
            f"  {i:2}. {media.get('MEDIA_URL', '')}\n"
            f"      {media.get('RELATIVE_MEDIA_URL') or 'None'}\n"
            f"      {media.get('EXTRACTED_FROM') or 'None'}\n"
            f"      {media.get('MIME_TYPE', '')}"
        )
    lines.append("[ Properties ]")
    for i, (name, value) in enumerate(eaf.properties, start=1):
        lines.append(f"  {i:2}. {name:20}: {value}")
    lines.append("[ Linguistic Types ]")
    for i, (lt_id, params) in enumerate(eaf.linguistic_types.items(), start=1):
        lines.append(
            f"  {i:2}. '{lt_id}'\n"
            f"      Constraints:           {params.get('CONSTRAINTS') or 'NONE'}\n"
            f"      Controlled vocabulary: {params.get('CONTROLLED_VOCABULARY_REF') or 'NONE'}\n"
            f"      Graphic references:    {params.get('GRAPHIC_REFERENCES') or 'false'}\n"
            f"      Time alignable:        {params.get('TIME_ALIGNABLE') or 'false'}"
        )
    lines.append("[ Constraints ]")
    for i, (stereotype, description) in enumerate(eaf.constraints.items(), start=1):
        lines.append(f"  {i:2}. Description: {description}\n      Stereotype:  {stereotype}")
    return lines


@beartype
def format_summary(document: AnnotationDocument) -> list[str]:
    tiers = len(document.tiers)
    annotations = document.annotation_count()
    tokens = document.tokens()
    lines = [
        "---",
        f"  Tiers             | total:   {tiers}",
        f"  Annotations       | total:   {annotations}",
        f"  Annotations/tier  | average: {annotations / tiers if tiers else 0:.2f}",
    ]
    first, last = first_and_last(document)
    for label, annotation in (("First annotation ", first), ("Last annotation  ", last)):
        if annotation is None:
            continue
        lines.append(f"  {label} | value:   {annotation.value}")
        lines.append(f"                    | time:    {_time(annotation.start)} - {_time(annotation.end)} ms")
        lines.append(f"                    | tier:    {annotation.tier_id}")
    average = sum(len(t) for t in tokens) / len(tokens) if tokens else 0
    lines.append(f"  Words/tokens      | total:   {len(tokens)}")
    lines.append(f"  Word/token length | average: {average:.2f}")
    return lines


@beartype
def list_annotations(document: AnnotationDocument, large_tier: int = LARGE_TIER_THRESHOLD) -> None:
    tier = select_tier(document, reject_tokenized=False)
    if len(tier) > large_tier:
        if not confirm(f"The tier '{tier.tier_id}' has {len(tier)} annotations. List all?"):
            raise UserAbortError("Aborted process.")
    for i, annotation in enumerate(tier.annotations, start=1):
        if annotation.has_times:
            print(f"{i:5}. {annotation.start:8} ms - {annotation.end:8} ms '{annotation.value}'")
        else:
            print(f"{i:5}.{' ' * 27}'{annotation.value}'")


@beartype
def run_inspect(eaf_path: Path, annotations: bool = False, verbose: bool = False) -> None:
    """Entry point for the `inspect` command."""
    document = load_eaf(eaf_path)
    print(f"[{eaf_path}]")

    if annotations:
        list_annotations(document)
        return

    if verbose:
        for line in format_header(document):
            print(line)

    print("[ Tiers ]")
    for line in format_tier_table(document, id_header="Tier ID"):
        print(line)

    for line in format_summary(document):
        print(line)
