"""Word/token listings, token distributions and n-gram frequencies.

Tokens are whitespace separated parts of annotation values. The 'strip'
option removes common prefixes (`#*_<{([-"'=`) and suffixes
(`#*_>})]-"'=.,:;!?`), e.g. brackets and punctuation, from each token.
"""

from __future__ import annotations

import re
from collections import Counter
from pathlib import Path

from beartype import beartype

from .config import COMMON_NGRAM_REMOVE, COMMON_PREFIXES, COMMON_SUFFIXES
from .eaf import AnnotationDocument, load_eaf, tokenize
from .errors import DocumentError, ElanToolsError
from .prompt import select_tier

NGRAM_SCOPES = ("annotation", "tier", "file")


@beartype
def token_distribution(
    tokens: list[str],
    alphabetical: bool = False,
    reverse: bool = False,
) -> list[tuple[str, int]]:
    """Count occurrences of each token.

    Args:
        tokens: Tokens, duplicates included
        alphabetical: Sort by token instead of count
        reverse: Reverse the sort order

    Returns:
        (token, count) pairs, by ascending count unless `alphabetical`
    """
    counts = Counter(tokens)
    if alphabetical:
        ordered = sorted(counts.items())
    else:
        ordered = sorted(counts.items(), key=lambda item: (item[1], item[0]))
    if reverse:
        ordered.reverse()
    return ordered


@beartype
def run_tokens(
    eaf_path: Path,
    prefix: str | None = None,
    suffix: str | None = None,
    strip: bool = False,
    unique: bool = False,
    ignore_case: bool = False,
    distribution: bool = False,
    alphabetical: bool = False,
    reverse: bool = False,
    select: bool = False,
) -> list[str]:
    """Entry point for the `tokens` command.

    Returns:
        Tokens in order of appearance
    """
    if eaf_path.is_dir():
        raise DocumentError(f"{eaf_path} is a directory.")

    if strip:
        prefix = f"{prefix or ''}{COMMON_PREFIXES}"
        suffix = f"{suffix or ''}{COMMON_SUFFIXES}"
    # Distributions count every occurrence
    if distribution:
        unique = False

    document = load_eaf(eaf_path)
    if select:
        tier = select_tier(document, reject_tokenized=False)
        tokens = tier.tokens(prefix, suffix, unique, ignore_case)
    else:
        tokens = document.tokens(prefix, suffix, unique, ignore_case)

    if distribution:
        for token, count in token_distribution(tokens, alphabetical, reverse):
            print(f"{count:>6}: {token}")
    else:
        print(", ".join(tokens))

    print("---")
    print(f"Count:          {len(tokens)} tokens")
    print(f"Unique only:    {unique}")
    print(f"Ignore case:    {ignore_case}")
    print(f"Strip prefixes: {prefix or 'None'}")
    print(f"Strip suffixes: {suffix or 'None'}")
    return tokens


@beartype
def ngrams(words: list[str], size: int) -> list[str]:
    """Space-joined n-grams, empty if there are fewer than `size` words."""
    if size < 1:
        raise ElanToolsError(f"Invalid n-gram size {size}")
    return [" ".join(words[i : i + size]) for i in range(len(words) - size + 1)]


@beartype
def removal_pattern(common: bool = False, custom: str | None = None) -> re.Pattern[str] | None:
    """Character class of everything to delete before n-gram generation."""
    chars = (COMMON_NGRAM_REMOVE if common else "") + (custom or "")
    if not chars:
        return None
    return re.compile(f"[{re.escape(chars)}]")


@beartype
def ngram_counts(
    document: AnnotationDocument,
    size: int,
    scope: str = "file",
    tier_id: str | None = None,
    remove: re.Pattern[str] | None = None,
    ignore_case: bool = False,
) -> Counter[str]:
    """Count n-grams in a document.

    Args:
        document: Document to count in
        size: Number of words per n-gram
        scope: 'annotation' (n-grams within each annotation), 'tier'
            (across annotation boundaries), or 'file' (all tiers, per tier)
        tier_id: Tier for 'annotation' and 'tier' scope
        remove: Characters deleted from values first
        ignore_case: Lower case all values

    Returns:
        n-gram counts
    """
    if scope not in NGRAM_SCOPES:
        raise ElanToolsError(
            f"'{scope}' is not a valid scope. Choose one of 'annotation', 'tier', 'file'."
        )

    if scope == "file":
        tiers = document.tiers
    else:
        tier = document.get_tier(tier_id or "")
        if tier is None:
            raise DocumentError(f"No tier with ID '{tier_id}'")
        tiers = [tier]

    counts: Counter[str] = Counter()
    for tier in tiers:
        values = [a.value for a in tier.annotations]
        if remove is not None:
            values = [remove.sub("", v) for v in values]
        if scope == "annotation":
            for value in values:
                counts.update(ngrams(tokenize([value], ignore_case=ignore_case), size))
        else:
            counts.update(ngrams(tokenize(values, ignore_case=ignore_case), size))
    return counts


@beartype
def run_ngram(
    eaf_path: Path,
    size: int = 2,
    scope: str = "annotation",
    remove_common: bool = False,
    remove_custom: str | None = None,
    ignore_case: bool = False,
) -> list[tuple[str, int]]:
    """Entry point for the `ngram` command.

    Returns:
        (n-gram, count) pairs by ascending count
    """
    if scope not in NGRAM_SCOPES:
        raise ElanToolsError(
            f"'{scope}' is not a valid scope. Choose one of 'annotation', 'tier', 'file'."
        )
    document = load_eaf(eaf_path)
    tier_id = None
    if scope != "file":
        tier_id = select_tier(document, reject_tokenized=False).tier_id

    counts = ngram_counts(
        document,
        size,
        scope,
        tier_id,
        removal_pattern(remove_common, remove_custom),
        ignore_case,
    )
    ordered = sorted(counts.items(), key=lambda item: (item[1], item[0]))

    if not ordered:
        print(f"No annotation of length {size} or greater for selected context.")
    for i, (ngram, count) in enumerate(ordered, start=1):
        print(f"{i:4}. {ngram:>40}: {count}")
    return ordered
