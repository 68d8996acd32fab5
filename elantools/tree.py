from __future__ import annotations

from pathlib import Path

from beartype import beartype

from .eaf import AnnotationDocument, load_eaf


@beartype
def tier_tree(document: AnnotationDocument) -> dict[str, list[str]]:
    """Map each tier ID to the sorted IDs of its child tiers."""
    tree: dict[str, list[str]] = {t.tier_id: [] for t in document.tiers}
    for tier in document.tiers:
        if tier.parent_id is not None and tier.parent_id in tree:
            tree[tier.parent_id].append(tier.tier_id)
    for children in tree.values():
        children.sort()
    return tree


@beartype
def format_tree(document: AnnotationDocument) -> list[str]:
    """Root tiers sorted by ID, each followed by its indented descendants.

    ```
    utterance
    ├─ translation
    ╰─ words
       ╰─ pos
    ```
    """
    tree = tier_tree(document)
    known = set(tree)
    roots = sorted(t.tier_id for t in document.tiers if t.parent_id is None or t.parent_id not in known)

    lines: list[str] = []
    visited: set[str] = set()

    def add_children(tier_id: str, depth: int) -> None:
        children = tree.get(tier_id, [])
        for i, child in enumerate(children):
            if child in visited:
                continue
            visited.add(child)
            branch = "╰─" if i == len(children) - 1 else "├─"
            lines.append(f"{' ' * (depth * 3)}{branch} {child}")
            add_children(child, depth + 1)

    for root in roots:
        visited.add(root)
        lines.append(root)
        add_children(root, 0)
    return lines


@beartype
def run_tree(eaf_path: Path) -> None:
    """Entry point for the `tree` command."""
    document = load_eaf(eaf_path)
    for line in format_tree(document):
        print(line)
