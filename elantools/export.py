from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any

from beartype import beartype

from .eaf import AnnotationDocument, load_eaf
from .files import write_file


@beartype
def document_to_dict(document: AnnotationDocument, simple: bool = False) -> dict[str, Any]:
    """JSON-serializable representation of a document.

    Args:
        document: Document to export
        simple: Only tiers with annotation ID, value, start and end

    Returns:
        Dictionary with a 'tiers' list, plus header data unless `simple`
    """
    if simple:
        return {
            "tiers": [
                {
                    "tier_id": tier.tier_id,
                    "annotations": [
                        {
                            "annotation_id": a.annotation_id,
                            "value": a.value,
                            "start": a.start,
                            "end": a.end,
                        }
                        for a in tier.annotations
                    ],
                }
                for tier in document.tiers
            ]
        }

    eaf = document.eaf
    return {
        "author": eaf.adocument.get("AUTHOR", ""),
        "date": eaf.adocument.get("DATE", ""),
        "version": eaf.adocument.get("VERSION", ""),
        "header": {k: v for k, v in eaf.header.items() if v is not None},
        "media": [{k: v for k, v in d.items() if v is not None} for d in eaf.media_descriptors],
        "properties": [list(p) for p in eaf.properties],
        "linguistic_types": [
            {k: v for k, v in params.items() if v is not None}
            for params in eaf.linguistic_types.values()
        ],
        "tiers": [asdict(tier) for tier in document.tiers],
    }


@beartype
def run_json(eaf_path: Path, simple: bool = False) -> Path | None:
    """Entry point for the `json` command.

    Returns:
        Path to `<stem>.json`, None if the user declined to overwrite it
    """
    document = load_eaf(eaf_path)
    content = json.dumps(document_to_dict(document, simple), indent=2, ensure_ascii=False)
    json_path = eaf_path.with_suffix(".json")
    if not write_file(content, json_path):
        print("Write to file aborted by user")
        return None
    print(f"Wrote '{json_path}'")
    return json_path
