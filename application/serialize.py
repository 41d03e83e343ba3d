"""Tree snapshot and sub-project export utilities."""

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from application.constants import (
    CORE_USER_INTENT_KEY,
    MODEL_USED_KEY,
    SEED_KEYWORDS_KEY,
    SELECTED_KEY,
    TRANSLATIONS_KEY,
    TREE_KEY,
)
from domain.selection.state import SelectionSet
from domain.tree.tree import KeywordTree
from domain.versioning.models import SavedSubProject

logger = logging.getLogger(__name__)


def tree_to_payload(
    tree: KeywordTree,
    selection: SelectionSet | None = None,
    translations: Mapping[str, str] | None = None,
    *,
    core_user_intent: str = "",
    model_used: str | None = None,
    seed_keywords: str = "",
) -> dict[str, Any]:
    """JSON-ready view of the live workbench state."""
    return {
        SEED_KEYWORDS_KEY: seed_keywords,
        CORE_USER_INTENT_KEY: core_user_intent,
        MODEL_USED_KEY: model_used,
        TREE_KEY: [root.model_dump(mode="json") for root in tree.roots],
        SELECTED_KEY: list(selection or ()),
        TRANSLATIONS_KEY: dict(sorted((translations or {}).items())),
    }


def _write_json(path: Path, payload: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)
    return path


def write_tree_snapshot(path: Path, tree: KeywordTree, **kwargs: Any) -> Path:
    """Write the live tree (plus selection/translations) as JSON. See `tree_to_payload` for kwargs."""
    _write_json(path, tree_to_payload(tree, **kwargs))
    logger.info("Saved tree snapshot JSON: %s (%d nodes)", path, len(tree))
    return path


def write_subproject(path: Path, subproject: SavedSubProject) -> Path:
    _write_json(path, subproject.model_dump(mode="json"))
    logger.info("Saved sub-project JSON: %s", path)
    return path


def format_subproject_context(subproject: SavedSubProject) -> str:
    """
    Render a saved sub-project as the plain-text keyword context used for article drafting.

    Layout:
        Sub-Project: <name>
        Model Used: <model>

        --- Core Keyword ---
        Keyword: ...
        Type: ...
        Page Type: ...

          --- Sub-core Keyword ---
          Keyword: ...
          Type: ...
          LSI: a, b, c
    """
    lines = [f"Sub-Project: {subproject.name}", f"Model Used: {subproject.model_used}", ""]
    for l1 in subproject.pruned_hierarchy:
        lines += [
            "--- Core Keyword ---",
            f"Keyword: {l1.keyword}",
            f"Type: {l1.category.value}",
            f"Page Type: {l1.page_kind}",
            "",
        ]
        for l2 in l1.children:
            lines += [
                "  --- Sub-core Keyword ---",
                f"  Keyword: {l2.keyword}",
                f"  Type: {l2.stage}",
            ]
            if l2.terms:
                lines += [f"  LSI: {', '.join(t.text for t in l2.terms)}", ""]
    return "\n".join(lines).rstrip() + "\n"
