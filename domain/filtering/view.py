"""Read-only filtered views of the keyword tree."""

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from domain.taxonomy.normalizer import KeywordTaxonomy
from domain.tree.models import Category, Level1Node, Level2Node
from domain.tree.tree import KeywordTree


class FilterCriteria(BaseModel):
    """Empty (None or "") fields do not constrain the view."""

    model_config = ConfigDict(frozen=True)

    category: Category | None = None
    page_kind: str | None = None
    stage_prefix: str | None = None

    @field_validator("category", mode="before")
    @classmethod
    def _blank_category_is_unset(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def is_empty(self) -> bool:
        return not (self.category or self.page_kind or self.stage_prefix)


def _stage_matches(node: Level2Node, stage_prefix: str) -> bool:
    # Localized labels such as "信任型 (Trust)" match through their canonical stage.
    if node.stage.startswith(stage_prefix):
        return True
    kind = node.stage_kind
    return kind is not None and kind.value == stage_prefix


def apply_filter(
    tree: KeywordTree,
    criteria: FilterCriteria,
    taxonomy: KeywordTaxonomy | None = None,
) -> KeywordTree:
    """
    Derive a filtered tree without touching the input.

    Level2 nodes survive when their stage label starts with `stage_prefix`
    (labels carry qualifiers such as "Decision (compare options)"), or when the
    prefix names the label's canonical stage. Level1 nodes survive when category
    and normalized page kind match and at least one Level2 child is left.
    Retained nodes keep their identifiers.

    Args:
        tree: Live keyword tree (never mutated)
        criteria: Filter settings
        taxonomy: Page-kind normalization table

    Returns:
        A KeywordTree; the input tree itself when `criteria` is empty
    """
    if criteria.is_empty:
        return tree

    taxonomy = taxonomy or KeywordTaxonomy()
    stage_prefix = criteria.stage_prefix or ""
    page_kind = taxonomy.normalize_page_kind(criteria.page_kind)

    roots: list[Level1Node] = []
    for l1 in tree.roots:
        if criteria.category and l1.category != criteria.category:
            continue
        if page_kind and taxonomy.normalize_page_kind(l1.page_kind) != page_kind:
            continue
        children = tuple(c for c in l1.children if _stage_matches(c, stage_prefix))
        if not children:
            continue
        roots.append(l1 if len(children) == len(l1.children) else l1.model_copy(update={"children": children}))

    return KeywordTree(roots)
