"""Merge supplementary LSI terms into one Level2 node."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from pydantic import BaseModel, Field

from domain.tree.builder import term_id
from domain.tree.models import LsiTerm
from domain.tree.tree import KeywordTree

logger = logging.getLogger(__name__)


class TermContext(BaseModel):
    """Everything the generation service needs to extend one Level2 node."""

    seed_keywords: str
    instructions: str = ""
    level1_keyword: str
    level1_category: str
    level2_keyword: str
    level2_stage: str
    existing_terms: list[str] = Field(default_factory=list)


@dataclass(frozen=True)
class MergeResult:
    tree: KeywordTree
    added_ids: tuple[str, ...]


def build_term_context(
    tree: KeywordTree,
    level2_id: str,
    *,
    seed_keywords: str,
    instructions: str = "",
) -> TermContext:
    """
    Assemble the augmentation context from a Level2 node and its Level1 parent.

    Raises:
        NodeNotFoundError: If the node does not exist
        InvalidNodeError: If the node is not a Level2 node
    """
    l2 = tree.level2(level2_id)
    l1 = tree.level1(tree.ancestor_ids(level2_id)[0])
    return TermContext(
        seed_keywords=seed_keywords,
        instructions=instructions,
        level1_keyword=l1.keyword,
        level1_category=l1.category.value,
        level2_keyword=l2.keyword,
        level2_stage=l2.stage,
        existing_terms=[t.text for t in l2.terms],
    )


def merge_terms(tree: KeywordTree, level2_id: str, candidates: Iterable[str]) -> MergeResult:
    """
    Append the candidates that are not already terms of the node.

    Candidates are whitespace-trimmed and blanks are dropped. Deduplication is
    exact and case-sensitive, against existing terms and within the batch.
    New terms continue the node's sequential ids.

    Args:
        tree: Current keyword tree
        level2_id: Target Level2 node
        candidates: Term strings returned by the generation service

    Returns:
        MergeResult with the new tree and the ids of the appended terms
    """
    l2 = tree.level2(level2_id)
    seen = {t.text for t in l2.terms}

    fresh: list[str] = []
    for raw in candidates:
        text = raw.strip()
        if not text or text in seen:
            continue
        seen.add(text)
        fresh.append(text)

    existing_count = len(l2.terms)
    added = [LsiTerm(id=term_id(level2_id, existing_count + k), text=text) for k, text in enumerate(fresh)]
    if not added:
        logger.info("No new terms for %s (all candidates were duplicates or blank)", level2_id)
        return MergeResult(tree=tree, added_ids=())

    logger.info("Merged %d new terms into %s (%d existing)", len(added), level2_id, existing_count)
    new_tree = tree.with_level2_terms(level2_id, [*l2.terms, *added])
    return MergeResult(tree=new_tree, added_ids=tuple(t.id for t in added))
