"""Build the addressable keyword tree from raw generation output."""

import logging
from collections.abc import Sequence

from domain.errors import MalformedResponseError
from domain.schemas import KeywordMapResponse, RawLevel1
from domain.taxonomy.normalizer import KeywordTaxonomy
from domain.tree.models import Level1Node, Level2Node, LsiTerm
from domain.tree.tree import KeywordTree

logger = logging.getLogger(__name__)


def level1_id(index: int) -> str:
    return f"l1-{index}"


def level2_id(parent_id: str, index: int) -> str:
    return f"{parent_id}-l2-{index}"


def term_id(parent_id: str, index: int) -> str:
    return f"{parent_id}-lsi-{index}"


def build_tree(
    raw: KeywordMapResponse | Sequence[RawLevel1],
    taxonomy: KeywordTaxonomy | None = None,
) -> KeywordTree:
    """
    Convert a raw, id-less keyword hierarchy into a KeywordTree.

    Identifiers come from structural position only (index within parent), so
    identical generation output always yields identical identifiers.

    Args:
        raw: Parsed hierarchy response, or its list of Level1 entries
        taxonomy: Label tables used to resolve category aliases

    Returns:
        KeywordTree

    Raises:
        MalformedResponseError: If a Level1 category cannot be resolved
    """
    taxonomy = taxonomy or KeywordTaxonomy()
    entries = raw.keyword_hierarchy if isinstance(raw, KeywordMapResponse) else list(raw)

    roots: list[Level1Node] = []
    for i, raw_l1 in enumerate(entries):
        l1_id = level1_id(i)
        try:
            category = taxonomy.normalize_category(raw_l1.category)
        except ValueError as e:
            raise MalformedResponseError(f"Level1 entry {i} ({raw_l1.keyword!r}): {e}") from e

        children: list[Level2Node] = []
        for j, raw_l2 in enumerate(raw_l1.children):
            l2_id = level2_id(l1_id, j)
            terms = tuple(LsiTerm(id=term_id(l2_id, k), text=text) for k, text in enumerate(raw_l2.terms))
            children.append(Level2Node(id=l2_id, keyword=raw_l2.keyword, stage=raw_l2.stage, terms=terms))

        roots.append(
            Level1Node(
                id=l1_id,
                keyword=raw_l1.keyword,
                category=category,
                page_kind=raw_l1.page_kind,
                children=tuple(children),
            )
        )

    tree = KeywordTree(roots)
    logger.debug("Built keyword tree: %d level1 nodes, %d nodes total", len(roots), len(tree))
    return tree
