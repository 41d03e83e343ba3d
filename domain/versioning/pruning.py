"""Prune the keyword tree down to the selected subset."""

from collections.abc import Iterable, Mapping

from domain.selection.state import SelectionSet
from domain.tree.models import Level1Node, Level2Node
from domain.tree.tree import KeywordTree


def prune_hierarchy(tree: KeywordTree, selection: SelectionSet) -> tuple[Level1Node, ...]:
    """
    Keep only selected nodes and the ancestors needed to reach them.

    A term survives if selected. A Level2 node survives if selected or if any
    of its terms survive; a Level1 node likewise over its Level2 children.
    Surviving nodes keep their ids; the input tree is not modified.
    """
    pruned: list[Level1Node] = []
    for l1 in tree.roots:
        kept_children: list[Level2Node] = []
        for l2 in l1.children:
            kept_terms = tuple(t for t in l2.terms if t.id in selection)
            if l2.id in selection or kept_terms:
                kept_children.append(l2.model_copy(update={"terms": kept_terms}))
        if l1.id in selection or kept_children:
            pruned.append(l1.model_copy(update={"children": tuple(kept_children)}))
    return tuple(pruned)


def hierarchy_ids(hierarchy: Iterable[Level1Node]) -> set[str]:
    ids: set[str] = set()
    for l1 in hierarchy:
        ids.add(l1.id)
        for l2 in l1.children:
            ids.add(l2.id)
            ids.update(t.id for t in l2.terms)
    return ids


def restrict_translations(overlay: Mapping[str, str], retained_ids: Iterable[str]) -> dict[str, str]:
    """Copy the overlay entries whose node id was retained."""
    return {node_id: overlay[node_id] for node_id in retained_ids if node_id in overlay}
