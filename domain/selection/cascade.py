"""Cascading selection updates over the keyword tree."""

import logging

from domain.selection.state import SelectionSet, TriState
from domain.tree.tree import KeywordTree

logger = logging.getLogger(__name__)


def _recompute(tree: KeywordTree, selected: set[str], node_id: str) -> None:
    # A node with children is selected iff all of its direct children are.
    child_ids = tree.child_ids(node_id)
    if not child_ids:
        return
    if all(c in selected for c in child_ids):
        selected.add(node_id)
    else:
        selected.discard(node_id)


def toggle(tree: KeywordTree, selection: SelectionSet, node_id: str, checked: bool) -> SelectionSet:
    """
    Set a node's selection and keep the whole set cascade-consistent.

    Downward, the node and every descendant take the new state. Upward, each
    ancestor is re-derived from its direct children, parent first.

    Args:
        tree: Current keyword tree
        selection: Selection before the toggle
        node_id: Node to toggle (any level)
        checked: Target state

    Returns:
        A new SelectionSet; `selection` is left untouched

    Raises:
        NodeNotFoundError: If `node_id` is not in the tree
    """
    affected = [node_id, *tree.descendant_ids(node_id)]
    selected = set(selection.ids)
    if checked:
        selected.update(affected)
    else:
        selected.difference_update(affected)

    for ancestor in tree.ancestor_ids(node_id):
        _recompute(tree, selected, ancestor)

    logger.debug("toggle %s -> %s (%d affected, %d selected)", node_id, checked, len(affected), len(selected))
    return SelectionSet(selected)


def reconcile(tree: KeywordTree, selection: SelectionSet, node_id: str) -> SelectionSet:
    """
    Re-derive a node and its ancestors after the node's children changed.

    Used after terms are appended to a Level2 node: new terms start unselected,
    so a previously selected Level2 node (and its Level1 parent) must drop out.
    """
    selected = set(selection.ids)
    for current in [node_id, *tree.ancestor_ids(node_id)]:
        _recompute(tree, selected, current)
    if selected == selection.ids:
        return selection
    return SelectionSet(selected)


def effective_state(tree: KeywordTree, selection: SelectionSet, node_id: str) -> TriState:
    """Read-time tri-state for `node_id`. Raises NodeNotFoundError for unknown ids."""
    tree.ref(node_id)
    return selection.effective_state(tree, node_id)
