"""Sparse selection set and read-time tri-state."""

from collections.abc import Iterable, Iterator
from enum import Enum

from domain.tree.tree import KeywordTree


class TriState(str, Enum):
    CHECKED = "checked"
    UNCHECKED = "unchecked"
    INDETERMINATE = "indeterminate"


class SelectionSet:
    """
    Immutable set of fully selected node ids.

    Only selected ids are stored. Unchecked and indeterminate are both
    represented by absence; the distinction is computed on read by
    `effective_state`. Every mutator returns a new instance.
    """

    __slots__ = ("_ids",)

    def __init__(self, ids: Iterable[str] = ()) -> None:
        self._ids: frozenset[str] = frozenset(ids)

    @property
    def ids(self) -> frozenset[str]:
        return self._ids

    def select(self, *node_ids: str) -> "SelectionSet":
        return SelectionSet(self._ids.union(node_ids))

    def deselect(self, *node_ids: str) -> "SelectionSet":
        return SelectionSet(self._ids.difference(node_ids))

    def restrict_to(self, tree: KeywordTree) -> "SelectionSet":
        """Drop ids that no longer address a node in `tree`."""
        return SelectionSet(i for i in self._ids if i in tree)

    def effective_state(self, tree: KeywordTree, node_id: str) -> TriState:
        """
        Display state of a node.

        checked: the node itself is in the set.
        indeterminate: not in the set, but some descendant at any depth is.
        unchecked: otherwise.
        """
        if node_id in self._ids:
            return TriState.CHECKED
        if any(d in self._ids for d in tree.descendant_ids(node_id)):
            return TriState.INDETERMINATE
        return TriState.UNCHECKED

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._ids))

    def __bool__(self) -> bool:
        return bool(self._ids)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SelectionSet):
            return NotImplemented
        return self._ids == other._ids

    def __hash__(self) -> int:
        return hash(self._ids)

    def __repr__(self) -> str:
        return f"SelectionSet({sorted(self._ids)!r})"
