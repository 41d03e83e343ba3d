"""
Selection state: sparse selected-id set with cascading toggles.

Tri-state (checked / unchecked / indeterminate) is never stored; it is
derived from the tree and the set on read.
"""

from domain.selection.cascade import effective_state, reconcile, toggle
from domain.selection.state import SelectionSet, TriState

__all__ = [
    "SelectionSet",
    "TriState",
    "toggle",
    "reconcile",
    "effective_state",
]
