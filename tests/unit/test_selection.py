import itertools

import pytest

from domain.errors import NodeNotFoundError
from domain.selection import SelectionSet, TriState, effective_state, reconcile, toggle
from domain.tree import KeywordTree, NodeLevel


def _assert_upward_consistent(tree: KeywordTree, selection: SelectionSet) -> None:
    for node_id in tree:
        if tree.level_of(node_id) is NodeLevel.TERM:
            continue
        children = tree.child_ids(node_id)
        if not children:
            continue
        assert (node_id in selection) == all(c in selection for c in children), node_id


def test_level1_toggle_cascades_down(tree: KeywordTree) -> None:
    sel = toggle(tree, SelectionSet(), "l1-0", True)
    assert set(sel) == {"l1-0", *tree.descendant_ids("l1-0")}

    sel = toggle(tree, sel, "l1-0", False)
    assert len(sel) == 0


def test_level2_toggle_cascades_to_terms_only(tree: KeywordTree) -> None:
    sel = toggle(tree, SelectionSet(), "l1-0-l2-1", True)
    assert set(sel) == {"l1-0-l2-1", "l1-0-l2-1-lsi-0", "l1-0-l2-1-lsi-1"}
    assert effective_state(tree, sel, "l1-0") is TriState.INDETERMINATE


def test_selecting_all_terms_selects_ancestors(tree: KeywordTree) -> None:
    sel = SelectionSet()
    for term in tree.child_ids("l1-1-l2-0"):
        sel = toggle(tree, sel, term, True)
    assert "l1-1-l2-0" in sel
    # B has a single sub-core keyword, so it becomes fully selected too
    assert "l1-1" in sel
    assert effective_state(tree, sel, "l1-1") is TriState.CHECKED


def test_deselecting_one_term_unchecks_ancestors(tree: KeywordTree) -> None:
    sel = toggle(tree, SelectionSet(), "l1-0", True)
    sel = toggle(tree, sel, "l1-0-l2-0-lsi-1", False)
    assert "l1-0-l2-0" not in sel
    assert "l1-0" not in sel
    assert "l1-0-l2-1" in sel
    assert effective_state(tree, sel, "l1-0-l2-0") is TriState.INDETERMINATE
    assert effective_state(tree, sel, "l1-0") is TriState.INDETERMINATE
    assert effective_state(tree, sel, "l1-1") is TriState.UNCHECKED


@pytest.mark.parametrize("checked", [True, False])
def test_toggle_is_idempotent(tree: KeywordTree, checked: bool) -> None:
    start = toggle(tree, SelectionSet(), "l1-0-l2-0-lsi-0", True)
    for node_id in tree:
        once = toggle(tree, start, node_id, checked)
        twice = toggle(tree, once, node_id, checked)
        assert once == twice, node_id


def test_upward_consistency_after_any_toggle_sequence(tree: KeywordTree) -> None:
    ids = list(tree)
    sel = SelectionSet()
    for node_id, checked in zip(ids * 3, itertools.cycle([True, True, False])):
        sel = toggle(tree, sel, node_id, checked)
        _assert_upward_consistent(tree, sel)


def test_set_is_literally_empty_when_nothing_is_fully_selected(tree: KeywordTree) -> None:
    sel = toggle(tree, SelectionSet(), "l1-0", True)
    sel = toggle(tree, sel, "l1-1-l2-0-lsi-0", True)
    sel = toggle(tree, sel, "l1-0-l2-1", False)
    sel = toggle(tree, sel, "l1-0-l2-0", False)
    sel = toggle(tree, sel, "l1-1-l2-0-lsi-0", False)
    assert len(sel) == 0
    assert sel.ids == frozenset()
    assert all(effective_state(tree, sel, n) is TriState.UNCHECKED for n in tree)


def test_toggle_never_mutates_input(tree: KeywordTree) -> None:
    before = SelectionSet(["l1-0-l2-0-lsi-0"])
    after = toggle(tree, before, "l1-0", True)
    assert before.ids == frozenset({"l1-0-l2-0-lsi-0"})
    assert after is not before


def test_unknown_node_raises(tree: KeywordTree) -> None:
    with pytest.raises(NodeNotFoundError):
        toggle(tree, SelectionSet(), "l1-7", True)
    with pytest.raises(NodeNotFoundError):
        effective_state(tree, SelectionSet(), "nope")


def test_reconcile_drops_stale_ancestors_after_terms_appended(tree: KeywordTree) -> None:
    sel = toggle(tree, SelectionSet(), "l1-1", True)
    l2 = tree.level2("l1-1-l2-0")
    grown = tree.with_level2_terms("l1-1-l2-0", [*l2.terms, l2.terms[0].model_copy(update={"id": "l1-1-l2-0-lsi-2"})])

    fixed = reconcile(grown, sel, "l1-1-l2-0")
    assert "l1-1-l2-0" not in fixed
    assert "l1-1" not in fixed
    assert "l1-1-l2-0-lsi-0" in fixed
    assert effective_state(grown, fixed, "l1-1") is TriState.INDETERMINATE


def test_reconcile_returns_same_object_when_consistent(tree: KeywordTree) -> None:
    sel = toggle(tree, SelectionSet(), "l1-0-l2-0", True)
    assert reconcile(tree, sel, "l1-0-l2-0") is sel


def test_selection_set_helpers(tree: KeywordTree) -> None:
    sel = SelectionSet().select("b", "a").deselect("b")
    assert list(sel) == ["a"]
    assert bool(SelectionSet()) is False
    assert SelectionSet(["l1-0", "gone"]).restrict_to(tree) == SelectionSet(["l1-0"])
