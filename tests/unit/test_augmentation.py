import pytest

from domain.augmentation import build_term_context, merge_terms
from domain.errors import InvalidNodeError, NodeNotFoundError
from domain.tree import KeywordTree

L2 = "l1-0-l2-1"


def test_merge_appends_only_new_terms_with_continuing_ids(tree: KeywordTree) -> None:
    result = merge_terms(tree, L2, ["a2 t1", "fresh one", "fresh two"])

    assert result.added_ids == ("l1-0-l2-1-lsi-2", "l1-0-l2-1-lsi-3")
    texts = [t.text for t in result.tree.level2(L2).terms]
    assert texts == ["a2 t0", "a2 t1", "fresh one", "fresh two"]


def test_merge_trims_and_drops_blanks_and_batch_duplicates(tree: KeywordTree) -> None:
    result = merge_terms(tree, L2, ["  new  ", "", "   ", "new", "a2 t0 "])
    assert [result.tree.text_of(i) for i in result.added_ids] == ["new"]


def test_dedup_is_case_sensitive(tree: KeywordTree) -> None:
    result = merge_terms(tree, L2, ["A2 T0"])
    assert len(result.added_ids) == 1


def test_existing_terms_survive_and_texts_stay_unique(tree: KeywordTree) -> None:
    before = [t.text for t in tree.level2(L2).terms]
    result = merge_terms(tree, L2, ["x", "a2 t0", "y", "x"])
    after = [t.text for t in result.tree.level2(L2).terms]
    assert after[: len(before)] == before
    assert len(after) == len(set(after))


def test_all_duplicates_returns_same_tree(tree: KeywordTree) -> None:
    result = merge_terms(tree, L2, ["a2 t0", "a2 t1"])
    assert result.added_ids == ()
    assert result.tree is tree


def test_merge_leaves_input_tree_untouched(tree: KeywordTree) -> None:
    merge_terms(tree, L2, ["new"])
    assert len(tree.level2(L2).terms) == 2
    assert "l1-0-l2-1-lsi-2" not in tree


def test_merge_rejects_non_level2_targets(tree: KeywordTree) -> None:
    with pytest.raises(InvalidNodeError):
        merge_terms(tree, "l1-0", ["x"])
    with pytest.raises(NodeNotFoundError):
        merge_terms(tree, "l1-0-l2-9", ["x"])


def test_term_context_carries_parent_and_existing_terms(tree: KeywordTree) -> None:
    ctx = build_term_context(tree, L2, seed_keywords="linen sheets", instructions="US market")
    assert ctx.level1_keyword == "A"
    assert ctx.level1_category == "Traffic"
    assert ctx.level2_keyword == "A2"
    assert ctx.level2_stage == "Decision (compare options)"
    assert ctx.existing_terms == ["a2 t0", "a2 t1"]
    assert ctx.seed_keywords == "linen sheets"
    assert ctx.instructions == "US market"
