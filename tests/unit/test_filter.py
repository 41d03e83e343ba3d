from domain.filtering import FilterCriteria, apply_filter
from domain.schemas import RawLevel1
from domain.selection import SelectionSet, toggle
from domain.tree import Category, KeywordTree, build_tree


def test_empty_criteria_returns_the_live_tree(tree: KeywordTree) -> None:
    assert apply_filter(tree, FilterCriteria()) is tree
    assert apply_filter(tree, FilterCriteria(category=None, page_kind="", stage_prefix="")) is tree


def test_blank_strings_in_every_field_mean_no_filter(tree: KeywordTree) -> None:
    assert FilterCriteria(category="  ").category is None
    assert apply_filter(tree, FilterCriteria(category="", page_kind="", stage_prefix="")) is tree


def test_stage_prefix_matches_labels_with_qualifiers(tree: KeywordTree) -> None:
    view = apply_filter(tree, FilterCriteria(stage_prefix="Decision"))
    assert [r.id for r in view.roots] == ["l1-0"]
    assert view.child_ids("l1-0") == ("l1-0-l2-1",)
    # retained nodes keep their ids and terms
    assert view.child_ids("l1-0-l2-1") == tree.child_ids("l1-0-l2-1")


def test_level1_without_matching_children_is_dropped(tree: KeywordTree) -> None:
    view = apply_filter(tree, FilterCriteria(stage_prefix="Trust"))
    assert view.roots == ()


def test_category_filter(tree: KeywordTree) -> None:
    view = apply_filter(tree, FilterCriteria(category=Category.CONVERSION))
    assert [r.keyword for r in view.roots] == ["B"]
    assert view.level1("l1-1") is tree.level1("l1-1")


def test_page_kind_is_compared_after_normalization(tree: KeywordTree, taxonomy) -> None:
    view = apply_filter(tree, FilterCriteria(page_kind="Article / Blog Pages"), taxonomy)
    assert [r.id for r in view.roots] == ["l1-0"]

    view = apply_filter(tree, FilterCriteria(page_kind="产品详情类"), taxonomy)
    assert [r.id for r in view.roots] == ["l1-1"]


def test_filter_round_trip_leaves_tree_and_selection_unchanged(tree: KeywordTree) -> None:
    selection = toggle(tree, SelectionSet(), "l1-0-l2-0", True)
    ids_before = selection.ids

    apply_filter(tree, FilterCriteria(category=Category.TRAFFIC, stage_prefix="Awareness"))
    restored = apply_filter(tree, FilterCriteria())

    assert restored == tree
    assert len(tree) == 12
    assert selection.ids == ids_before


def test_localized_stage_label_matches_its_canonical_stage() -> None:
    localized = build_tree(
        [
            RawLevel1.model_validate(
                {
                    "keyword": "x",
                    "category": "Conversion",
                    "page_kind": "Product Detail",
                    "children": [
                        {"keyword": "reviews", "stage": "信任型 (Trust)", "terms": ["t"]},
                        {"keyword": "buy", "stage": "行动型 (Action)", "terms": []},
                    ],
                }
            )
        ]
    )
    view = apply_filter(localized, FilterCriteria(stage_prefix="Trust"))
    assert view.child_ids("l1-0") == ("l1-0-l2-0",)
