import pytest

from domain.taxonomy import KeywordTaxonomy, parse_taxonomy_config
from domain.tree import Category


def test_page_kind_aliases_are_whitespace_and_case_insensitive(taxonomy: KeywordTaxonomy) -> None:
    assert taxonomy.normalize_page_kind("article/blog pages") == "Article"
    assert taxonomy.normalize_page_kind("  Article  /  Blog   Pages ") == "Article"
    assert taxonomy.normalize_page_kind("PRODUCT DETAIL") == "Product Detail"
    assert taxonomy.normalize_page_kind("聚合类") == "Hub"


def test_unknown_page_kind_passes_through_cleaned(taxonomy: KeywordTaxonomy) -> None:
    assert taxonomy.normalize_page_kind("  Landing   Page ") == "Landing Page"
    assert taxonomy.normalize_page_kind(None) == ""


def test_category_normalization(taxonomy: KeywordTaxonomy) -> None:
    assert taxonomy.normalize_category("traffic") is Category.TRAFFIC
    assert taxonomy.normalize_category("转化型") is Category.CONVERSION
    with pytest.raises(ValueError, match="Unknown keyword category"):
        taxonomy.normalize_category("Viral")


def test_alias_to_unknown_category_is_rejected() -> None:
    with pytest.raises(ValueError, match="unknown categories"):
        parse_taxonomy_config({"category_aliases": {"x": "Viral"}})


def test_alias_to_non_canonical_page_kind_is_rejected() -> None:
    with pytest.raises(ValueError, match="non-canonical"):
        parse_taxonomy_config({"canonical_page_kinds": ["Hub"], "page_kind_aliases": {"blog": "Article"}})


def test_wrong_types_are_rejected() -> None:
    with pytest.raises(ValueError, match="must be a list"):
        parse_taxonomy_config({"canonical_page_kinds": "Hub"})
    with pytest.raises(ValueError, match="must be a mapping"):
        parse_taxonomy_config({"page_kind_aliases": ["a"]})
