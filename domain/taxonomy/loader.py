"""Parse taxonomy configuration from YAML dict."""

from typing import Any

from domain.tree.models import Category
from domain.taxonomy.normalizer import KeywordTaxonomy, clean_label


def parse_taxonomy_config(data: dict[str, Any]) -> KeywordTaxonomy:
    """
    Parse pre-loaded YAML dict into a KeywordTaxonomy.

    This is a pure function - it does NOT perform file I/O.
    The YAML loading happens in infrastructure.config.loader.

    Args:
        data: Dictionary from yaml.safe_load()

    Returns:
        KeywordTaxonomy with lower-cased alias keys

    Raises:
        ValueError: If required keys have wrong types or an alias targets an unknown label
    """
    canonical = data.get("canonical_page_kinds")
    page_aliases_raw = data.get("page_kind_aliases", {}) or {}
    category_aliases_raw = data.get("category_aliases", {}) or {}

    if canonical is not None and not isinstance(canonical, list):
        raise ValueError("canonical_page_kinds must be a list")
    if not isinstance(page_aliases_raw, dict):
        raise ValueError("page_kind_aliases must be a mapping")
    if not isinstance(category_aliases_raw, dict):
        raise ValueError("category_aliases must be a mapping")

    categories = {c.value for c in Category}
    category_aliases = {clean_label(k).lower(): clean_label(v) for k, v in category_aliases_raw.items()}
    bad = sorted(v for v in category_aliases.values() if v not in categories)
    if bad:
        raise ValueError(f"category_aliases target unknown categories: {bad}")

    kwargs: dict[str, Any] = {
        "page_kind_aliases": {clean_label(k).lower(): clean_label(v) for k, v in page_aliases_raw.items()},
        "category_aliases": category_aliases,
    }
    if canonical is not None:
        kwargs["canonical_page_kinds"] = [clean_label(c) for c in canonical]

    taxonomy = KeywordTaxonomy(**kwargs)

    unknown_targets = sorted(
        v for v in taxonomy.page_kind_aliases.values() if v not in taxonomy.canonical_page_kinds
    )
    if unknown_targets:
        raise ValueError(f"page_kind_aliases target non-canonical page kinds: {unknown_targets}")
    return taxonomy
