"""Label normalization for keyword categories and page kinds."""

import re
from functools import cached_property

from pydantic import BaseModel, Field

from domain.tree.models import Category


def clean_label(raw: object) -> str:
    """Collapse whitespace and tighten spaces around slashes."""
    if raw is None:
        return ""
    s = str(raw).strip()
    s = re.sub(r"\s+", " ", s)
    return re.sub(r"\s*/\s*", "/", s)


class KeywordTaxonomy(BaseModel):
    """
    Canonical labels and alias tables for the keyword map.

    Generation output (and sub-projects saved by older releases) may carry
    legacy or localized labels; both tables map them onto canonical labels.
    Canonical labels always map to themselves.
    """

    canonical_page_kinds: list[str] = Field(default_factory=lambda: ["Product Detail", "Article", "Hub"])
    page_kind_aliases: dict[str, str] = Field(default_factory=dict)  # lower(raw) -> canonical
    category_aliases: dict[str, str] = Field(default_factory=dict)  # lower(raw) -> Category value

    @cached_property
    def _page_kind_lookup(self) -> dict[str, str]:
        return {clean_label(c).lower(): clean_label(c) for c in self.canonical_page_kinds}

    @cached_property
    def _category_lookup(self) -> dict[str, str]:
        return {c.value.lower(): c.value for c in Category}

    def normalize_page_kind(self, raw: object) -> str:
        """
        Map a page-kind label to its canonical form.

        Examples:
            >>> taxonomy = KeywordTaxonomy(page_kind_aliases={"article/blog pages": "Article"})
            >>> taxonomy.normalize_page_kind("Article / Blog Pages")
            'Article'
            >>> taxonomy.normalize_page_kind("article")
            'Article'

        Unknown labels are returned whitespace-normalized but otherwise unchanged.
        """
        s = clean_label(raw)
        if not s:
            return ""
        key = s.lower()
        if key in self._page_kind_lookup:
            return self._page_kind_lookup[key]
        if key in self.page_kind_aliases:
            return self.page_kind_aliases[key]
        return s

    def normalize_category(self, raw: object) -> Category:
        """
        Map a category label to a Category.

        Raises:
            ValueError: If the label is neither canonical nor a known alias
        """
        key = clean_label(raw).lower()
        value = self._category_lookup.get(key) or self.category_aliases.get(key)
        if value is None:
            raise ValueError(f"Unknown keyword category: {raw!r}")
        return Category(value)
