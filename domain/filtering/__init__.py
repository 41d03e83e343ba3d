"""Filter view: non-mutating derived trees."""

from domain.filtering.view import FilterCriteria, apply_filter

__all__ = [
    "FilterCriteria",
    "apply_filter",
]
