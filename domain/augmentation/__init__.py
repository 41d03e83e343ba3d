"""Term augmentation: context assembly and deduplicating merge (pure)."""

from domain.augmentation.merger import MergeResult, TermContext, build_term_context, merge_terms

__all__ = [
    "TermContext",
    "MergeResult",
    "build_term_context",
    "merge_terms",
]
