"""
Domain layer: the keyword taxonomy engine, with minimal external dependencies.

Contains:
- schemas: Pydantic models for generation-service payloads
- tree: addressable three-level keyword tree and its builder
- selection: cascading tri-state selection
- augmentation: deduplicating term merge
- filtering: non-mutating filtered views
- versioning: pruning and lineage-aware naming on save
- taxonomy: label normalization tables
"""

from domain.schemas import GenerationTask, KeywordMapResponse, TermBatch, TranslationBatch

__all__ = [
    "GenerationTask",
    "KeywordMapResponse",
    "TermBatch",
    "TranslationBatch",
]
