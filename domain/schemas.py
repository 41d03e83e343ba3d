"""Pydantic models for structured generation-service outputs."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, model_validator


class GenerationTask(str, Enum):
    """Kinds of calls made against the generation service."""

    HIERARCHY = "hierarchy"
    TERMS = "terms"
    TRANSLATE = "translate"


class RawLevel2(BaseModel):
    """Sub-core keyword for one user-behavior stage, with its LSI terms."""

    keyword: str = Field(..., description="Sub-core keyword text.")
    stage: str = Field(
        ...,
        description="Behavior stage label, starting with Awareness, Decision, Trust or Action, "
        "optionally followed by a parenthetical qualifier, e.g. 'Decision (compare options)'.",
    )
    terms: list[str] = Field(default_factory=list, description="LSI terms supporting the keyword.")


class RawLevel1(BaseModel):
    """Core keyword for one page kind."""

    keyword: str = Field(..., description="Core keyword text.")
    category: str = Field(..., description="Traffic, Comparison or Conversion.")
    page_kind: str = Field(..., description="Target page kind, e.g. 'Article'.")
    children: list[RawLevel2] = Field(default_factory=list)


class OriginalKeywords(BaseModel):
    """Seed keywords classified by intent."""

    traffic: list[str] = Field(default_factory=list)
    comparison: list[str] = Field(default_factory=list)
    conversion: list[str] = Field(default_factory=list)


class KeywordMapResponse(BaseModel):
    """Full keyword map returned by the hierarchy generation call."""

    core_user_intent: str = Field(default="", description="One-sentence summary of the core user intent.")
    original_keywords: OriginalKeywords = Field(default_factory=OriginalKeywords)
    keyword_hierarchy: list[RawLevel1] = Field(..., description="Level 1 entries of the topic map.")


class TermBatch(BaseModel):
    """Supplementary LSI terms for a single Level2 node."""

    terms: list[str] = Field(..., description="New LSI terms, one string each.")

    @model_validator(mode="before")
    @classmethod
    def _accept_bare_list(cls, data: Any) -> Any:
        # Free-text providers are prompted for a plain JSON array.
        if isinstance(data, list):
            return {"terms": data}
        return data


class TranslationPair(BaseModel):
    source: str
    translation: str


class TranslationBatch(BaseModel):
    """Translations for a batch of source texts."""

    items: list[TranslationPair] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _accept_plain_mapping(cls, data: Any) -> Any:
        if isinstance(data, dict) and "items" not in data:
            return {"items": [{"source": str(k), "translation": str(v)} for k, v in data.items()]}
        return data

    def as_mapping(self) -> dict[str, str]:
        return {pair.source: pair.translation for pair in self.items}
