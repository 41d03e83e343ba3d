"""Generation service facade over a provider adapter."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from opik import track

from application.prompting import build_hierarchy_prompt, build_terms_prompt, build_translation_prompt
from domain.augmentation.merger import TermContext
from domain.schemas import GenerationTask, KeywordMapResponse, TermBatch, TranslationBatch
from infrastructure.config.models import WorkbenchConfig
from infrastructure.observability.logging import get_log_context
from infrastructure.observability.tracing import annotate_current_span
from infrastructure.prompting.manager import PromptManager, PromptObj, PromptRole
from infrastructure.providers.base import ModelT, ProviderAdapter

logger = logging.getLogger(__name__)


@dataclass
class UsageTotals:
    """Running token/cost totals across all generation calls of a session."""

    calls: int = 0
    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0
    total_cost: float = 0.0

    def add(self, meta: dict[str, Any]) -> None:
        self.calls += 1
        self.input_tokens += int(meta.get("input_tokens", 0) or 0)
        self.output_tokens += int(meta.get("output_tokens", 0) or 0)
        self.total_tokens += int(meta.get("total_tokens", 0) or 0)
        self.total_cost += float(meta.get("call_total_cost", 0.0) or 0.0)

    def as_dict(self) -> dict[str, int | float]:
        return {
            "calls": self.calls,
            "input_tokens": self.input_tokens,
            "output_tokens": self.output_tokens,
            "total_tokens": self.total_tokens,
            "total_cost_usd": round(self.total_cost, 6),
        }


class KeywordGenerationService:
    """
    The three generation operations the workbench depends on:
    - generate_hierarchy(seed_keywords, instructions) -> KeywordMapResponse
    - generate_terms(context) -> list[str]
    - translate_many(texts) -> {text: translation}

    Failures surface as GenerationNetworkError / MalformedResponseError from the adapter.
    """

    def __init__(self, cfg: WorkbenchConfig, adapter: ProviderAdapter, prompt_manager: PromptManager) -> None:
        self.cfg = cfg
        self.adapter = adapter
        self.prompt_manager = prompt_manager
        self.usage = UsageTotals()

    @property
    def model_name(self) -> str:
        return self.adapter.model

    def _prompt(self, role: PromptRole) -> PromptObj:
        return self.prompt_manager.get_prompt(self.cfg.provider, role, self.cfg)

    async def _call(self, task: GenerationTask, user_text: str, response_model: type[ModelT], **meta: Any) -> ModelT:
        system_prompt = self._prompt(PromptRole.SYSTEM)
        parsed, result = await self.adapter.call_structured(
            system_text=system_prompt.prompt,
            user_text=user_text,
            response_model=response_model,
            task=task,
            extra_trace_meta={**get_log_context(), **meta},
        )
        self.usage.add(result)
        return parsed

    @track(type="llm", metadata={"task": "keyword_hierarchy"})
    async def generate_hierarchy(self, seed_keywords: str, instructions: str = "") -> KeywordMapResponse:
        """Generate the full keyword map for a seed."""
        annotate_current_span(name=f"keywords.hierarchy.{self.cfg.provider.value}_{self.model_name}")
        user_text = build_hierarchy_prompt(self._prompt(PromptRole.HIERARCHY), seed_keywords, instructions)
        response = await self._call(GenerationTask.HIERARCHY, user_text, KeywordMapResponse)
        logger.info(
            "Generated keyword map: %d core keywords, %d sub-core keywords",
            len(response.keyword_hierarchy),
            sum(len(l1.children) for l1 in response.keyword_hierarchy),
        )
        return response

    @track(type="llm", metadata={"task": "lsi_terms"})
    async def generate_terms(self, context: TermContext) -> list[str]:
        """Generate candidate LSI terms for one Level2 node (not yet deduplicated)."""
        annotate_current_span(name="keywords.terms")
        user_text = build_terms_prompt(
            self._prompt(PromptRole.TERMS),
            context,
            self.cfg.generation.min_new_terms,
        )
        batch = await self._call(GenerationTask.TERMS, user_text, TermBatch, level2_keyword=context.level2_keyword)
        logger.info("Received %d candidate terms for %r", len(batch.terms), context.level2_keyword)
        return list(batch.terms)

    @track(type="llm", metadata={"task": "translate_batch"})
    async def translate_many(self, texts: Sequence[str]) -> dict[str, str]:
        """
        Translate a batch of texts into the configured target language.

        Duplicate inputs are sent once. Returned keys that were not requested are
        ignored, as are blank translations.
        """
        unique = list(dict.fromkeys(t for t in texts if t and t.strip()))
        if not unique:
            return {}

        language = self.cfg.generation.target_language
        annotate_current_span(name=f"keywords.translate.{len(unique)}")
        user_text = build_translation_prompt(self._prompt(PromptRole.TRANSLATE), unique, language)
        batch = await self._call(
            GenerationTask.TRANSLATE,
            user_text,
            TranslationBatch,
            texts=unique,
            target_language=language,
        )
        requested = set(unique)
        mapping = {
            src: tr.strip() for src, tr in batch.as_mapping().items() if src in requested and tr and tr.strip()
        }
        ignored = len(batch.items) - len(mapping)
        if ignored:
            logger.warning("Ignored %d translation entries (unrequested source or blank translation)", ignored)
        logger.info("Translated %d/%d texts into %s", len(mapping), len(unique), language)
        return mapping
