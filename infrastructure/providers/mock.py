"""Mock provider adapter for testing and offline runs."""

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from domain.errors import MalformedResponseError
from domain.schemas import GenerationTask
from infrastructure.config.models import Provider, WorkbenchConfig
from infrastructure.providers.base import ModelT, ProviderAdapter
from infrastructure.providers.registry import register_adapter

logger = logging.getLogger(__name__)

# Raw payload, exception instance to raise, or callable(user_text, trace_meta) -> payload
Fixture = Any


def default_hierarchy_payload() -> dict[str, Any]:
    """A small, well-formed keyword map used when no fixture is provided."""
    return {
        "core_user_intent": "Find comfortable, durable bedding at a fair price.",
        "original_keywords": {
            "traffic": ["bedding guide"],
            "comparison": ["cotton vs linen sheets"],
            "conversion": ["buy linen sheets"],
        },
        "keyword_hierarchy": [
            {
                "keyword": "linen bedding guide",
                "category": "Traffic",
                "page_kind": "Article",
                "children": [
                    {
                        "keyword": "what is linen bedding",
                        "stage": "Awareness (learn the basics)",
                        "terms": ["flax fiber", "breathable fabric", "linen weave"],
                    },
                    {
                        "keyword": "linen vs cotton sheets",
                        "stage": "Decision (compare options)",
                        "terms": ["thread count", "cooling sheets"],
                    },
                ],
            },
            {
                "keyword": "buy linen sheet set",
                "category": "Conversion",
                "page_kind": "Product Detail",
                "children": [
                    {
                        "keyword": "linen sheet set reviews",
                        "stage": "Trust (verify quality)",
                        "terms": ["customer reviews", "oeko-tex certified"],
                    },
                    {
                        "keyword": "linen sheet set discount",
                        "stage": "Action (purchase)",
                        "terms": ["free shipping", "bundle price"],
                    },
                ],
            },
        ],
    }


class MockAdapter(ProviderAdapter):
    """
    Mock adapter for testing without real API calls.

    Fixtures are keyed by GenerationTask. Anything without a fixture falls back to a
    deterministic default payload. Every payload is validated against the requested
    response model, so malformed fixtures surface as MalformedResponseError exactly
    like a bad provider answer would.
    """

    supports_structured_outputs: bool = True
    supports_prompt_caching: bool = False
    supports_token_usage: bool = True

    def __init__(
        self,
        *,
        cfg: WorkbenchConfig,
        fixtures: Mapping[GenerationTask, Fixture] | None = None,
        latency_s: float | None = None,
    ) -> None:
        super().__init__(cfg=cfg, client=None, pricing=None)
        self.fixtures: dict[GenerationTask, Fixture] = dict(fixtures or {})
        if latency_s is None:
            latency_s = cfg.mock.latency_s if cfg.mock is not None else 0.0
        self.latency_s = latency_s
        self.calls: list[tuple[GenerationTask, str]] = []
        logger.info("Initialized Mock adapter (no real API calls will be made)")

    @classmethod
    def from_cfg(cls, cfg: WorkbenchConfig) -> "MockAdapter":
        return cls(cfg=cfg)

    def _default_payload(self, task: GenerationTask, meta: dict[str, Any]) -> Any:
        if task is GenerationTask.HIERARCHY:
            return default_hierarchy_payload()
        if task is GenerationTask.TERMS:
            count = self.cfg.generation.min_new_terms
            return {"terms": [f"mock lsi {i}" for i in range(1, count + 1)]}
        if task is GenerationTask.TRANSLATE:
            language = meta.get("target_language", self.cfg.generation.target_language)
            return {t: f"[{language}] {t}" for t in meta.get("texts", [])}
        raise ValueError(f"Unsupported task: {task}")

    async def call_structured(
        self,
        *,
        system_text: str,
        user_text: str,
        response_model: type[ModelT],
        task: GenerationTask,
        extra_trace_meta: dict[str, Any] | None = None,
    ) -> tuple[ModelT, dict[str, Any]]:
        """Return the fixture (or default) payload for `task`, validated against `response_model`."""
        meta = dict(extra_trace_meta or {})
        self.calls.append((task, user_text))

        if self.latency_s > 0:
            await asyncio.sleep(self.latency_s)

        fixture = self.fixtures.get(task)
        if isinstance(fixture, BaseException):
            raise fixture
        if callable(fixture):
            payload = fixture(user_text, meta)
        elif fixture is not None:
            payload = fixture
        else:
            payload = self._default_payload(task, meta)

        try:
            parsed = response_model.model_validate(payload)
        except ValidationError as e:
            raise MalformedResponseError(
                f"Mock payload does not match {response_model.__name__}: {e.error_count()} validation error(s)"
            ) from e

        # Rough approximation
        input_tokens = len(system_text) // 4 + len(user_text) // 4
        output_tokens = len(parsed.model_dump_json()) // 4
        total_tokens = input_tokens + output_tokens

        result = self._empty_result()
        result["input_tokens"] = input_tokens
        result["output_tokens"] = output_tokens
        result["total_tokens"] = total_tokens
        logger.debug("Mock adapter answered %s (%d output tokens)", task.value, output_tokens)

        meta.update({"task": task.value, "mock": True})
        self._annotate_span(
            provider=Provider.MOCK.value,
            model=self.model,
            usage=self._opik_usage(input_tokens=0, output_tokens=0, total_tokens=0),
            total_cost=0.0,
            metadata=meta,
        )
        return parsed, result


register_adapter(Provider.MOCK, MockAdapter)
