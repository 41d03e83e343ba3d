"""OpenAI provider adapter with prompt caching support."""

import logging
from typing import Any

import openai
from openai import AsyncOpenAI
from opik.integrations.openai import track_openai
from pydantic import ValidationError

from domain.errors import GenerationNetworkError, MalformedResponseError
from domain.schemas import GenerationTask
from infrastructure.config.models import ModelPricingOpenAI, Provider, WorkbenchConfig

from .base import ModelT, ProviderAdapter
from .registry import register_adapter

logger = logging.getLogger(__name__)


class OpenAIAdapter(ProviderAdapter):
    """Adapter for the OpenAI Responses API with structured outputs and prompt caching."""

    supports_prompt_caching: bool = True

    @classmethod
    def from_cfg(cls, cfg: WorkbenchConfig) -> "OpenAIAdapter":
        if cfg.openai is None:
            raise ValueError("Provider=openai but cfg.openai is missing")
        client: Any = track_openai(AsyncOpenAI(timeout=cfg.openai.timeout_s))
        pricing = ModelPricingOpenAI(**cfg.provider_model.pricing) if cfg.provider_model.pricing else None
        if pricing is None:
            logger.warning("No OpenAI pricing configured for model=%s; call costs will be reported as $0", cfg.model)
        return cls(cfg=cfg, client=client, pricing=pricing)

    async def call_structured(
        self,
        *,
        system_text: str,
        user_text: str,
        response_model: type[ModelT],
        task: GenerationTask,
        extra_trace_meta: dict[str, Any] | None = None,
    ) -> tuple[ModelT, dict[str, Any]]:
        """Call OpenAI with structured output (`text_format`) and optional prompt caching."""
        provider_cfg = self.cfg.openai
        if provider_cfg is None:
            raise ValueError("OpenAIAdapter requires cfg.openai")

        result = self._empty_result()

        # Some SDK versions reject explicit None values.
        kwargs: dict[str, Any] = {
            "model": self.model,
            "instructions": system_text,
            "input": user_text,
            "text_format": response_model,
        }
        if provider_cfg.service_tier is not None:
            kwargs["service_tier"] = provider_cfg.service_tier
        if provider_cfg.temperature is not None:
            kwargs["temperature"] = provider_cfg.temperature
        if provider_cfg.prompt_cache_key is not None:
            kwargs["prompt_cache_key"] = provider_cfg.prompt_cache_key
        if provider_cfg.prompt_cache_retention is not None:
            kwargs["prompt_cache_retention"] = provider_cfg.prompt_cache_retention

        try:
            response = await self.client.responses.parse(**kwargs)
        except openai.APIError as e:
            raise GenerationNetworkError(f"OpenAI request failed: {e}") from e
        except ValidationError as e:
            raise MalformedResponseError(
                f"OpenAI structured output does not match {response_model.__name__}"
            ) from e

        parsed = response.output_parsed
        if parsed is None:
            raise MalformedResponseError(f"OpenAI returned no parsed {response_model.__name__} payload")

        usage = response.usage
        input_tokens = int(getattr(usage, "input_tokens", 0) or 0)
        output_tokens = int(getattr(usage, "output_tokens", 0) or 0)
        total_tokens = int(getattr(usage, "total_tokens", input_tokens + output_tokens) or 0)

        result["input_tokens"] = input_tokens
        result["output_tokens"] = output_tokens
        result["total_tokens"] = total_tokens

        cached_input_tokens = 0
        details = getattr(usage, "input_tokens_details", None) or getattr(usage, "prompt_tokens_details", None)
        if details is not None:
            cached_input_tokens = int(getattr(details, "cached_tokens", 0) or 0)

        uncached = max(input_tokens - cached_input_tokens, 0)
        result["cache_meta"] = {
            "cached_input_tokens": cached_input_tokens,
            "uncached_input_tokens": uncached,
        }

        if self.pricing is not None:
            result["call_input_cost"] = (
                uncached * self.pricing.input_cost_per_token
                + cached_input_tokens * self.pricing.cached_input_cost_per_token
            )
            result["call_output_cost"] = output_tokens * self.pricing.output_cost_per_token
            result["call_total_cost"] = result["call_input_cost"] + result["call_output_cost"]

        meta = {
            "task": task.value,
            "service_tier": provider_cfg.service_tier,
            "temperature": provider_cfg.temperature,
            "prompt_cache_key": provider_cfg.prompt_cache_key,
            "openai_uncached_tokens": uncached,
            "openai_cached_tokens": cached_input_tokens,
            "call_total_cost_usd": round(result["call_total_cost"], 6),
        }
        if extra_trace_meta:
            meta.update(extra_trace_meta)

        self._annotate_span(
            provider=self.provider.value,
            model=self.model,
            usage=self._opik_usage(input_tokens=input_tokens, output_tokens=output_tokens, total_tokens=total_tokens),
            total_cost=float(result["call_total_cost"]),
            metadata=meta,
        )

        logger.info(
            "%s: OpenAI - total_tokens=%d (uncached=%d, cached=%d), cost=$%.6f",
            task.value,
            total_tokens,
            uncached,
            cached_input_tokens,
            result["call_total_cost"],
        )

        return parsed, result


register_adapter(Provider.OPENAI, OpenAIAdapter)
