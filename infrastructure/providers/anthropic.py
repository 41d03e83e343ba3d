"""Anthropic provider adapter with prompt caching support."""

import logging
from dataclasses import dataclass
from typing import Any

import anthropic
from anthropic import AsyncAnthropic, transform_schema
from opik.integrations.anthropic import track_anthropic

from domain.errors import GenerationNetworkError, MalformedResponseError
from domain.schemas import GenerationTask
from infrastructure.config.models import ModelPricingAnthropic, Provider, WorkbenchConfig

from .base import ModelT, ProviderAdapter
from .parsing import parse_response
from .registry import register_adapter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UsageBreakdown:
    """Token accounting for one Anthropic call, split by cache tier."""

    uncached: int
    cache_read: int
    created_5m: int
    created_1h: int
    output_tokens: int

    @property
    def cache_creation_total(self) -> int:
        return self.created_5m + self.created_1h

    @property
    def input_tokens(self) -> int:
        return self.uncached + self.cache_creation_total + self.cache_read

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


def compute_usage_breakdown(usage: Any, cache_ttl: str | None) -> UsageBreakdown:
    """
    Normalize an Anthropic `usage` object into cache-tier token counts.

    `input_tokens` on the wire only counts tokens after the last cache breakpoint;
    cache writes and reads are reported separately. When the per-TTL breakdown is
    present it wins over `cache_creation_input_tokens`; otherwise the whole write is
    attributed to the configured TTL.
    """
    uncached_after_breakpoint = int(getattr(usage, "input_tokens", 0) or 0)
    cache_creation_total = int(getattr(usage, "cache_creation_input_tokens", 0) or 0)
    cache_read_tokens = int(getattr(usage, "cache_read_input_tokens", 0) or 0)
    output_tokens = int(getattr(usage, "output_tokens", 0) or 0)

    cache_creation_obj = getattr(usage, "cache_creation", None)
    created_5m = 0
    created_1h = 0
    if isinstance(cache_creation_obj, dict):
        created_5m = int(cache_creation_obj.get("ephemeral_5m_input_tokens", 0) or 0)
        created_1h = int(cache_creation_obj.get("ephemeral_1h_input_tokens", 0) or 0)
    elif cache_creation_obj is not None:
        created_5m = int(getattr(cache_creation_obj, "ephemeral_5m_input_tokens", 0) or 0)
        created_1h = int(getattr(cache_creation_obj, "ephemeral_1h_input_tokens", 0) or 0)

    breakdown_sum = created_5m + created_1h
    if breakdown_sum > 0:
        if 0 < cache_creation_total != breakdown_sum:
            logger.warning(
                "Anthropic cache_creation mismatch: cache_creation_input_tokens=%d but breakdown_sum=%d",
                cache_creation_total,
                breakdown_sum,
            )
    elif cache_creation_total > 0:
        if cache_ttl == "1h":
            created_1h = cache_creation_total
        else:
            created_5m = cache_creation_total

    return UsageBreakdown(
        uncached=uncached_after_breakpoint,
        cache_read=cache_read_tokens,
        created_5m=created_5m,
        created_1h=created_1h,
        output_tokens=output_tokens,
    )


class AnthropicAdapter(ProviderAdapter):
    """Adapter for the Anthropic Messages API with structured outputs and prompt caching."""

    supports_prompt_caching: bool = True

    @classmethod
    def from_cfg(cls, cfg: WorkbenchConfig) -> "AnthropicAdapter":
        if cfg.anthropic is None:
            raise ValueError("Provider=anthropic but cfg.anthropic is missing")
        client: Any = track_anthropic(AsyncAnthropic(timeout=cfg.anthropic.timeout_s))
        pricing = ModelPricingAnthropic(**cfg.provider_model.pricing) if cfg.provider_model.pricing else None
        if pricing is None:
            logger.warning("No Anthropic pricing configured for model=%s; call costs will be reported as $0", cfg.model)
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
        """Call Anthropic with a JSON-schema output format and an optionally cached system block."""

        provider_cfg = self.cfg.anthropic
        if provider_cfg is None:
            raise ValueError("AnthropicAdapter requires cfg.anthropic")

        result = self._empty_result()

        # Only include cache_control when ttl is set; some SDK/API versions reject ttl=None.
        system_block: dict[str, Any] = {
            "type": "text",
            "text": system_text,
        }
        if provider_cfg.cache_ttl:
            system_block["cache_control"] = {
                "type": "ephemeral",
                "ttl": provider_cfg.cache_ttl,
            }

        kwargs: dict[str, Any] = {
            "model": self.model,
            "max_tokens": provider_cfg.max_tokens,
            "betas": provider_cfg.betas,
            "system": [system_block],
            "messages": [
                {
                    "role": "user",
                    "content": [{"type": "text", "text": user_text}],
                }
            ],
            "output_format": {
                "type": "json_schema",
                "schema": transform_schema(response_model),
            },
        }
        if provider_cfg.temperature is not None:
            kwargs["temperature"] = provider_cfg.temperature
        if provider_cfg.service_tier is not None:
            kwargs["service_tier"] = provider_cfg.service_tier

        try:
            message = await self.client.beta.messages.create(**kwargs)
        except anthropic.APIError as e:
            raise GenerationNetworkError(f"Anthropic request failed: {e}") from e

        text_blocks = [block.text for block in message.content if getattr(block, "type", None) == "text"]
        if not text_blocks:
            raise MalformedResponseError("Anthropic response contained no text block")
        parsed = parse_response(text_blocks[0], response_model)

        usage = compute_usage_breakdown(message.usage, provider_cfg.cache_ttl)

        result["input_tokens"] = usage.input_tokens
        result["output_tokens"] = usage.output_tokens
        result["total_tokens"] = usage.total_tokens
        result["cache_meta"] = {
            "uncached_input_tokens": usage.uncached,
            "cache_read_input_tokens": usage.cache_read,
            "cache_creation_5m_input_tokens": usage.created_5m,
            "cache_creation_1h_input_tokens": usage.created_1h,
        }

        baseline_input_cost = 0.0
        input_savings = 0.0
        savings_pct = 0.0

        if self.pricing is not None:
            baseline_input_cost = usage.input_tokens * self.pricing.input_cost_per_token
            result["call_input_cost"] = (
                usage.uncached * self.pricing.input_cost_per_token
                + usage.cache_read * self.pricing.cache_read_cost_per_token
                + usage.created_5m * self.pricing.cache_write_5m_cost_per_token
                + usage.created_1h * self.pricing.cache_write_1h_cost_per_token
            )
            result["call_output_cost"] = usage.output_tokens * self.pricing.output_cost_per_token
            result["call_total_cost"] = result["call_input_cost"] + result["call_output_cost"]

            input_savings = baseline_input_cost - result["call_input_cost"]
            savings_pct = (input_savings / baseline_input_cost * 100) if baseline_input_cost > 0 else 0.0

        meta = {
            "task": task.value,
            "cache_ttl": provider_cfg.cache_ttl,
            "max_tokens": provider_cfg.max_tokens,
            "temperature": provider_cfg.temperature,
            "betas": provider_cfg.betas,
            "anthropic_uncached_tokens": usage.uncached,
            "anthropic_cache_read_tokens": usage.cache_read,
            "anthropic_cache_write_5m_tokens": usage.created_5m,
            "anthropic_cache_write_1h_tokens": usage.created_1h,
            "call_total_cost_usd": round(result["call_total_cost"], 6),
            "input_savings_usd": round(input_savings, 6),
            "savings_percent": round(savings_pct, 1),
            "cache_hit": usage.cache_read > 0,
        }
        if extra_trace_meta:
            meta.update(extra_trace_meta)

        self._annotate_span(
            provider=self.provider.value,
            model=self.model,
            usage=self._opik_usage(
                input_tokens=usage.input_tokens,
                output_tokens=usage.output_tokens,
                total_tokens=usage.total_tokens,
            ),
            total_cost=float(result["call_total_cost"]),
            metadata=meta,
        )

        logger.info(
            "%s: Anthropic - total_tokens=%d (uncached=%d, cache_read=%d, cache_write=%d [5m=%d, 1h=%d]), "
            "cost=$%.6f, savings=$%.6f (%.1f%%)",
            task.value,
            usage.total_tokens,
            usage.uncached,
            usage.cache_read,
            usage.cache_creation_total,
            usage.created_5m,
            usage.created_1h,
            result["call_total_cost"],
            input_savings,
            savings_pct,
        )

        return parsed, result


register_adapter(Provider.ANTHROPIC, AnthropicAdapter)
