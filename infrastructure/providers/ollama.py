import logging
from typing import Any

import httpx

from domain.errors import GenerationNetworkError, MalformedResponseError
from domain.schemas import GenerationTask
from infrastructure.config.models import Provider, WorkbenchConfig
from infrastructure.providers.base import ModelT, ProviderAdapter
from infrastructure.providers.parsing import parse_response
from infrastructure.providers.registry import register_adapter

logger = logging.getLogger(__name__)


class OllamaAdapter(ProviderAdapter):
    """
    Ollama backend using Ollama's native Chat API: POST /api/chat

    - Uses JSON schema constrained output via `format` (json schema object)
    - Token usage comes from `prompt_eval_count` and `eval_count`
    - Cost is treated as $0.00 (local inference)
    """

    supports_structured_outputs: bool = True
    supports_prompt_caching: bool = False
    supports_token_usage: bool = True

    @classmethod
    def from_cfg(cls, cfg: WorkbenchConfig) -> "OllamaAdapter":
        if cfg.ollama is None:
            raise ValueError("Provider=ollama but cfg.ollama is missing")
        base_url = cfg.ollama.base_url.rstrip("/")
        client = httpx.AsyncClient(
            base_url=base_url,
            timeout=cfg.ollama.timeout_s,
            headers={"Content-Type": "application/json"},
        )
        return cls(cfg=cfg, client=client, pricing=None)

    async def call_structured(
        self,
        *,
        system_text: str,
        user_text: str,
        response_model: type[ModelT],
        task: GenerationTask,
        extra_trace_meta: dict[str, Any] | None = None,
    ) -> tuple[ModelT, dict[str, Any]]:
        ollama_cfg = self.cfg.ollama
        if ollama_cfg is None:
            raise ValueError("OllamaAdapter requires cfg.ollama")

        # Ollama accepts format as either "json" or a JSON schema object
        schema_obj = response_model.model_json_schema()

        # Only send non-None options
        options: dict[str, Any] = {}
        for k in ("temperature", "seed", "num_ctx", "top_p", "top_k", "num_predict"):
            v = getattr(ollama_cfg, k, None)
            if v is not None:
                options[k] = v

        payload: dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_text},
                {"role": "user", "content": user_text},
            ],
            "stream": False,
            "format": schema_obj,
        }

        if options:
            payload["options"] = options
        if ollama_cfg.keep_alive is not None:
            payload["keep_alive"] = ollama_cfg.keep_alive
        if ollama_cfg.think is not None:
            payload["think"] = ollama_cfg.think

        try:
            resp = await self.client.post("/api/chat", json=payload)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise GenerationNetworkError(f"Ollama request failed: {e}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise MalformedResponseError("Ollama returned a non-JSON response body") from e

        raw_text = ((data.get("message") or {}).get("content")) or ""
        parsed = parse_response(raw_text, response_model)

        input_tokens = int(data.get("prompt_eval_count", 0) or 0)
        output_tokens = int(data.get("eval_count", 0) or 0)
        total_tokens = int(input_tokens + output_tokens)

        result = self._empty_result()
        result["input_tokens"] = input_tokens
        result["output_tokens"] = output_tokens
        result["total_tokens"] = total_tokens

        meta = {
            "task": task.value,
            "base_url": ollama_cfg.base_url,
            "keep_alive": ollama_cfg.keep_alive,
            "think": ollama_cfg.think,
            "ollama_options": options,
            "call_total_cost_usd": 0.0,
        }
        if extra_trace_meta:
            meta.update(extra_trace_meta)

        self._annotate_span(
            provider=self.provider.value,
            model=self.model,
            usage=self._opik_usage(
                input_tokens=input_tokens,
                output_tokens=output_tokens,
                total_tokens=total_tokens,
            ),
            total_cost=0.0,
            metadata=meta,
        )

        logger.info(
            "%s: Ollama - total_tokens=%d (in=%d, out=%d), cost=$%.6f",
            task.value,
            total_tokens,
            input_tokens,
            output_tokens,
            0.0,
        )

        return parsed, result


register_adapter(Provider.OLLAMA, OllamaAdapter)
