"""Base adapter interface for generation providers."""

import logging
from abc import ABC, abstractmethod
from typing import Any, TypeVar

from pydantic import BaseModel

from domain.schemas import GenerationTask
from infrastructure.config.models import Provider, WorkbenchConfig
from infrastructure.observability.tracing import annotate_current_span

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class ProviderAdapter(ABC):
    """
    Abstract base class for generation provider adapters.
    Common interface for provider backends (OpenAI, Anthropic, Ollama, Mock).

    All concrete adapters must implement:
    - call_structured(): make one async model call and return a validated Pydantic payload

    Errors are translated at this boundary:
    - transport / provider API failures -> GenerationNetworkError
    - undecodable or schema-invalid payloads -> MalformedResponseError
    """

    provider: Provider
    cfg: WorkbenchConfig
    client: Any
    pricing: Any | None

    supports_structured_outputs: bool = True
    supports_prompt_caching: bool = False
    supports_token_usage: bool = True

    def __init__(
        self,
        *,
        cfg: WorkbenchConfig,
        client: Any,
        pricing: Any | None,
    ) -> None:
        self.cfg = cfg
        self.provider = cfg.provider
        self.client = client
        self.pricing = pricing

    @property
    def model(self) -> str:
        # Single source of truth (no duplicated "model: str" fields)
        return self.cfg.model

    def _empty_result(self) -> dict[str, Any]:
        return {
            "input_tokens": 0,
            "output_tokens": 0,
            "total_tokens": 0,
            "cache_meta": {},
            "call_input_cost": 0.0,
            "call_output_cost": 0.0,
            "call_total_cost": 0.0,
        }

    def _opik_usage(self, *, input_tokens: int, output_tokens: int, total_tokens: int) -> dict[str, int]:
        # Opik dashboard expects OpenAI-style keys
        return {
            "prompt_tokens": int(input_tokens),
            "completion_tokens": int(output_tokens),
            "total_tokens": int(total_tokens),
        }

    def _annotate_span(self, **kwargs: Any) -> None:
        """Attach provider/usage metadata to the current Opik span, if one is active."""
        annotate_current_span(**kwargs)

    async def aclose(self) -> None:
        """Release network resources held by the client."""
        close = getattr(self.client, "aclose", None) or getattr(self.client, "close", None)
        if close is not None:
            await close()

    @abstractmethod
    async def call_structured(
        self,
        *,
        system_text: str,
        user_text: str,
        response_model: type[ModelT],
        task: GenerationTask,
        extra_trace_meta: dict[str, Any] | None = None,
    ) -> tuple[ModelT, dict[str, Any]]:
        """Run one call and return (parsed_model, normalized_meta).

        Args:
            system_text: System prompt text
            user_text: Rendered user prompt
            response_model: Pydantic model for structured output
            task: Which generation task this call serves (for logging / fixtures)
            extra_trace_meta: Optional extra metadata for tracing/logging

        Returns:
            Tuple of (parsed response model, normalized metadata dict)

        Raises:
            GenerationNetworkError: Transport or API failure
            MalformedResponseError: Payload could not be decoded/validated
        """

        raise NotImplementedError
