"""
Generation provider adapters.

Implements the adapter pattern for different model backends:
- OpenAI (Responses API structured outputs, prompt caching)
- Anthropic (JSON-schema output format, prompt caching)
- Ollama (local inference, imported lazily by the factory)
- Mock (for tests and offline runs)

All adapters implement the ProviderAdapter interface.
"""

from infrastructure.providers.anthropic import AnthropicAdapter, compute_usage_breakdown
from infrastructure.providers.base import ProviderAdapter
from infrastructure.providers.factory import make_adapter
from infrastructure.providers.mock import MockAdapter, default_hierarchy_payload
from infrastructure.providers.openai import OpenAIAdapter
from infrastructure.providers.parsing import extract_json_payload, parse_response

__all__ = [
    # Abstract base
    "ProviderAdapter",
    # Concrete implementations
    "OpenAIAdapter",
    "AnthropicAdapter",
    "MockAdapter",
    # Factory (most commonly used)
    "make_adapter",
    # Helpers
    "compute_usage_breakdown",
    "default_hierarchy_payload",
    "extract_json_payload",
    "parse_response",
]
