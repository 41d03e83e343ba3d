"""
Configuration management: models, loading, and validation.

Handles:
- WorkbenchConfig: Main session configuration
- Provider configs: OpenAI, Anthropic, Ollama, Mock settings
- Taxonomy loading from YAML
- Storage and generation settings

The loader module performs file I/O; models are pure Pydantic classes.
"""

from infrastructure.config.loader import (
    load_provider_config,
    load_taxonomy_config,
    load_workbench_config,
)
from infrastructure.config.models import (
    AnthropicConfig,
    GenerationConfig,
    MockConfig,
    ModelPricingAnthropic,
    # Pricing models
    ModelPricingOpenAI,
    OllamaConfig,
    # Provider configs
    OpenAIConfig,
    # Enums
    Provider,
    ProviderConfig,
    ProviderModelConfig,
    StorageConfig,
    # Main config
    WorkbenchConfig,
)

__all__ = [
    # Main config (most commonly used)
    "WorkbenchConfig",
    "load_workbench_config",
    # Enums
    "Provider",
    # Provider configs
    "OpenAIConfig",
    "AnthropicConfig",
    "OllamaConfig",
    "MockConfig",
    "ProviderModelConfig",
    "ProviderConfig",
    # Pricing
    "ModelPricingOpenAI",
    "ModelPricingAnthropic",
    # Session settings
    "StorageConfig",
    "GenerationConfig",
    # Loaders
    "load_provider_config",
    "load_taxonomy_config",
]
