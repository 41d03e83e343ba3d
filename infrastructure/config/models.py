"""Configuration models (Pydantic classes)."""

from enum import Enum
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator

from domain.taxonomy.normalizer import KeywordTaxonomy
from infrastructure.constants import PROMPTS_DIR, PROVIDERS_DIR, STORAGE_FILE, TAXONOMY_FILE


class Provider(str, Enum):
    """Supported generation providers."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    OLLAMA = "ollama"
    MOCK = "mock"


class OpenAIConfig(BaseModel):
    """OpenAI-specific configuration."""

    service_tier: str | None = None
    temperature: int | float | None = None
    prompt_cache_key: str | None = None
    prompt_cache_retention: str | None = None
    timeout_s: float = 120.0


class AnthropicConfig(BaseModel):
    """Anthropic-specific configuration."""

    service_tier: str | None = None
    temperature: int | float | None = None
    max_tokens: int = 16000
    betas: list[str] = Field(default_factory=list)
    cache_ttl: str | None = None
    timeout_s: float = 300.0


class OllamaConfig(BaseModel):
    """Ollama (local inference) configuration."""

    base_url: str = "http://localhost:11434"
    timeout_s: float = 300.0
    temperature: float | None = None
    seed: int | None = None
    num_ctx: int | None = None
    top_p: float | None = None
    top_k: int | None = None
    num_predict: int | None = None
    keep_alive: str | None = None
    think: bool | None = None


class MockConfig(BaseModel):
    """Mock provider settings (no network)."""

    latency_s: float = 0.0


class ProviderModelConfig(BaseModel):
    """Per-model configuration and pricing."""

    params: dict[str, Any] = Field(default_factory=dict)
    pricing: dict[str, Any] = Field(default_factory=dict)


class ProviderConfig(BaseModel):
    """Provider-level configuration."""

    provider: Provider
    models: dict[str, ProviderModelConfig]


class ModelPricingOpenAI(BaseModel):
    """OpenAI pricing structure."""

    input_per_1m: float
    cached_input_per_1m: float
    output_per_1m: float

    @property
    def input_cost_per_token(self) -> float:
        return self.input_per_1m / 1_000_000

    @property
    def cached_input_cost_per_token(self) -> float:
        return self.cached_input_per_1m / 1_000_000

    @property
    def output_cost_per_token(self) -> float:
        return self.output_per_1m / 1_000_000


class ModelPricingAnthropic(BaseModel):
    """Anthropic pricing structure with prompt caching tiers."""

    input_per_1m: float
    output_per_1m: float
    cache_write_5m_per_1m: float
    cache_write_1h_per_1m: float
    cache_read_per_1m: float

    @property
    def input_cost_per_token(self) -> float:
        return self.input_per_1m / 1_000_000

    @property
    def output_cost_per_token(self) -> float:
        return self.output_per_1m / 1_000_000

    @property
    def cache_write_5m_cost_per_token(self) -> float:
        return self.cache_write_5m_per_1m / 1_000_000

    @property
    def cache_write_1h_cost_per_token(self) -> float:
        return self.cache_write_1h_per_1m / 1_000_000

    @property
    def cache_read_cost_per_token(self) -> float:
        return self.cache_read_per_1m / 1_000_000


class StorageConfig(BaseModel):
    """Where saved projects and sub-projects live."""

    backend: Literal["json", "memory"] = "json"
    path: Path = Field(default_factory=lambda: STORAGE_FILE)


class GenerationConfig(BaseModel):
    """Knobs passed into prompt templates."""

    target_language: str = Field(default="Chinese", description="Language for batch translations.")
    min_new_terms: int = Field(default=10, ge=1, description="Minimum new LSI terms requested per augmentation.")


class WorkbenchConfig(BaseModel):
    """
    Runtime configuration.
    - Loaded from workbench.yaml
    - Validated and enriched by configuration loader
    - Consumed by provider adapters, the prompt manager and the workbench session
    """

    provider: Provider = Field(default=Provider.OPENAI, description="Generation provider backend to use.")
    model: str = Field(..., description="Model identifier for the selected provider.")

    # Prompt handling
    prompts_root: Path = Field(
        default_factory=lambda: PROMPTS_DIR,
        description="Root directory containing shared and provider-specific prompt templates.",
    )
    prompts_register_in_opik: bool = Field(
        default=False,
        description="Register prompts in Opik library. If False, load from disk only.",
    )

    # Provider config (resolved by loader)
    openai: OpenAIConfig | None = None
    anthropic: AnthropicConfig | None = None
    ollama: OllamaConfig | None = None
    mock: MockConfig | None = None

    # Taxonomy (resolved by loader)
    taxonomy_file: Path = Field(default_factory=lambda: TAXONOMY_FILE)
    taxonomy: KeywordTaxonomy = Field(default_factory=KeywordTaxonomy)

    # Provider models directory + selected model block (resolved by loader)
    providers_dir: Path = Field(default_factory=lambda: PROVIDERS_DIR)
    provider_model: ProviderModelConfig = Field(default_factory=ProviderModelConfig)

    storage: StorageConfig = Field(default_factory=StorageConfig)
    generation: GenerationConfig = Field(default_factory=GenerationConfig)

    @model_validator(mode="after")
    def _validate(self) -> "WorkbenchConfig":
        if not self.model.strip():
            raise ValueError("model must be a non-empty string")

        # Local providers run fine on defaults; hosted ones need their params block.
        if self.provider is Provider.OLLAMA and self.ollama is None:
            self.ollama = OllamaConfig()
        if self.provider is Provider.MOCK and self.mock is None:
            self.mock = MockConfig()
        if getattr(self, self.provider.value) is None:
            raise ValueError(f"Provider={self.provider.value} but its params block is missing")
        return self
