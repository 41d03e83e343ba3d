"""Configuration loading from YAML files."""

from pathlib import Path
from typing import Any

import yaml

from domain.taxonomy.loader import parse_taxonomy_config
from domain.taxonomy.normalizer import KeywordTaxonomy
from infrastructure.config.models import (
    GenerationConfig,
    Provider,
    ProviderConfig,
    ProviderModelConfig,
    StorageConfig,
    WorkbenchConfig,
)
from infrastructure.constants import PROMPTS_DIR, PROVIDERS_DIR, TAXONOMY_FILE

from .registry import PARAM_MODEL_BY_PROVIDER


def _load_yaml(path: Path) -> dict[str, Any]:
    """Load YAML file and return as dict."""
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Expected YAML dict in {path}, got {type(data)}")

    return data


def load_taxonomy_config(path: Path) -> KeywordTaxonomy:
    """
    Load taxonomy from YAML file.

    This function handles file I/O, then delegates parsing to domain layer.
    """
    data = _load_yaml(path)
    return parse_taxonomy_config(data)


def load_provider_config(providers_dir: Path, provider: Provider) -> ProviderConfig:
    """
    Load a provider YAML (e.g., configs/providers/openai.yaml) into a ProviderConfig.

    Args:
        providers_dir: Directory containing provider YAML files
        provider: Provider enum value

    Returns:
        ProviderConfig with models and pricing

    Raises:
        ValueError: If YAML is missing required keys or has invalid types
    """
    path = providers_dir / f"{provider.value}.yaml"
    data = _load_yaml(path)

    if "provider" not in data:
        raise ValueError(f"Provider YAML missing required key 'provider': {path}")
    try:
        file_provider = Provider(data["provider"])
    except ValueError as e:
        raise ValueError(f"Invalid provider value {data.get('provider')!r} in {path}") from e

    if file_provider is not provider:
        raise ValueError(f"Provider YAML mismatch: expected {provider.value}, got {file_provider.value} in {path}")

    models_raw = data.get("models") or {}
    if not isinstance(models_raw, dict) or not models_raw:
        raise ValueError(f"Provider YAML missing/invalid 'models' mapping: {path}")

    models: dict[str, ProviderModelConfig] = {
        str(model_name): ProviderModelConfig(
            params=dict((block or {}).get("params") or {}),
            pricing=dict((block or {}).get("pricing") or {}),
        )
        for model_name, block in models_raw.items()
    }

    return ProviderConfig(provider=file_provider, models=models)


def load_workbench_config(config_path: Path, *, provider_override: Provider | None = None) -> WorkbenchConfig:
    """
    Load workbench.yaml and construct a fully-resolved WorkbenchConfig.

    Conventions (required for adding providers):
    - The Provider enum value must match the WorkbenchConfig field name used for provider-specific params.
      Example: Provider.OPENAI.value == "openai" -> WorkbenchConfig.openai
    - This naming convention allows provider parameter models to be bound dynamically from the registry.

    Args:
        config_path: Path to workbench.yaml
        provider_override: Force a provider (e.g. the CLI --mock flag)
    """
    exp = _load_yaml(config_path)

    if "provider" not in exp and provider_override is None:
        raise ValueError("workbench.yaml missing required key: provider")
    if "model" not in exp:
        raise ValueError("workbench.yaml missing required key: model")

    provider = provider_override or Provider(str(exp["provider"]).strip().lower())
    model = str(exp["model"]).strip()

    prompts_root = Path(exp.get("prompts_root", str(PROMPTS_DIR)))
    taxonomy_file = Path(exp.get("taxonomy_file", str(TAXONOMY_FILE)))
    providers_dir = Path(exp.get("providers_dir", str(PROVIDERS_DIR)))

    taxonomy = load_taxonomy_config(taxonomy_file)

    prov_cfg = load_provider_config(providers_dir, provider)
    if model not in prov_cfg.models:
        if provider is not Provider.MOCK:
            raise KeyError(
                f"Model '{model}' not found in {providers_dir / (provider.value + '.yaml')}. "
                f"Available: {list(prov_cfg.models.keys())}"
            )
        # Mock runs accept any model name and fall back to the first block.
        provider_model = next(iter(prov_cfg.models.values()))
    else:
        provider_model = prov_cfg.models[model]

    param_model_cls = PARAM_MODEL_BY_PROVIDER.get(provider)
    if param_model_cls is None:
        raise ValueError(f"No param model registered for provider: {provider.value}")

    if provider.value not in WorkbenchConfig.model_fields:
        raise ValueError(
            f"WorkbenchConfig has no field '{provider.value}'. "
            f"Add `'{provider.value}': Optional[<YourProviderConfig>] = None` to WorkbenchConfig "
            f"(field name must match Provider.value)."
        )

    run_kwargs = {provider.value: param_model_cls(**(provider_model.params or {}))}

    return WorkbenchConfig(
        provider=provider,
        model=model,
        prompts_root=prompts_root,
        prompts_register_in_opik=bool(exp.get("prompts_register_in_opik", False)),
        taxonomy_file=taxonomy_file,
        taxonomy=taxonomy,
        providers_dir=providers_dir,
        provider_model=provider_model,
        storage=StorageConfig(**(exp.get("storage") or {})),
        generation=GenerationConfig(**(exp.get("generation") or {})),
        **run_kwargs,
    )
