"""
Infrastructure layer: External dependencies and I/O boundaries.

Contains adapters for:
- Generation providers (OpenAI, Anthropic, Ollama, Mock)
- Persistence (JSON file, in-memory)
- Configuration loading (YAML, environment)
- Prompt management (disk, Opik)
- Observability (logging, tracing)

This is the only layer that performs I/O operations.
"""

# Most commonly used - exposed at top level for convenience
from infrastructure.config import (
    Provider,
    WorkbenchConfig,
    load_workbench_config,
)
from infrastructure.persistence import PersistenceService, make_persistence
from infrastructure.providers import ProviderAdapter, make_adapter

__all__ = [
    # Provider adapters (most commonly used)
    "make_adapter",
    "ProviderAdapter",
    # Persistence
    "make_persistence",
    "PersistenceService",
    # Configuration (most commonly used)
    "load_workbench_config",
    "WorkbenchConfig",
    "Provider",
]
