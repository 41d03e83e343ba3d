import logging

from infrastructure.config.models import WorkbenchConfig

from .base import PersistenceService
from .json_store import JsonFilePersistence
from .memory import InMemoryPersistence

logger = logging.getLogger(__name__)


def make_persistence(cfg: WorkbenchConfig) -> PersistenceService:
    """Create the persistence backend named by `storage.backend`."""
    backend = cfg.storage.backend
    if backend == "memory":
        logger.info("Using in-memory persistence (nothing is written to disk)")
        return InMemoryPersistence()
    if backend == "json":
        logger.info("Using JSON file persistence at %s", cfg.storage.path)
        return JsonFilePersistence(cfg.storage.path)
    raise RuntimeError(f"Unsupported storage backend: {backend}")
