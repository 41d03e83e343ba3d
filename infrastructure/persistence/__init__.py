"""
Persistence adapters for projects and saved sub-projects.

- PersistenceService: async abstract interface
- InMemoryPersistence: process-local (tests, throwaway runs)
- JsonFilePersistence: one atomically rewritten JSON document
"""

from infrastructure.persistence.base import PersistenceService
from infrastructure.persistence.factory import make_persistence
from infrastructure.persistence.json_store import JsonFilePersistence
from infrastructure.persistence.memory import InMemoryPersistence

__all__ = [
    "PersistenceService",
    "InMemoryPersistence",
    "JsonFilePersistence",
    "make_persistence",
]
