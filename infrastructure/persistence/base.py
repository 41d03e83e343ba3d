"""Abstract persistence interface for projects and saved sub-projects."""

from abc import ABC, abstractmethod

from domain.versioning.models import Project, SavedSubProject


class PersistenceService(ABC):
    """
    Storage for Project and SavedSubProject records, keyed by opaque identifiers.

    All implementations raise PersistenceError on failure, with a message fit to
    show the user verbatim.
    """

    @abstractmethod
    async def insert_project(self, name: str) -> Project:
        """Create a new parent project and return the stored record."""
        raise NotImplementedError

    @abstractmethod
    async def list_projects(self) -> list[Project]:
        """Return all projects, most recently updated first."""
        raise NotImplementedError

    @abstractmethod
    async def insert_subproject(self, subproject: SavedSubProject) -> SavedSubProject:
        """Store a saved sub-project and return the stored record (the confirmation)."""
        raise NotImplementedError

    @abstractmethod
    async def list_subprojects(self, parent_project_id: str) -> list[SavedSubProject]:
        """Return the sub-projects saved under `parent_project_id`, newest first."""
        raise NotImplementedError

    async def aclose(self) -> None:
        return None
