import logging
import uuid
from datetime import datetime, timezone

from domain.errors import PersistenceError
from domain.versioning.models import Project, SavedSubProject

from .base import PersistenceService

logger = logging.getLogger(__name__)


def new_project_id() -> str:
    return f"proj-{uuid.uuid4().hex[:12]}"


class InMemoryPersistence(PersistenceService):
    """Process-local store. Used by tests and `storage.backend: memory`."""

    def __init__(
        self,
        *,
        projects: list[Project] | None = None,
        subprojects: list[SavedSubProject] | None = None,
    ) -> None:
        self._projects: dict[str, Project] = {p.id: p for p in projects or []}
        self._subprojects: dict[str, SavedSubProject] = {s.id: s for s in subprojects or []}

    async def insert_project(self, name: str) -> Project:
        name = name.strip()
        if not name:
            raise PersistenceError("Project name must not be empty.")
        now = datetime.now(timezone.utc)
        project = Project(id=new_project_id(), name=name, created_at=now, updated_at=now)
        self._projects[project.id] = project
        logger.info("Created project %s (%s)", project.id, project.name)
        return project

    async def list_projects(self) -> list[Project]:
        return sorted(self._projects.values(), key=lambda p: p.updated_at, reverse=True)

    async def insert_subproject(self, subproject: SavedSubProject) -> SavedSubProject:
        if subproject.parent_project_id not in self._projects:
            raise PersistenceError(f"Parent project {subproject.parent_project_id!r} does not exist.")
        if subproject.id in self._subprojects:
            raise PersistenceError(f"Sub-project {subproject.id!r} already exists.")
        self._subprojects[subproject.id] = subproject

        parent = self._projects[subproject.parent_project_id]
        self._projects[parent.id] = parent.model_copy(update={"updated_at": subproject.saved_at})
        logger.info("Saved sub-project %s (%s) under %s", subproject.id, subproject.name, parent.id)
        return subproject

    async def list_subprojects(self, parent_project_id: str) -> list[SavedSubProject]:
        rows = [s for s in self._subprojects.values() if s.parent_project_id == parent_project_id]
        return sorted(rows, key=lambda s: s.saved_at, reverse=True)
