"""Single-document JSON file store for projects and saved sub-projects."""

import asyncio
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from domain.errors import PersistenceError
from domain.versioning.models import Project, SavedSubProject
from infrastructure.io import read_json, write_json_atomic

from .base import PersistenceService
from .memory import new_project_id

logger = logging.getLogger(__name__)


class JsonFilePersistence(PersistenceService):
    """
    Stores everything in one JSON document:

        {"projects": [...], "subprojects": [...]}

    Each write rewrites the whole document atomically (temp file + replace). Blocking
    file I/O runs in a worker thread; an asyncio.Lock serializes read-modify-write
    cycles within one event loop.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._lock = asyncio.Lock()

    def _load(self) -> dict[str, list[dict[str, Any]]]:
        if not self.path.exists():
            return {"projects": [], "subprojects": []}
        try:
            data = read_json(self.path)
        except (OSError, ValueError) as e:
            raise PersistenceError(f"Could not read library file {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise PersistenceError(f"Library file {self.path} is not a JSON object.")
        return {
            "projects": list(data.get("projects") or []),
            "subprojects": list(data.get("subprojects") or []),
        }

    def _store(self, doc: dict[str, list[dict[str, Any]]]) -> None:
        try:
            write_json_atomic(self.path, doc)
        except OSError as e:
            raise PersistenceError(f"Could not write library file {self.path}: {e}") from e

    async def _read(self) -> dict[str, list[dict[str, Any]]]:
        return await asyncio.to_thread(self._load)

    async def _write(self, doc: dict[str, list[dict[str, Any]]]) -> None:
        await asyncio.to_thread(self._store, doc)

    @staticmethod
    def _projects(doc: dict[str, list[dict[str, Any]]]) -> list[Project]:
        try:
            return [Project.model_validate(row) for row in doc["projects"]]
        except ValidationError as e:
            raise PersistenceError(f"Corrupt project record in library file: {e}") from e

    @staticmethod
    def _subprojects(doc: dict[str, list[dict[str, Any]]]) -> list[SavedSubProject]:
        try:
            return [SavedSubProject.model_validate(row) for row in doc["subprojects"]]
        except ValidationError as e:
            raise PersistenceError(f"Corrupt sub-project record in library file: {e}") from e

    async def insert_project(self, name: str) -> Project:
        name = name.strip()
        if not name:
            raise PersistenceError("Project name must not be empty.")
        async with self._lock:
            doc = await self._read()
            now = datetime.now(timezone.utc)
            project = Project(id=new_project_id(), name=name, created_at=now, updated_at=now)
            doc["projects"].append(project.model_dump(mode="json"))
            await self._write(doc)
        logger.info("Created project %s (%s) in %s", project.id, project.name, self.path)
        return project

    async def list_projects(self) -> list[Project]:
        async with self._lock:
            doc = await self._read()
        return sorted(self._projects(doc), key=lambda p: p.updated_at, reverse=True)

    async def insert_subproject(self, subproject: SavedSubProject) -> SavedSubProject:
        async with self._lock:
            doc = await self._read()
            projects = {p.id: p for p in self._projects(doc)}
            parent = projects.get(subproject.parent_project_id)
            if parent is None:
                raise PersistenceError(f"Parent project {subproject.parent_project_id!r} does not exist.")
            if any(row.get("id") == subproject.id for row in doc["subprojects"]):
                raise PersistenceError(f"Sub-project {subproject.id!r} already exists.")

            doc["subprojects"].append(subproject.model_dump(mode="json"))
            touched = parent.model_copy(update={"updated_at": subproject.saved_at})
            doc["projects"] = [
                touched.model_dump(mode="json") if row.get("id") == parent.id else row for row in doc["projects"]
            ]
            await self._write(doc)
        logger.info("Saved sub-project %s (%s) under %s", subproject.id, subproject.name, parent.id)
        return subproject

    async def list_subprojects(self, parent_project_id: str) -> list[SavedSubProject]:
        async with self._lock:
            doc = await self._read()
        rows = [s for s in self._subprojects(doc) if s.parent_project_id == parent_project_id]
        return sorted(rows, key=lambda s: s.saved_at, reverse=True)
