import asyncio
import json
from pathlib import Path

import pytest

from domain.errors import PersistenceError
from domain.selection import SelectionSet, toggle
from domain.tree import KeywordTree
from domain.versioning import prepare_save
from infrastructure.config.models import StorageConfig, WorkbenchConfig
from infrastructure.persistence import InMemoryPersistence, JsonFilePersistence, make_persistence


def test_round_trip_through_the_file(tmp_path: Path, tree: KeywordTree) -> None:
    path = tmp_path / "data" / "library.json"
    store = JsonFilePersistence(path)
    selection = toggle(tree, SelectionSet(), "l1-0-l2-1", True)

    async def scenario():
        project = await store.insert_project("  Bedding ")
        sp = prepare_save(tree, selection, {"l1-0-l2-1": "决策"}, "Bedding Keywords", project.id)
        stored = await store.insert_subproject(sp)
        return project, stored

    project, stored = asyncio.run(scenario())
    assert project.name == "Bedding"

    # a second instance sees the same document
    reopened = JsonFilePersistence(path)
    projects = asyncio.run(reopened.list_projects())
    subprojects = asyncio.run(reopened.list_subprojects(project.id))

    assert [p.id for p in projects] == [project.id]
    assert projects[0].updated_at == stored.saved_at
    assert subprojects == [stored]
    assert subprojects[0].translations == {"l1-0-l2-1": "决策"}
    assert asyncio.run(reopened.list_subprojects("proj-other")) == []

    doc = json.loads(path.read_text(encoding="utf-8"))
    assert set(doc) == {"projects", "subprojects"}
    assert not list(path.parent.glob("*.tmp"))


def test_missing_file_reads_as_empty_library(tmp_path: Path) -> None:
    store = JsonFilePersistence(tmp_path / "nothing.json")
    assert asyncio.run(store.list_projects()) == []


@pytest.mark.parametrize("content", ["{not json", "[1, 2, 3]", '{"projects": [{"id": "p"}]}'])
def test_unreadable_library_raises_persistence_error(tmp_path: Path, content: str) -> None:
    path = tmp_path / "library.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(PersistenceError):
        asyncio.run(JsonFilePersistence(path).list_projects())


def test_library_that_is_not_utf8_raises_persistence_error(tmp_path: Path) -> None:
    path = tmp_path / "library.json"
    path.write_bytes(b"\xff\xfe{not utf8")
    with pytest.raises(PersistenceError, match="Could not read library file"):
        asyncio.run(JsonFilePersistence(path).list_projects())


@pytest.mark.parametrize("store_cls", [JsonFilePersistence, InMemoryPersistence])
def test_insert_rules(tmp_path: Path, tree: KeywordTree, store_cls) -> None:
    store = store_cls(tmp_path / "library.json") if store_cls is JsonFilePersistence else store_cls()
    selection = toggle(tree, SelectionSet(), "l1-1", True)

    async def scenario() -> None:
        with pytest.raises(PersistenceError, match="must not be empty"):
            await store.insert_project("   ")

        orphan = prepare_save(tree, selection, {}, "Orphan", "proj-missing")
        with pytest.raises(PersistenceError, match="does not exist"):
            await store.insert_subproject(orphan)

        project = await store.insert_project("Bedding")
        sp = prepare_save(tree, selection, {}, "B", project.id)
        await store.insert_subproject(sp)
        with pytest.raises(PersistenceError, match="already exists"):
            await store.insert_subproject(sp)

    asyncio.run(scenario())


def test_factory_selects_backend(tmp_path: Path, mock_cfg: WorkbenchConfig) -> None:
    assert isinstance(make_persistence(mock_cfg), InMemoryPersistence)

    cfg = mock_cfg.model_copy(update={"storage": StorageConfig(backend="json", path=tmp_path / "lib.json")})
    store = make_persistence(cfg)
    assert isinstance(store, JsonFilePersistence)
    assert store.path == tmp_path / "lib.json"
