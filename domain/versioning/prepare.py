"""Assemble a SavedSubProject from the live workbench state."""

import logging
import uuid
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone

from domain.errors import SaveValidationError
from domain.selection.state import SelectionSet
from domain.tree.tree import KeywordTree
from domain.versioning.models import SavedSubProject
from domain.versioning.naming import resolve_version_name
from domain.versioning.pruning import hierarchy_ids, prune_hierarchy, restrict_translations

logger = logging.getLogger(__name__)


def new_subproject_id() -> str:
    return f"subproj-{uuid.uuid4().hex[:12]}"


def prepare_save(
    tree: KeywordTree,
    selection: SelectionSet,
    translations: Mapping[str, str],
    name: str,
    parent_project_id: str,
    *,
    existing: Iterable[SavedSubProject] = (),
    model_used: str = "Unknown",
    saved_at: datetime | None = None,
    subproject_id: str | None = None,
) -> SavedSubProject:
    """
    Prune, restrict translations, resolve the versioned name.

    Pure with respect to its inputs: neither `tree` nor `selection` is changed.

    Args:
        tree: Live keyword tree
        selection: Current selection
        translations: Full translation overlay (node id -> text)
        name: Requested sub-project name
        parent_project_id: Parent project the sub-project is filed under
        existing: Sub-projects already stored (used for lineage lookup)
        model_used: Name of the model that generated the tree
        saved_at: Timestamp override (defaults to now, UTC)
        subproject_id: Id override (defaults to a fresh random id)

    Returns:
        SavedSubProject ready for the persistence service

    Raises:
        SaveValidationError: Blank name, missing parent, or nothing selected
    """
    if not name or not name.strip():
        raise SaveValidationError("Sub-project name is required.")
    if not parent_project_id or not parent_project_id.strip():
        raise SaveValidationError("A parent project must be selected.")

    pruned = prune_hierarchy(tree, selection)
    if not pruned:
        raise SaveValidationError("No keywords selected to save.")

    stored_name = resolve_version_name(name, parent_project_id, existing)
    if stored_name != name.strip():
        logger.info("Name %r already exists in lineage; storing as %r", name.strip(), stored_name)

    return SavedSubProject(
        id=subproject_id or new_subproject_id(),
        name=stored_name,
        parent_project_id=parent_project_id,
        saved_at=saved_at or datetime.now(timezone.utc),
        model_used=model_used,
        pruned_hierarchy=pruned,
        translations=restrict_translations(translations, sorted(hierarchy_ids(pruned))),
    )
