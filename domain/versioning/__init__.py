"""
Versioning: pruning to the selected subset, translation restriction,
lineage-aware naming, and SavedSubProject assembly.
"""

from domain.versioning.models import Project, SavedSubProject
from domain.versioning.naming import lineage_of, resolve_version_name, strip_version_suffix
from domain.versioning.prepare import new_subproject_id, prepare_save
from domain.versioning.pruning import hierarchy_ids, prune_hierarchy, restrict_translations

__all__ = [
    "Project",
    "SavedSubProject",
    "prepare_save",
    "new_subproject_id",
    "prune_hierarchy",
    "hierarchy_ids",
    "restrict_translations",
    "strip_version_suffix",
    "lineage_of",
    "resolve_version_name",
]
