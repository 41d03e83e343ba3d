"""Version-suffix naming within a sub-project lineage."""

import re
from collections.abc import Iterable

from domain.versioning.models import SavedSubProject

VERSION_SUFFIX_RE = re.compile(r"\s\(Version \d+\)$")


def strip_version_suffix(name: str) -> str:
    """
    Remove one trailing " (Version N)" suffix.

    Examples:
        >>> strip_version_suffix("Bedding Keywords (Version 3)")
        'Bedding Keywords'
        >>> strip_version_suffix("Bedding Keywords")
        'Bedding Keywords'
    """
    return VERSION_SUFFIX_RE.sub("", name.strip()).strip()


def lineage_of(base_name: str, parent_project_id: str, existing: Iterable[SavedSubProject]) -> list[SavedSubProject]:
    return [
        sp
        for sp in existing
        if sp.parent_project_id == parent_project_id and strip_version_suffix(sp.name) == base_name
    ]


def resolve_version_name(name: str, parent_project_id: str, existing: Iterable[SavedSubProject]) -> str:
    """
    Name to store for a new sub-project.

    If the exact name is already taken in its lineage (same parent, same base
    name), the result is "{base} (Version {lineage size + 1})"; otherwise the
    name is kept as given. When lineage members were deleted the computed
    version may already exist; it is then bumped to the next free number.
    """
    literal = name.strip()
    base_name = strip_version_suffix(literal)
    lineage = lineage_of(base_name, parent_project_id, existing)
    taken = {sp.name for sp in lineage}
    if literal not in taken:
        return literal

    version = len(lineage) + 1
    while f"{base_name} (Version {version})" in taken:
        version += 1
    return f"{base_name} (Version {version})"
