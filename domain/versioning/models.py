"""Persisted record shapes: projects and saved sub-projects."""

from datetime import datetime

from pydantic import BaseModel, Field

from domain.tree.models import Level1Node


class Project(BaseModel):
    """Parent project grouping saved sub-projects."""

    id: str
    name: str
    created_at: datetime
    updated_at: datetime


class SavedSubProject(BaseModel):
    """
    A curated, pruned copy of the keyword tree.

    Guarantees for consumers:
    - every node in `pruned_hierarchy` exists, with the same id, in the tree it was saved from
    - `translations` only holds keys present in `pruned_hierarchy`
    - `name` is unique within its lineage under `parent_project_id`
    """

    id: str
    name: str
    parent_project_id: str
    saved_at: datetime
    model_used: str
    pruned_hierarchy: tuple[Level1Node, ...] = Field(default_factory=tuple)
    translations: dict[str, str] = Field(default_factory=dict)
