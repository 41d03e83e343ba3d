"""
Application layer: Use cases and workflow orchestration.

This layer coordinates between domain logic and infrastructure,
implementing the keyword workbench session: generation, curation,
augmentation, translation, and versioned saving.
"""

from application.generation import KeywordGenerationService, UsageTotals
from application.prompting import build_hierarchy_prompt, build_terms_prompt, build_translation_prompt
from application.saving import SaveRequest, validate_save_request
from application.serialize import (
    format_subproject_context,
    tree_to_payload,
    write_subproject,
    write_tree_snapshot,
)
from application.workbench import KeywordWorkbench

__all__ = [
    # Main session
    "KeywordWorkbench",
    "KeywordGenerationService",
    "UsageTotals",
    # Saving
    "SaveRequest",
    "validate_save_request",
    # Export utilities
    "format_subproject_context",
    "tree_to_payload",
    "write_tree_snapshot",
    "write_subproject",
    # Prompting utilities
    "build_hierarchy_prompt",
    "build_terms_prompt",
    "build_translation_prompt",
]
