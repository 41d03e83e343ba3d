"""
Prompt management: loading from disk and Opik integration.

Handles:
- Loading prompt templates from filesystem (shared, with per-provider overrides)
- Optional registration in Opik prompt library
- Mustache-style template rendering
"""

from infrastructure.prompting.manager import (
    LocalPrompt,
    PromptManager,
    PromptObj,
    PromptRole,
)

__all__ = [
    "PromptManager",
    "PromptRole",
    "PromptObj",
    "LocalPrompt",
]
