"""Prompt construction utilities (pure functions)."""

import json
import logging
from collections.abc import Sequence
from typing import Any

from application.constants import NONE_PLACEHOLDER
from domain.augmentation.merger import TermContext
from infrastructure.prompting.manager import PromptObj

logger = logging.getLogger(__name__)


def _or_none(text: str) -> str:
    text = (text or "").strip()
    return text if text else NONE_PLACEHOLDER


def render_prompt(prompt: PromptObj, **variables: Any) -> str:
    """
    Format a prompt template and flatten the result to plain text.

    Raises:
        ValueError: If the template is missing a placeholder the formatter insists on
        TypeError: If the prompt formatter returns an unsupported type
    """
    try:
        rendered = prompt.format(**variables)
    except KeyError as e:
        raise ValueError(
            f"Prompt template {prompt.name!r} missing required placeholder: {e}. "
            f"Expected placeholders: {sorted(variables)}"
        ) from e

    if isinstance(rendered, str):
        return rendered

    # Handle common structured formats (e.g., OpenAI Chat messages)
    if isinstance(rendered, list):
        parts: list[str] = []
        for msg in rendered:
            if not isinstance(msg, dict):
                continue
            content: Any = msg.get("content")

            if isinstance(content, str):
                parts.append(content)
            elif isinstance(content, list):
                for block in content:
                    if isinstance(block, dict) and block.get("type") == "text" and isinstance(block.get("text"), str):
                        parts.append(block["text"])

        return "\n".join(p for p in parts if p).strip()

    raise TypeError(f"Prompt.format() returned unsupported type: {type(rendered)}")


def build_hierarchy_prompt(prompt: PromptObj, seed_keywords: str, instructions: str = "") -> str:
    """Render the topic-map prompt for a keyword seed."""
    return render_prompt(
        prompt,
        seed_keywords=seed_keywords.strip(),
        instructions=_or_none(instructions),
    )


def build_terms_prompt(prompt: PromptObj, context: TermContext, min_new_terms: int) -> str:
    """
    Render the LSI augmentation prompt for one Level2 node.

    Existing terms are listed so the generation service can avoid repeats.
    """
    existing = ", ".join(context.existing_terms)
    logger.debug("Building terms prompt for %r (%d existing terms)", context.level2_keyword, len(context.existing_terms))
    return render_prompt(
        prompt,
        seed_keywords=_or_none(context.seed_keywords),
        instructions=_or_none(context.instructions),
        level1_keyword=context.level1_keyword,
        level1_category=context.level1_category,
        level2_keyword=context.level2_keyword,
        level2_stage=context.level2_stage,
        existing_terms=_or_none(existing),
        min_new_terms=min_new_terms,
    )


def build_translation_prompt(prompt: PromptObj, texts: Sequence[str], target_language: str) -> str:
    """Render the batch translation prompt; `texts` is embedded as a JSON array."""
    return render_prompt(
        prompt,
        target_language=target_language,
        texts_json=json.dumps(list(texts), ensure_ascii=False),
    )
