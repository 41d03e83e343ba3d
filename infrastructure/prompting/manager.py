"""
Prompt loading and management.
Handles loading prompts from disk and optionally registering them in the Opik prompt library.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, TypeAlias

import opik
from opik import Prompt, PromptType

from infrastructure.config.models import Provider, WorkbenchConfig
from infrastructure.constants import SHARED_PROMPTS_DIRNAME
from infrastructure.io import ensure_exists, read_text

logger = logging.getLogger(__name__)


class PromptRole(Enum):
    """Which prompt template a generation call needs."""

    SYSTEM = "system"
    HIERARCHY = "hierarchy"
    TERMS = "terms"
    TRANSLATE = "translate"

    def default_relative_path(self) -> Path:
        """Return the relative prompt path, matching the on-disk directory structure."""
        if self is PromptRole.SYSTEM:
            # prompts/<provider|shared>/system/keyword-strategist.txt
            return Path("system") / "keyword-strategist.txt"
        if self is PromptRole.HIERARCHY:
            return Path("user") / "hierarchy" / "generate-hierarchy.txt"
        if self is PromptRole.TERMS:
            return Path("user") / "terms" / "generate-terms.txt"
        if self is PromptRole.TRANSLATE:
            return Path("user") / "translate" / "translate-batch.txt"

        raise ValueError(f"Unsupported role: {self}")


@dataclass(frozen=True)
class LocalPrompt:
    """Lightweight prompt wrapper for disk-only prompting (no Opik prompt library writes)."""

    name: str
    prompt: str
    metadata: dict[str, Any]

    def format(self, **kwargs: Any) -> str:
        """Format the prompt template with variables using Mustache syntax."""
        rendered = self.prompt
        for k in sorted(kwargs, key=lambda x: len(str(x)), reverse=True):
            v = str(kwargs[k])
            # Try exact match first (faster)
            placeholder = f"{{{{{k}}}}}"
            if placeholder in rendered:
                rendered = rendered.replace(placeholder, v)
            else:
                # Fallback to regex for whitespace tolerance
                pattern = re.compile(r"\{\{\s*" + re.escape(str(k)) + r"\s*\}\}")
                rendered = pattern.sub(lambda _m, v=v: v, rendered)
        return rendered


PromptObj: TypeAlias = Prompt | LocalPrompt


class PromptManager:
    """
    Manages prompt loading from disk and (optionally) registers them in the Opik prompt library.

    Prompts are organized as:
        prompts/
        ├─ shared/
        │  ├─ system/keyword-strategist.txt
        │  └─ user/<hierarchy|terms|translate>/<template>.txt
        └─ <provider>/          (optional per-provider overrides, same layout)

    A provider-specific file wins over the shared one.
    """

    def __init__(self, prompts_root: Path):
        self.prompts_root = prompts_root
        self._client: opik.Opik | None = None
        self._cache: dict[tuple[str, str, str, int, bool], PromptObj] = {}

    @property
    def client(self) -> opik.Opik:
        # Only needed for prompt-library reads/writes.
        if self._client is None:
            self._client = opik.Opik()
        return self._client

    def _get_prompt_path(
        self,
        provider: Provider,
        role: PromptRole,
        override_path: Path | None = None,
    ) -> Path:
        if override_path is not None:
            return override_path
        rel = role.default_relative_path()
        provider_path = self.prompts_root / provider.value / rel
        if provider_path.exists():
            return provider_path
        return self.prompts_root / SHARED_PROMPTS_DIRNAME / rel

    def _make_opik_prompt_name(self, provider: Provider, role: PromptRole, path: Path) -> str:
        """
        Build a stable Opik prompt name derived from provider, role, and relative path.

        Format:
          {provider}.{role}.{relative_path_with_dots}
        """
        p = path.resolve()
        rel_str = p.as_posix()
        for base in (self.prompts_root / provider.value, self.prompts_root / SHARED_PROMPTS_DIRNAME):
            try:
                rel_str = p.relative_to(base.resolve()).as_posix()
                break
            except ValueError:
                continue

        rel_str = rel_str.removesuffix(".txt")
        rel_str = rel_str.replace("/", ".")
        return f"{provider.value}.{role.value}.{rel_str}"

    def get_prompt(
        self,
        provider: Provider,
        role: PromptRole,
        cfg: WorkbenchConfig,
        override_path: Path | None = None,
    ) -> PromptObj:
        """
        Load a prompt from disk and (optionally) register it in the Opik prompt library.

        Args:
            provider: Provider whose override directory is checked first
            role: Prompt role to resolve the relative path
            cfg: Runtime configuration
            override_path: If provided, use this file instead of the provider/shared path

        Returns:
            PromptObj implementing the minimal prompt interface (`name`, `prompt`, `metadata`, `format`)

        Raises:
            FileNotFoundError: if the resolved prompt file does not exist.
            ValueError: for failures during optional Opik registration
        """
        prompt_path = self._get_prompt_path(provider, role, override_path)
        ensure_exists(prompt_path, f"{provider.value}:{role.value}-prompt")
        mtime_ns = prompt_path.stat().st_mtime_ns

        cache_key = (
            provider.value,
            role.value,
            str(prompt_path),
            mtime_ns,
            cfg.prompts_register_in_opik,
        )

        if cache_key in self._cache:
            return self._cache[cache_key]

        prompt_text = read_text(prompt_path)
        prompt_name = self._make_opik_prompt_name(provider, role, prompt_path)

        metadata = {
            "provider": provider.value,
            "role": role.value,
            "source_path": str(prompt_path),
            "model": cfg.model,
        }

        if cfg.prompts_register_in_opik:
            # Creates/versions the prompt in the Opik prompt library.
            try:
                prompt_obj: PromptObj = Prompt(
                    name=prompt_name,
                    prompt=prompt_text,
                    type=PromptType.MUSTACHE,
                    metadata=metadata,
                )
            except Exception as e:
                raise ValueError(f"Failed to create/register prompt '{prompt_name}' in Opik prompt library.") from e
        else:
            prompt_obj = LocalPrompt(name=prompt_name, prompt=prompt_text, metadata=metadata)

        self._cache[cache_key] = prompt_obj
        logger.info("Loaded %s prompt from %s as %s", role.value, prompt_path, prompt_name)
        return prompt_obj

    def load_prompt(self, name: str, commit: str | None = None) -> Any:
        # Optional helper to fetch a specific prompt version from Opik.
        if commit:
            return self.client.get_prompt(name=name, commit=commit)
        return self.client.get_prompt(name=name)
