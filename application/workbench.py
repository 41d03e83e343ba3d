"""
Async keyword workbench session.

Owns the live tree, selection, translation overlay and per-node augmentation
bookkeeping for one user session. Every state object is immutable and replaced by
a single attribute assignment, so readers never observe a half-applied update even
while generation, augmentation and translation calls are outstanding on the same
event loop.
"""

import asyncio
import logging
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from application.generation import KeywordGenerationService
from application.saving import SaveRequest, validate_save_request
from domain.augmentation import build_term_context, merge_terms
from domain.errors import (
    AugmentationError,
    AugmentationInProgressError,
    GenerationError,
    NoTreeError,
    SaveValidationError,
    TranslationError,
)
from domain.filtering import FilterCriteria, apply_filter
from domain.selection import SelectionSet, TriState, effective_state, reconcile, toggle
from domain.taxonomy import KeywordTaxonomy
from domain.tree import KeywordTree, NodeLevel, build_tree
from domain.versioning import SavedSubProject, prepare_save, prune_hierarchy
from infrastructure.observability.logging import clear_node_context, set_log_context
from infrastructure.persistence.base import PersistenceService

logger = logging.getLogger(__name__)


class KeywordWorkbench:
    """
    One curation session over a generated keyword tree.

    Typical flow:
        await wb.generate("linen sheets, cooling bedding")
        wb.toggle("l1-0", True)
        await asyncio.gather(wb.augment("l1-0-l2-0"), wb.augment("l1-1-l2-2"))
        await wb.translate()
        await wb.save(SaveRequest(name="Bedding Keywords", parent_project_id=pid))
    """

    def __init__(
        self,
        generator: KeywordGenerationService,
        persistence: PersistenceService,
        *,
        taxonomy: KeywordTaxonomy | None = None,
    ) -> None:
        self.generator = generator
        self.persistence = persistence
        self.taxonomy = taxonomy or generator.cfg.taxonomy

        self._tree: KeywordTree | None = None
        self._selection = SelectionSet()
        self._translations: Mapping[str, str] = MappingProxyType({})
        # level2 id -> term ids added by its latest augmentation (display-only highlight)
        self._recently_added: Mapping[str, frozenset[str]] = MappingProxyType({})
        self._node_errors: Mapping[str, str] = MappingProxyType({})
        self._in_flight: frozenset[str] = frozenset()
        # version lookup and insert must not interleave between saves
        self._save_lock = asyncio.Lock()

        self.seed_keywords = ""
        self.instructions = ""
        self.core_user_intent = ""
        self.model_used: str | None = None

    # ---- read-only state -------------------------------------------------

    @property
    def tree(self) -> KeywordTree | None:
        return self._tree

    @property
    def selection(self) -> SelectionSet:
        return self._selection

    @property
    def selection_count(self) -> int:
        return len(self._selection)

    @property
    def translations(self) -> Mapping[str, str]:
        return self._translations

    def _require_tree(self) -> KeywordTree:
        if self._tree is None:
            raise NoTreeError("Generate a keyword map first.")
        return self._tree

    # ---- generation ------------------------------------------------------

    async def generate(self, seed_keywords: str, instructions: str = "") -> KeywordTree:
        """
        Generate and install a fresh keyword tree.

        On success the selection, translations, highlights and node errors are reset.
        On failure the previous session state is left untouched.

        Raises:
            ValueError: If `seed_keywords` is blank
            GenerationError: Network or malformed-payload failure
        """
        if not seed_keywords or not seed_keywords.strip():
            raise ValueError("Seed keywords must not be empty.")

        response = await self.generator.generate_hierarchy(seed_keywords, instructions)
        tree = build_tree(response, self.taxonomy)

        self._tree = tree
        self._selection = SelectionSet()
        self._translations = MappingProxyType({})
        self._recently_added = MappingProxyType({})
        self._node_errors = MappingProxyType({})
        self.seed_keywords = seed_keywords.strip()
        self.instructions = instructions.strip()
        self.core_user_intent = response.core_user_intent
        # Later term and translation calls, and saves, report this model.
        self.model_used = self.generator.model_name

        logger.info("Installed keyword tree with %d nodes (%d core keywords)", len(tree), len(tree.roots))
        return tree

    # ---- selection -------------------------------------------------------

    def toggle(self, node_id: str, checked: bool) -> SelectionSet:
        """Check or uncheck a node with full cascade; returns the new selection."""
        self._selection = toggle(self._require_tree(), self._selection, node_id, checked)
        return self._selection

    def effective_state(self, node_id: str) -> TriState:
        return effective_state(self._require_tree(), self._selection, node_id)

    def clear_selection(self) -> None:
        self._selection = SelectionSet()

    # ---- augmentation ----------------------------------------------------

    def is_augmenting(self, level2_id: str) -> bool:
        return level2_id in self._in_flight

    def node_error(self, node_id: str) -> str | None:
        return self._node_errors.get(node_id)

    def recently_added(self, level2_id: str) -> tuple[str, ...]:
        """Term ids from the latest augmentation of `level2_id`, in tree order."""
        added = self._recently_added.get(level2_id, frozenset())
        tree = self._tree
        if tree is None or level2_id not in tree:
            return ()
        return tuple(t for t in tree.child_ids(level2_id) if t in added)

    def is_new(self, term_id: str) -> bool:
        tree = self._tree
        if tree is None or term_id not in tree:
            return False
        parent = tree.parent_id(term_id)
        return parent is not None and term_id in self._recently_added.get(parent, frozenset())

    async def augment(self, level2_id: str) -> tuple[str, ...]:
        """
        Ask for more LSI terms for one Level2 node and merge the new ones.

        Different nodes may be augmented concurrently; each result merges into the
        tree current at completion time. A result whose node no longer exists (the
        tree was regenerated) is dropped.

        Returns:
            Ids of the terms actually appended (empty when all were duplicates)

        Raises:
            NoTreeError: No tree generated yet
            NodeNotFoundError / InvalidNodeError: Unknown or non-Level2 id
            AugmentationInProgressError: A request for this node is outstanding
            AugmentationError: The generation call failed; recorded as a node error
        """
        tree = self._require_tree()
        tree.level2(level2_id)
        if level2_id in self._in_flight:
            raise AugmentationInProgressError(level2_id)

        context = build_term_context(
            tree,
            level2_id,
            seed_keywords=self.seed_keywords,
            instructions=self.instructions,
        )
        self._in_flight = self._in_flight | {level2_id}
        self._node_errors = MappingProxyType({k: v for k, v in self._node_errors.items() if k != level2_id})
        set_log_context(node_id=level2_id)
        try:
            candidates = await self.generator.generate_terms(context)
        except GenerationError as e:
            self._node_errors = MappingProxyType({**self._node_errors, level2_id: str(e)})
            logger.warning("Augmentation failed for %s: %s", level2_id, e)
            raise AugmentationError(level2_id, str(e)) from e
        finally:
            self._in_flight = self._in_flight - {level2_id}
            clear_node_context()

        current = self._tree
        if current is None or level2_id not in current or current.level_of(level2_id) is not NodeLevel.LEVEL2:
            logger.info("Dropping stale augmentation result for %s (node no longer in tree)", level2_id)
            return ()

        merge = merge_terms(current, level2_id, candidates)
        self._tree = merge.tree
        # New terms start unchecked; ancestors checked over the old term list must drop out.
        self._selection = reconcile(merge.tree, self._selection, level2_id)
        self._recently_added = MappingProxyType({**self._recently_added, level2_id: frozenset(merge.added_ids)})
        return merge.added_ids

    # ---- translation -----------------------------------------------------

    def _selected_ids(self, scope: Iterable[str]) -> list[str]:
        return [node_id for node_id in scope if node_id in self._selection]

    async def translate(self, node_ids: Iterable[str] | None = None) -> dict[str, str]:
        """
        Translate node texts and merge them into the overlay.

        `node_ids=None` translates every selected node. Identical texts are sent once.
        Nothing is applied when the call fails.

        Returns:
            The overlay entries added by this call (node id -> translation)

        Raises:
            NoTreeError: No tree generated yet
            NodeNotFoundError: An explicit id is not in the tree
            TranslationError: The generation call failed
        """
        tree = self._require_tree()
        if node_ids is None:
            ids = self._selected_ids(tree)
        else:
            ids = list(dict.fromkeys(node_ids))
            for node_id in ids:
                tree.ref(node_id)
        if not ids:
            logger.info("Nothing to translate")
            return {}

        texts = {node_id: tree.text_of(node_id) for node_id in ids}
        try:
            mapping = await self.generator.translate_many(list(texts.values()))
        except GenerationError as e:
            logger.warning("Translation failed for %d nodes: %s", len(ids), e)
            raise TranslationError(f"Translation failed: {e}") from e

        # The tree may have been regenerated meanwhile; only apply to nodes whose text is unchanged.
        current = self._tree
        added: dict[str, str] = {}
        for node_id, text in texts.items():
            if text not in mapping or current is None or node_id not in current:
                continue
            if current.text_of(node_id) != text:
                continue
            added[node_id] = mapping[text]

        self._translations = MappingProxyType({**self._translations, **added})
        logger.info("Applied %d translations (%d requested)", len(added), len(ids))
        return added

    async def translate_level1(self, level1_id: str) -> dict[str, str]:
        """Translate the selected nodes inside one Level1 subtree."""
        tree = self._require_tree()
        tree.level1(level1_id)
        scope = [level1_id, *tree.descendant_ids(level1_id)]
        return await self.translate(self._selected_ids(scope))

    # ---- views -----------------------------------------------------------

    def filtered(self, criteria: FilterCriteria) -> KeywordTree:
        return apply_filter(self._require_tree(), criteria, self.taxonomy)

    def suggest_subproject_name(self) -> str:
        """Default save name: "{keyword} - {category}" of the first core keyword with anything selected."""
        tree = self._require_tree()
        for root in tree.roots:
            if effective_state(tree, self._selection, root.id) is not TriState.UNCHECKED:
                return f"{root.keyword} - {root.category.value}"
        return ""

    # ---- save ------------------------------------------------------------

    async def save(self, request: SaveRequest) -> SavedSubProject:
        """
        Prune to the selection and store it as a versioned sub-project.

        Validation happens before any persistence call. The live tree, selection
        and translations are never modified, so a failed save can simply be retried.

        Raises:
            NoTreeError: No tree generated yet
            SaveValidationError: Invalid request or empty selection
            PersistenceError: The persistence service failed (message is user-facing)
        """
        tree = self._require_tree()
        selection = self._selection
        translations = dict(self._translations)

        validate_save_request(request)
        if not prune_hierarchy(tree, selection):
            raise SaveValidationError("No keywords selected to save.")

        if request.create_new_project:
            project = await self.persistence.insert_project(request.new_project_name.strip())
            parent_project_id = project.id
        else:
            parent_project_id = (request.parent_project_id or "").strip()

        async with self._save_lock:
            existing = await self.persistence.list_subprojects(parent_project_id)
            subproject = prepare_save(
                tree,
                selection,
                translations,
                request.name,
                parent_project_id,
                existing=existing,
                model_used=self.model_used or "Unknown",
            )
            stored = await self.persistence.insert_subproject(subproject)
        logger.info(
            "Saved sub-project %r (%d core keywords, %d translations) under %s",
            stored.name,
            len(stored.pruned_hierarchy),
            len(stored.translations),
            parent_project_id,
        )
        return stored
