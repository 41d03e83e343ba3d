"""Addressable keyword tree with an id -> node reference index."""

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass

from domain.errors import InvalidNodeError, NodeNotFoundError
from domain.tree.models import KeywordNode, Level1Node, Level2Node, LsiTerm, NodeLevel


@dataclass(frozen=True)
class NodeRef:
    """Index entry: explicit parent back-reference and ordered child ids."""

    id: str
    level: NodeLevel
    parent_id: str | None
    child_ids: tuple[str, ...]
    node: KeywordNode


class KeywordTree:
    """
    Immutable three-level keyword tree.

    Identifiers stay path-encoded (`l1-0-l2-1-lsi-3`) because saved sub-projects
    and translation overlays are keyed by them, but structural navigation never
    parses them: every lookup goes through the index built at construction.

    The only structural change allowed after building is appending terms to a
    Level2 node, and that produces a new tree (see `with_level2_terms`).
    """

    __slots__ = ("_roots", "_index")

    def __init__(self, roots: Iterable[Level1Node] = ()) -> None:
        self._roots: tuple[Level1Node, ...] = tuple(roots)
        self._index: dict[str, NodeRef] = {}
        for l1 in self._roots:
            self._add(l1.id, NodeLevel.LEVEL1, None, tuple(c.id for c in l1.children), l1)
            for l2 in l1.children:
                self._add(l2.id, NodeLevel.LEVEL2, l1.id, tuple(t.id for t in l2.terms), l2)
                for term in l2.terms:
                    self._add(term.id, NodeLevel.TERM, l2.id, (), term)

    def _add(
        self,
        node_id: str,
        level: NodeLevel,
        parent_id: str | None,
        child_ids: tuple[str, ...],
        node: KeywordNode,
    ) -> None:
        if node_id in self._index:
            raise ValueError(f"Duplicate node id in keyword tree: {node_id!r}")
        self._index[node_id] = NodeRef(id=node_id, level=level, parent_id=parent_id, child_ids=child_ids, node=node)

    # ---- read access ----

    @property
    def roots(self) -> tuple[Level1Node, ...]:
        return self._roots

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._index

    def __len__(self) -> int:
        return len(self._index)

    def __iter__(self) -> Iterator[str]:
        """Node ids in depth-first document order."""
        return iter(self._index)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KeywordTree):
            return NotImplemented
        return self._roots == other._roots

    def __hash__(self) -> int:
        return hash(self._roots)

    def __repr__(self) -> str:
        return f"KeywordTree(level1={len(self._roots)}, nodes={len(self._index)})"

    def ref(self, node_id: str) -> NodeRef:
        try:
            return self._index[node_id]
        except KeyError:
            raise NodeNotFoundError(node_id) from None

    def node(self, node_id: str) -> KeywordNode:
        return self.ref(node_id).node

    def level_of(self, node_id: str) -> NodeLevel:
        return self.ref(node_id).level

    def parent_id(self, node_id: str) -> str | None:
        return self.ref(node_id).parent_id

    def child_ids(self, node_id: str) -> tuple[str, ...]:
        return self.ref(node_id).child_ids

    def ancestor_ids(self, node_id: str) -> list[str]:
        """Ancestors from the direct parent up to the root."""
        out: list[str] = []
        parent = self.ref(node_id).parent_id
        while parent is not None:
            out.append(parent)
            parent = self._index[parent].parent_id
        return out

    def descendant_ids(self, node_id: str) -> list[str]:
        """All descendants at any depth, in document order."""
        out: list[str] = []
        stack = list(reversed(self.ref(node_id).child_ids))
        while stack:
            current = stack.pop()
            out.append(current)
            stack.extend(reversed(self._index[current].child_ids))
        return out

    def level1(self, node_id: str) -> Level1Node:
        node = self.node(node_id)
        if not isinstance(node, Level1Node):
            raise InvalidNodeError(f"Expected a Level1 node, got {type(node).__name__} for {node_id!r}")
        return node

    def level2(self, node_id: str) -> Level2Node:
        node = self.node(node_id)
        if not isinstance(node, Level2Node):
            raise InvalidNodeError(f"Expected a Level2 node, got {type(node).__name__} for {node_id!r}")
        return node

    def term(self, node_id: str) -> LsiTerm:
        node = self.node(node_id)
        if not isinstance(node, LsiTerm):
            raise InvalidNodeError(f"Expected an LSI term, got {type(node).__name__} for {node_id!r}")
        return node

    def text_of(self, node_id: str) -> str:
        node = self.node(node_id)
        return node.text if isinstance(node, LsiTerm) else node.keyword

    # ---- derivation ----

    def with_level2_terms(self, level2_id: str, terms: Sequence[LsiTerm]) -> "KeywordTree":
        """Return a new tree where one Level2 node's terms are replaced; all else is shared."""
        target = self.level2(level2_id)
        parent_id = self._index[level2_id].parent_id
        new_l2 = target.model_copy(update={"terms": tuple(terms)})

        roots: list[Level1Node] = []
        for l1 in self._roots:
            if l1.id != parent_id:
                roots.append(l1)
                continue
            children = tuple(new_l2 if c.id == level2_id else c for c in l1.children)
            roots.append(l1.model_copy(update={"children": children}))
        return KeywordTree(roots)
