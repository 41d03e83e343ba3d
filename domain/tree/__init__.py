"""
Keyword tree: node models, the indexed tree, and the builder.

All functions in this module are pure (no file I/O).
"""

from domain.tree.models import Category, KeywordNode, Level1Node, Level2Node, LsiTerm, NodeLevel, Stage
from domain.tree.tree import KeywordTree, NodeRef
from domain.tree.builder import build_tree, level1_id, level2_id, term_id

__all__ = [
    "Category",
    "Stage",
    "NodeLevel",
    "LsiTerm",
    "Level2Node",
    "Level1Node",
    "KeywordNode",
    "KeywordTree",
    "NodeRef",
    "build_tree",
    "level1_id",
    "level2_id",
    "term_id",
]
