"""
Taxonomy management: label normalization and configuration.

Maps legacy and localized category / page-kind labels onto canonical ones.
All functions in this module are pure (no file I/O).
"""

from domain.taxonomy.loader import parse_taxonomy_config
from domain.taxonomy.normalizer import KeywordTaxonomy

__all__ = [
    "KeywordTaxonomy",
    "parse_taxonomy_config",
]
