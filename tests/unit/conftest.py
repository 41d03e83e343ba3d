import os

# Tracing must be off before any @track-decorated module is imported.
os.environ.setdefault("OPIK_TRACK_DISABLE", "true")

from pathlib import Path  # noqa: E402

import pytest  # noqa: E402

from domain.schemas import RawLevel1, RawLevel2  # noqa: E402
from domain.taxonomy import KeywordTaxonomy, parse_taxonomy_config  # noqa: E402
from domain.tree import KeywordTree, build_tree  # noqa: E402
from infrastructure.config.models import Provider, StorageConfig, WorkbenchConfig  # noqa: E402

REPO_ROOT = Path(__file__).resolve().parents[2]


@pytest.fixture
def taxonomy() -> KeywordTaxonomy:
    return parse_taxonomy_config(
        {
            "canonical_page_kinds": ["Product Detail", "Article", "Hub"],
            "page_kind_aliases": {
                "Product Detail Pages": "Product Detail",
                "产品详情类": "Product Detail",
                "Article / Blog Pages": "Article",
                "文章类": "Article",
                "聚合类": "Hub",
            },
            "category_aliases": {"引流型": "Traffic", "对比型": "Comparison", "转化型": "Conversion"},
        }
    )


@pytest.fixture
def raw_hierarchy() -> list[RawLevel1]:
    """Two core keywords; A has sub-cores A1 (3 terms) and A2 (2 terms), B has B1 (2 terms)."""
    return [
        RawLevel1(
            keyword="A",
            category="Traffic",
            page_kind="Article",
            children=[
                RawLevel2(keyword="A1", stage="Awareness (learn)", terms=["a1 t0", "a1 t1", "a1 t2"]),
                RawLevel2(keyword="A2", stage="Decision (compare options)", terms=["a2 t0", "a2 t1"]),
            ],
        ),
        RawLevel1(
            keyword="B",
            category="Conversion",
            page_kind="Product Detail",
            children=[
                RawLevel2(keyword="B1", stage="Action (buy)", terms=["b1 t0", "b1 t1"]),
            ],
        ),
    ]


@pytest.fixture
def tree(raw_hierarchy: list[RawLevel1]) -> KeywordTree:
    return build_tree(raw_hierarchy)


@pytest.fixture
def mock_cfg() -> WorkbenchConfig:
    return WorkbenchConfig(
        provider=Provider.MOCK,
        model="mock-model",
        prompts_root=REPO_ROOT / "prompts",
        storage=StorageConfig(backend="memory"),
    )
