import asyncio

import pytest

from application.generation import KeywordGenerationService, UsageTotals
from domain.augmentation import TermContext
from domain.errors import MalformedResponseError
from domain.schemas import GenerationTask
from infrastructure.config.models import WorkbenchConfig
from infrastructure.prompting import PromptManager
from infrastructure.providers import MockAdapter, make_adapter


def _service(cfg: WorkbenchConfig, adapter: MockAdapter) -> KeywordGenerationService:
    return KeywordGenerationService(cfg, adapter, PromptManager(prompts_root=cfg.prompts_root))


def test_factory_returns_mock_adapter(mock_cfg: WorkbenchConfig) -> None:
    adapter = make_adapter(mock_cfg)
    assert isinstance(adapter, MockAdapter)
    assert adapter.model == "mock-model"

    fixtures = {GenerationTask.TERMS: {"terms": ["x"]}}
    assert make_adapter(mock_cfg, mock_fixtures=fixtures).fixtures == fixtures


def test_translate_many_dedups_and_drops_unrequested(mock_cfg: WorkbenchConfig) -> None:
    seen: list[list[str]] = []

    def translate(user_text: str, meta: dict) -> dict:
        seen.append(list(meta["texts"]))
        return {
            "items": [
                {"source": "bed", "translation": "床"},
                {"source": "sheet", "translation": "  "},
                {"source": "pillow", "translation": "枕头"},
            ]
        }

    adapter = MockAdapter(cfg=mock_cfg, fixtures={GenerationTask.TRANSLATE: translate})
    service = _service(mock_cfg, adapter)

    out = asyncio.run(service.translate_many(["bed", "sheet", "bed", " "]))

    assert seen == [["bed", "sheet"]]
    assert out == {"bed": "床"}
    assert '["bed", "sheet"]' in adapter.calls[0][1]


def test_translate_many_with_nothing_to_do_makes_no_call(mock_cfg: WorkbenchConfig) -> None:
    adapter = MockAdapter(cfg=mock_cfg)
    assert asyncio.run(_service(mock_cfg, adapter).translate_many(["", "  "])) == {}
    assert adapter.calls == []


def test_malformed_fixture_surfaces_as_malformed_response(mock_cfg: WorkbenchConfig) -> None:
    adapter = MockAdapter(cfg=mock_cfg, fixtures={GenerationTask.TERMS: {"terms": "not a list"}})
    service = _service(mock_cfg, adapter)
    ctx = TermContext(
        seed_keywords="s",
        level1_keyword="k1",
        level1_category="Traffic",
        level2_keyword="k2",
        level2_stage="Awareness",
    )
    with pytest.raises(MalformedResponseError):
        asyncio.run(service.generate_terms(ctx))


def test_usage_totals_accumulate_across_calls(mock_cfg: WorkbenchConfig) -> None:
    adapter = MockAdapter(cfg=mock_cfg)
    service = _service(mock_cfg, adapter)

    asyncio.run(service.generate_hierarchy("linen sheets"))
    asyncio.run(service.translate_many(["bed"]))

    usage = service.usage.as_dict()
    assert usage["calls"] == 2
    assert usage["total_tokens"] == usage["input_tokens"] + usage["output_tokens"] > 0
    assert usage["total_cost_usd"] == 0.0


def test_usage_totals_tolerate_missing_keys() -> None:
    totals = UsageTotals()
    totals.add({"input_tokens": 3, "call_total_cost": 0.0000014})
    totals.add({})
    assert totals.as_dict() == {
        "calls": 2,
        "input_tokens": 3,
        "output_tokens": 0,
        "total_tokens": 0,
        "total_cost_usd": 0.000001,
    }
