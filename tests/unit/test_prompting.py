import json

import pytest

from application.prompting import build_hierarchy_prompt, build_terms_prompt, build_translation_prompt
from domain.augmentation import build_term_context
from domain.errors import MalformedResponseError
from domain.schemas import KeywordMapResponse, TermBatch, TranslationBatch
from domain.tree import KeywordTree
from infrastructure.config.models import WorkbenchConfig
from infrastructure.prompting import PromptManager, PromptRole
from infrastructure.providers.parsing import extract_json_payload, parse_response


@pytest.fixture
def prompts(mock_cfg: WorkbenchConfig):
    manager = PromptManager(prompts_root=mock_cfg.prompts_root)
    return lambda role: manager.get_prompt(mock_cfg.provider, role, mock_cfg)


def test_hierarchy_prompt_fills_seed_and_none_placeholder(prompts) -> None:
    text = build_hierarchy_prompt(prompts(PromptRole.HIERARCHY), "  linen sheets, duvet cover ")
    assert "linen sheets, duvet cover" in text
    assert "{{" not in text
    assert "None" in text


def test_terms_prompt_lists_existing_terms(prompts, tree: KeywordTree) -> None:
    ctx = build_term_context(tree, "l1-0-l2-1", seed_keywords="linen sheets")
    text = build_terms_prompt(prompts(PromptRole.TERMS), ctx, min_new_terms=7)
    assert '"A2"' in text
    assert "a2 t0, a2 t1" in text
    assert "at least 7 new" in text
    assert "{{" not in text


def test_translation_prompt_embeds_json_array(prompts) -> None:
    text = build_translation_prompt(prompts(PromptRole.TRANSLATE), ["床单", 'say "hi"'], "English")
    assert json.dumps(["床单", 'say "hi"'], ensure_ascii=False) in text
    assert "English" in text


@pytest.mark.parametrize(
    "raw",
    [
        '{"terms": ["a", "b"]}',
        'Sure!\n```json\n{"terms": ["a", "b"]}\n```\nDone.',
        '```\n["a", "b"]\n```',
        '<think>{"terms": ["nope"]}</think>Here: {"terms": ["a", "b"]} ok',
        'Result: ["a", "b"]',
    ],
)
def test_term_batch_extracted_from_free_text(raw: str) -> None:
    assert parse_response(raw, TermBatch).terms == ["a", "b"]


def test_translation_batch_accepts_plain_mapping() -> None:
    batch = parse_response('{"bed": "床", "sheet": "床单"}', TranslationBatch)
    assert batch.as_mapping() == {"bed": "床", "sheet": "床单"}


@pytest.mark.parametrize("raw", ["", "   ", "no json here", "{broken"])
def test_unparseable_text_is_malformed(raw: str) -> None:
    with pytest.raises(MalformedResponseError):
        extract_json_payload(raw)


def test_shape_mismatch_is_malformed() -> None:
    with pytest.raises(MalformedResponseError, match="KeywordMapResponse"):
        parse_response('{"core_user_intent": "x"}', KeywordMapResponse)
