import asyncio
import json

import httpx
import pytest

from domain.errors import GenerationNetworkError, MalformedResponseError
from domain.schemas import GenerationTask, TermBatch
from infrastructure.config.models import OllamaConfig, Provider, WorkbenchConfig
from infrastructure.providers.ollama import OllamaAdapter


def _adapter(handler) -> OllamaAdapter:
    cfg = WorkbenchConfig(provider=Provider.OLLAMA, model="qwen3:8b", ollama=OllamaConfig(temperature=0.2))
    client = httpx.AsyncClient(base_url="http://ollama.test", transport=httpx.MockTransport(handler))
    return OllamaAdapter(cfg=cfg, client=client, pricing=None)


def _call(adapter: OllamaAdapter):
    async def run():
        try:
            return await adapter.call_structured(
                system_text="sys",
                user_text="more terms",
                response_model=TermBatch,
                task=GenerationTask.TERMS,
            )
        finally:
            await adapter.aclose()

    return asyncio.run(run())


def test_parses_fenced_content_and_reports_usage() -> None:
    sent: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        sent.append(json.loads(request.content))
        content = '```json\n{"terms": ["linen duvet", "stonewashed linen"]}\n```'
        return httpx.Response(200, json={"message": {"content": content}, "prompt_eval_count": 40, "eval_count": 9})

    parsed, usage = _call(_adapter(handler))

    assert parsed.terms == ["linen duvet", "stonewashed linen"]
    assert usage["total_tokens"] == 49
    assert usage["call_total_cost"] == 0.0
    assert sent[0]["model"] == "qwen3:8b"
    assert sent[0]["options"] == {"temperature": 0.2}
    assert sent[0]["format"]["properties"]["terms"]["type"] == "array"


def test_http_error_is_a_network_error() -> None:
    with pytest.raises(GenerationNetworkError):
        _call(_adapter(lambda request: httpx.Response(503, text="busy")))


def test_non_json_body_is_malformed() -> None:
    with pytest.raises(MalformedResponseError):
        _call(_adapter(lambda request: httpx.Response(200, text="<html>oops</html>")))


def test_content_without_json_is_malformed() -> None:
    body = {"message": {"content": "I could not think of any."}}
    with pytest.raises(MalformedResponseError):
        _call(_adapter(lambda request: httpx.Response(200, json=body)))
