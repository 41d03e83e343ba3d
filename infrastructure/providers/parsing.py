"""Decode JSON payloads out of free-text model responses."""

import json
import re
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from domain.errors import MalformedResponseError

ModelT = TypeVar("ModelT", bound=BaseModel)

_JSON_FENCE_RE = re.compile(r"```json\s*\n?(.*?)\n?```", re.DOTALL | re.IGNORECASE)
_ANY_FENCE_RE = re.compile(r"```\s*\n?(.*?)\n?```", re.DOTALL)
_THINK_RE = re.compile(r"<think>.*?</think>", re.DOTALL | re.IGNORECASE)


def _span(text: str, open_ch: str, close_ch: str) -> str | None:
    start = text.find(open_ch)
    end = text.rfind(close_ch)
    if start == -1 or end <= start:
        return None
    return text[start : end + 1]


def extract_json_payload(text: str) -> Any:
    """
    Pull one JSON value (object or array) out of a model response.

    Strategies, strict to loose:
        1. ```json fenced block, then any fenced block
        2. the whole (trimmed) text
        3. the outermost {...} span, then the outermost [...] span

    Raises:
        MalformedResponseError: If no strategy yields valid JSON
    """
    if not text or not text.strip():
        raise MalformedResponseError("Empty response from generation service.")

    cleaned = _THINK_RE.sub("", text).strip()
    candidates: list[str] = []
    for pattern in (_JSON_FENCE_RE, _ANY_FENCE_RE):
        m = pattern.search(cleaned)
        if m:
            candidates.append(m.group(1).strip())
    candidates.append(cleaned)
    for open_ch, close_ch in (("{", "}"), ("[", "]")):
        span = _span(cleaned, open_ch, close_ch)
        if span is not None:
            candidates.append(span)

    for candidate in candidates:
        try:
            return json.loads(candidate)
        except json.JSONDecodeError:
            continue

    preview = cleaned[:200]
    raise MalformedResponseError(f"Response did not contain valid JSON. Raw text (truncated): {preview!r}")


def parse_response(raw_text: str, response_model: type[ModelT]) -> ModelT:
    """Decode and validate a free-text response against `response_model`."""
    payload = extract_json_payload(raw_text)
    try:
        return response_model.model_validate(payload)
    except ValidationError as e:
        raise MalformedResponseError(
            f"Response JSON does not match {response_model.__name__}: {e.error_count()} validation error(s)"
        ) from e
