"""Opik span helpers."""

from typing import Any

from opik import opik_context


def annotate_current_span(**kwargs: Any) -> None:
    """Update the active Opik span; no-op when tracing is disabled or no span is open."""
    if opik_context.get_current_span_data() is None:
        return
    opik_context.update_current_span(**kwargs)
